"""Formatting and terminal output helpers for the CLI."""

from typing import Optional

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText

from cli.constants import STYLE, SYMBOLS


def print_status(kind: str, message: str, value: Optional[str] = None) -> None:
    """
    Print one status line: colored symbol, message, highlighted value.

    Args:
        kind: 'info', 'success' or 'error'
        message: Plain text part
        value: Optional part highlighted as a value
    """
    fragments = [(f"class:{kind}", SYMBOLS[kind]), ("", f" {message}")]
    if value is not None:
        fragments.extend([("", " "), ("class:value", value)])
    print_formatted_text(FormattedText(fragments), style=STYLE)


def print_progress(processed: int, total: int, rate: float) -> None:
    """Progress callback for the worker pool."""
    percent = processed / total * 100 if total else 100.0
    print_status(
        "info",
        f"Processed {format_count(processed)} files ({percent:.1f}%)",
        f"[{format_count(int(rate))}/s]",
    )


def format_count(n: int) -> str:
    """Format an integer with thousands separators (e.g. 1,234,567)."""
    return f"{n:,}"


def format_duration(seconds: float) -> str:
    """
    Format an elapsed time rounded to the millisecond.

    Examples: "850ms", "1.234s", "2m3.5s"
    """
    millis = round(seconds * 1000)
    if millis < 1000:
        return f"{millis}ms"
    if millis < 60_000:
        return f"{millis / 1000:g}s"
    minutes, rest = divmod(millis, 60_000)
    return f"{minutes}m{rest / 1000:g}s"


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
