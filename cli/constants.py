"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

PROG_NAME = "manifest-builder"

STYLE = Style.from_dict(
    {
        "info": "ansicyan",
        "success": "ansigreen bold",
        "error": "ansired bold",
        "value": "ansiyellow",
    }
)

SYMBOLS = {
    "info": "•",
    "success": "✓",
    "error": "✗",
}

DESCRIPTION = "Split a build directory into compressed chunks and write a manifest describing them."

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_INPUT_NOT_FOUND = 3
EXIT_INIT_FAILED = 4
EXIT_GENERATION_FAILED = 5
EXIT_WRITE_FAILED = 6
