"""CLI entry point."""

import os
import sys
import time
import uuid
from pathlib import Path
from typing import Callable, List, Optional

from common.logging_config import setup_logging
from builder.exceptions import ManifestBuilderError
from builder.generator import ManifestGenerator
from builder.manifest_writer import write_manifest
from cli.constants import (
    EXIT_GENERATION_FAILED,
    EXIT_INIT_FAILED,
    EXIT_INPUT_NOT_FOUND,
    EXIT_OK,
    EXIT_USAGE,
    EXIT_WRITE_FAILED,
)
from cli.models import BuildCommand
from cli.parser import ParseError, parse_args
from cli.utils import format_count, format_duration, format_file_size, print_progress, print_status


def _print_files_found(total: int) -> None:
    print_status("info", "Found", f"{format_count(total)} files")


def run(
    command: BuildCommand,
    generator_factory: Callable[..., ManifestGenerator] = ManifestGenerator
) -> int:
    """
    Generate and write the manifest for command.input_directory.

    Args:
        command: Parsed build command
        generator_factory: Builds the ManifestGenerator (replaceable in tests)

    Returns:
        Process exit code
    """
    input_dir = Path(command.input_directory)
    if not input_dir.exists():
        print_status("error", "Directory does not exist:", str(input_dir))
        return EXIT_INPUT_NOT_FOUND

    start = time.monotonic()
    print_status("info", "Processing:", str(input_dir))

    try:
        generator = generator_factory(on_progress=print_progress, on_files_found=_print_files_found)
    except ManifestBuilderError as e:
        print_status("error", f"Failed to initialize generator: {e}")
        return EXIT_INIT_FAILED

    try:
        manifest = generator.generate(input_dir)
    except ManifestBuilderError as e:
        print_status("error", f"Generation failed: {e}")
        return EXIT_GENERATION_FAILED

    try:
        write_manifest(manifest, command.output_manifest_path)
    except ManifestBuilderError as e:
        print_status("error", f"Write failed: {e}")
        return EXIT_WRITE_FAILED

    print_status(
        "success",
        f"Generated {format_count(manifest.chunk_count)} chunks "
        f"({format_file_size(generator.chunk_size)} each) in",
        format_duration(time.monotonic() - start),
    )
    print_status("info", "Output:", str(command.output_manifest_path))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for CLI."""
    try:
        command = parse_args(argv)
    except ParseError as e:
        print_status("error", f"Error: {e}")
        sys.exit(EXIT_USAGE)

    log_level = 'DEBUG' if command.debug else os.getenv('LOG_LEVEL', 'WARNING')
    run_id = uuid.uuid4().hex[:8]
    logger = setup_logging('cli', log_level=log_level, run_id=run_id)
    setup_logging('builder', log_level=log_level, run_id=run_id)

    if command.debug:
        logger.info("Debug logging enabled")

    logger.info(f"Building manifest for {command.input_directory}")
    try:
        exit_code = run(command)
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
