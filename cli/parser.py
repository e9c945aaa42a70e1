"""Command-line argument parser."""

import argparse
from typing import List, NoReturn, Optional

from common.constants import DEFAULT_MANIFEST_PATH
from cli.constants import DESCRIPTION, PROG_NAME
from cli.models import BuildCommand


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


class _RaisingArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise ParseError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _RaisingArgumentParser(prog=PROG_NAME, description=DESCRIPTION)
    parser.add_argument(
        "-i", "--input",
        dest="input_directory",
        required=True,
        help="Path to build directory (required)",
    )
    parser.add_argument(
        "-o", "--output",
        dest="output_manifest_path",
        default=DEFAULT_MANIFEST_PATH,
        help=f"Output manifest path (default: {DEFAULT_MANIFEST_PATH})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> BuildCommand:
    """Parse command-line arguments into a BuildCommand.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:])

    Returns:
        BuildCommand

    Raises:
        ParseError: If arguments are missing or invalid
    """
    args = build_parser().parse_args(argv)
    if not args.input_directory.strip():
        raise ParseError("Input directory is required")
    return BuildCommand(
        input_directory=args.input_directory,
        output_manifest_path=args.output_manifest_path,
        debug=args.debug,
    )
