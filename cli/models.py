"""Command request data types for CLI."""

from dataclasses import dataclass

from common.constants import DEFAULT_MANIFEST_PATH


@dataclass(frozen=True)
class BuildCommand:
    """Chunk a directory and write its manifest."""

    input_directory: str
    output_manifest_path: str = DEFAULT_MANIFEST_PATH
    debug: bool = False
