"""Rebuilds source files from a manifest and its chunk artifacts."""

import logging
from pathlib import Path, PurePosixPath
from typing import List, Union

from common.constants import MANIFEST_PATH_SEPARATOR
from common.types import Chunk, Manifest
from builder.chunk_storage import list_all_chunks, read_chunk_streaming
from builder.exceptions import ChunkIOError, DirectoryCreationError

logger = logging.getLogger(__name__)


def from_manifest_path(source_file: str) -> Path:
    """
    Convert a manifest path back to a relative local path.

    Raises:
        ChunkIOError: If the path is absolute or escapes the output directory
    """
    parts = PurePosixPath(source_file.replace(MANIFEST_PATH_SEPARATOR, "/")).parts
    if not parts or parts[0] == "/" or ".." in parts:
        raise ChunkIOError(f"refusing to restore unsafe manifest path: {source_file!r}")
    return Path(*parts)


def reassemble_file(entry: Chunk, chunks_dir: Union[str, Path], destination: Union[str, Path]) -> int:
    """
    Concatenate the decompressed chunks of one manifest entry.

    Args:
        entry: Manifest entry
        chunks_dir: Directory holding the chunk artifacts
        destination: File to create

    Returns:
        Number of bytes written

    Raises:
        ChunkIOError: If an artifact is missing, unreadable, or the size does not match
    """
    chunks_dir = Path(chunks_dir)
    destination = Path(destination)
    written = 0
    try:
        with open(destination, 'wb') as out:
            for chunk_id in entry.chunk_ids:
                for piece in read_chunk_streaming(chunks_dir, chunk_id):
                    out.write(piece)
                    written += len(piece)
    except OSError as e:
        raise ChunkIOError(f"failed to write {destination}: {e}") from e

    if written != entry.file_size:
        raise ChunkIOError(
            f"{entry.source_file}: restored {written} bytes, manifest says {entry.file_size}"
        )
    return written


def reassemble_tree(
    manifest: Manifest,
    chunks_dir: Union[str, Path],
    output_dir: Union[str, Path]
) -> List[Path]:
    """
    Restore every file listed in manifest under output_dir.

    Returns:
        Paths of the restored files, in manifest order

    Raises:
        ChunkIOError: If artifacts are missing (checked before anything is written)
            or a file cannot be restored
        DirectoryCreationError: If a target directory cannot be created
    """
    output_dir = Path(output_dir)
    available = set(list_all_chunks(Path(chunks_dir)))
    missing = sorted({i for entry in manifest.chunks for i in entry.chunk_ids} - available)
    if missing:
        preview = ", ".join(str(i) for i in missing[:10])
        raise ChunkIOError(f"{len(missing)} chunk artifacts missing from {chunks_dir}: {preview}")

    restored = []
    for entry in manifest.chunks:
        destination = output_dir / from_manifest_path(entry.source_file)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreationError(f"failed to create directory {destination.parent}: {e}") from e
        reassemble_file(entry, chunks_dir, destination)
        restored.append(destination)

    logger.info(f"Restored {len(restored)} files of '{manifest.name}' into {output_dir}")
    return restored
