"""Manages compressed chunk artifacts on disk: write, read, delete, list."""

import gzip
import logging
from pathlib import Path
from typing import Iterator, List, Union

from common.constants import (
    CHUNK_FILE_SUFFIX,
    COMPRESSION_LEVEL,
    COPY_PIECE_SIZE,
    FILE_BUFFER_SIZE,
)
from builder.exceptions import ChunkIOError, DirectoryCreationError

logger = logging.getLogger(__name__)


def ensure_chunks_directory(chunks_dir: Path) -> None:
    """
    Ensure chunks directory exists.

    Raises:
        DirectoryCreationError: If the directory cannot be created
    """
    try:
        chunks_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(f"failed to create chunks directory {chunks_dir}: {e}") from e


def get_chunk_path(chunks_dir: Path, chunk_id: int) -> Path:
    """
    Get file path for a chunk.

    Args:
        chunks_dir: Chunk output directory
        chunk_id: Numeric identifier of the chunk

    Returns:
        Path object for chunk file
    """
    return chunks_dir / f"{chunk_id}{CHUNK_FILE_SUFFIX}"


def write_chunk(
    chunks_dir: Path,
    chunk_id: int,
    source_path: Union[str, Path],
    offset: int,
    length: int
) -> Path:
    """
    Stream one byte range of a source file into a compressed chunk artifact.

    The range is copied piecewise through a buffered writer and a gzip
    stream at the fastest compression level. A partially written artifact
    is removed before the error is raised.

    Args:
        chunks_dir: Chunk output directory (must exist)
        chunk_id: Numeric identifier of the chunk
        source_path: File the range is read from
        offset: Byte offset of the range
        length: Number of bytes in the range

    Returns:
        Path to written artifact

    Raises:
        ChunkIOError: If any open/seek/read/write/close step fails
    """
    chunk_path = get_chunk_path(chunks_dir, chunk_id)
    try:
        with open(source_path, 'rb') as source:
            source.seek(offset)
            with open(chunk_path, 'wb', buffering=FILE_BUFFER_SIZE) as raw, \
                    gzip.GzipFile(filename='', mode='wb', fileobj=raw,
                                  compresslevel=COMPRESSION_LEVEL, mtime=0) as compressed:
                remaining = length
                while remaining > 0:
                    piece = source.read(min(COPY_PIECE_SIZE, remaining))
                    if not piece:
                        raise ChunkIOError(
                            f"unexpected end of {source_path} at offset {offset + length - remaining} "
                            f"while writing chunk {chunk_id}"
                        )
                    compressed.write(piece)
                    remaining -= len(piece)
    except OSError as e:
        delete_chunk(chunks_dir, chunk_id)
        raise ChunkIOError(f"failed to write chunk {chunk_id} from {source_path}: {e}") from e
    except ChunkIOError:
        delete_chunk(chunks_dir, chunk_id)
        raise

    logger.debug(f"Wrote chunk {chunk_id} ({length} bytes at offset {offset} of {source_path})")
    return chunk_path


def read_chunk(chunks_dir: Path, chunk_id: int) -> bytes:
    """
    Read and decompress an entire chunk.

    Args:
        chunks_dir: Chunk output directory
        chunk_id: Numeric identifier of the chunk

    Returns:
        Original bytes of the chunk's range

    Raises:
        ChunkIOError: If the chunk is missing or not a valid gzip stream
    """
    return b''.join(read_chunk_streaming(chunks_dir, chunk_id))


def read_chunk_streaming(
    chunks_dir: Path,
    chunk_id: int,
    piece_size: int = COPY_PIECE_SIZE
) -> Iterator[bytes]:
    """
    Stream decompressed chunk data in pieces.

    Args:
        chunks_dir: Chunk output directory
        chunk_id: Numeric identifier of the chunk
        piece_size: Size of each piece in bytes (default 64KB)

    Yields:
        Chunk data pieces

    Raises:
        ChunkIOError: If the chunk is missing or not a valid gzip stream
    """
    filepath = get_chunk_path(chunks_dir, chunk_id)
    try:
        with gzip.open(filepath, 'rb') as f:
            while True:
                piece = f.read(piece_size)
                if not piece:
                    break
                yield piece
    except (OSError, EOFError) as e:
        raise ChunkIOError(f"failed to read chunk {chunk_id} from {filepath}: {e}") from e


def delete_chunk(chunks_dir: Path, chunk_id: int) -> bool:
    """
    Delete chunk file from disk.

    Args:
        chunks_dir: Chunk output directory
        chunk_id: Numeric identifier of the chunk

    Returns:
        True if file was deleted, False if it didn't exist
    """
    filepath = get_chunk_path(chunks_dir, chunk_id)
    try:
        filepath.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Failed to remove chunk artifact {filepath}: {e}")
        return False
    return True


def list_all_chunks(chunks_dir: Path) -> List[int]:
    """
    List all chunk IDs in the output directory.

    Returns:
        Sorted list of chunk IDs
    """
    if not chunks_dir.exists():
        return []

    chunk_ids = []
    for filepath in chunks_dir.glob(f"*{CHUNK_FILE_SUFFIX}"):
        if filepath.stem.isdigit():
            chunk_ids.append(int(filepath.stem))
    return sorted(chunk_ids)
