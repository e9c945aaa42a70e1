"""Splits files into fixed-size byte ranges and materializes them as chunks."""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from common.constants import DEFAULT_CHUNK_OUTPUT_PATH, DEFAULT_CHUNK_START_ID
from common.types import ByteRange
from builder.chunk_storage import delete_chunk, ensure_chunks_directory, write_chunk
from builder.counter import AtomicCounter
from builder.exceptions import ChunkIOError, InvalidSettingsError, ScanError

logger = logging.getLogger(__name__)


class Chunker:
    """
    Computes chunk identifiers for files and writes their chunk artifacts.

    One Chunker is shared by every worker of a run. The chunk size is fixed
    at construction; identifiers come from a shared AtomicCounter, so they
    are unique across the run. Within one file identifiers follow byte-range
    order, but files processed concurrently interleave their allocations.
    """

    def __init__(
        self,
        chunk_size: int,
        chunks_dir: Union[str, Path] = DEFAULT_CHUNK_OUTPUT_PATH,
        counter: Optional[AtomicCounter] = None,
        start_id: int = DEFAULT_CHUNK_START_ID
    ):
        """
        Initialize chunker.

        Args:
            chunk_size: Byte length of every range but a file's last one
            chunks_dir: Directory receiving chunk artifacts
            counter: Shared identifier counter (a new one is created if omitted)
            start_id: First identifier handed out by a fresh counter
        """
        if chunk_size <= 0:
            raise InvalidSettingsError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self.chunks_dir = Path(chunks_dir)
        self.start_id = start_id
        self.counter = counter if counter is not None else AtomicCounter(start_id - 1)

    def reset_counter(self) -> None:
        """
        Restart identifier allocation at start_id.

        Only valid between independent runs, never while files are in flight.
        """
        self.counter.store(self.start_id - 1)

    def allocate_id(self) -> int:
        return self.counter.increment_and_fetch()

    def byte_ranges(self, file_size: int) -> List[ByteRange]:
        """
        Split a file of file_size bytes into chunk-sized ranges.

        Args:
            file_size: Size of the file in bytes

        Returns:
            Ranges in offset order; empty for an empty file
        """
        ranges = []
        for index, offset in enumerate(range(0, file_size, self.chunk_size)):
            ranges.append(ByteRange(index=index, offset=offset,
                                    length=min(self.chunk_size, file_size - offset)))
        return ranges

    def calculate(self, path: Union[str, Path]) -> Tuple[List[int], int]:
        """
        Allocate one chunk identifier per byte range of a file.

        Args:
            path: Source file

        Returns:
            Tuple of (chunk_ids, file_size)

        Raises:
            ScanError: If the file cannot be stat'ed
        """
        try:
            file_size = Path(path).stat().st_size
        except OSError as e:
            raise ScanError(f"failed to stat {path}: {e}") from e

        chunk_ids = [self.allocate_id() for _ in self.byte_ranges(file_size)]
        return chunk_ids, file_size

    def generate_chunks(self, path: Union[str, Path], chunk_ids: Sequence[int]) -> List[Path]:
        """
        Write one compressed artifact per byte range of a file.

        The ranges are re-derived from the file's current size and must match
        the identifiers returned by calculate. If any range fails, artifacts
        already written for this file are removed.

        Args:
            path: Source file
            chunk_ids: Identifiers from calculate, in range order

        Returns:
            Paths of the written artifacts

        Raises:
            ChunkIOError: If the file changed size or any chunk write fails
            DirectoryCreationError: If the output directory cannot be created
        """
        try:
            file_size = Path(path).stat().st_size
        except OSError as e:
            raise ChunkIOError(f"failed to stat {path}: {e}") from e

        ranges = self.byte_ranges(file_size)
        if len(ranges) != len(chunk_ids):
            raise ChunkIOError(
                f"{path} now spans {len(ranges)} chunks but {len(chunk_ids)} were allocated; "
                f"file changed during processing"
            )
        if not ranges:
            return []

        ensure_chunks_directory(self.chunks_dir)

        written = []
        try:
            for byte_range, chunk_id in zip(ranges, chunk_ids):
                written.append(write_chunk(
                    self.chunks_dir, chunk_id, path, byte_range.offset, byte_range.length
                ))
        except ChunkIOError:
            for chunk_id in chunk_ids[:len(written)]:
                delete_chunk(self.chunks_dir, chunk_id)
            raise

        logger.debug(f"Generated {len(written)} chunks for {path}")
        return written
