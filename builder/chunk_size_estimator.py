"""Picks one chunk size for a whole tree from its file size distribution."""

import logging
import math
from pathlib import Path
from typing import Iterable, List, Optional, Union

from common.constants import (
    CHUNK_SIZE_ALIGNMENT,
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_MIN_CHUNK_SIZE,
    MIN_TOTAL_CHUNKS,
    SIZE_PERCENTILE,
)
from builder.directory_walker import iter_files
from builder.exceptions import InvalidSettingsError, ScanError

logger = logging.getLogger(__name__)


class ChunkSizeEstimator:
    """
    Estimates the chunk size for a run.

    The size is the geometric mean of the 90th-percentile file size and the
    average file size, clamped to [min_chunk_size, max_chunk_size] and
    aligned down to 64 KiB. Trees that would produce fewer than 100 chunks
    get a finer size (total / 100), never below min_chunk_size.
    """

    def __init__(
        self,
        min_chunk_size: int = DEFAULT_MIN_CHUNK_SIZE,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    ):
        if min_chunk_size <= 0 or max_chunk_size < min_chunk_size:
            raise InvalidSettingsError(
                f"invalid chunk size bounds [{min_chunk_size}, {max_chunk_size}]"
            )
        self.min_chunk_size = min_chunk_size
        self.max_chunk_size = max_chunk_size

    def collect_file_sizes(
        self,
        root_path: Union[str, Path],
        exclude: Optional[Iterable[Union[str, Path]]] = None
    ) -> List[int]:
        """
        Stat every regular file under root_path, skipping excluded directories.

        Raises:
            ScanError: If the tree cannot be walked or a file cannot be stat'ed
        """
        sizes = []
        for path in iter_files(root_path, exclude):
            try:
                sizes.append(path.stat().st_size)
            except OSError as e:
                raise ScanError(f"failed to stat {path}: {e}") from e
        return sizes

    def estimate_from_sizes(self, sizes: List[int]) -> int:
        """
        Compute the chunk size for a given file size distribution.

        Args:
            sizes: Size in bytes of every file in the tree

        Returns:
            Chunk size in bytes
        """
        if not sizes:
            return self.min_chunk_size

        ordered = sorted(sizes)
        total_size = sum(ordered)
        p90 = ordered[int(len(ordered) * SIZE_PERCENTILE)]
        avg = total_size // len(ordered)

        chunk_size = math.isqrt(p90 * avg)
        chunk_size = max(min(chunk_size, self.max_chunk_size), self.min_chunk_size)
        chunk_size = (chunk_size // CHUNK_SIZE_ALIGNMENT) * CHUNK_SIZE_ALIGNMENT

        if chunk_size == 0 or total_size // chunk_size < MIN_TOTAL_CHUNKS:
            chunk_size = total_size // MIN_TOTAL_CHUNKS

        return max(chunk_size, self.min_chunk_size)

    def estimate(
        self,
        root_path: Union[str, Path],
        exclude: Optional[Iterable[Union[str, Path]]] = None
    ) -> int:
        """
        Walk root_path once and compute its chunk size.

        Args:
            root_path: Input directory
            exclude: Directories left out of the size sample

        Returns:
            Chunk size in bytes

        Raises:
            ScanError: If the tree cannot be walked
        """
        sizes = self.collect_file_sizes(root_path, exclude)
        chunk_size = self.estimate_from_sizes(sizes)
        logger.info(
            f"Estimated chunk size {chunk_size} bytes from {len(sizes)} files "
            f"({sum(sizes)} bytes)"
        )
        return chunk_size
