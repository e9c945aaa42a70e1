"""Folds per-file results into a Manifest."""

import logging
import os
from typing import Iterable, List, Optional

from common.constants import MANIFEST_PATH_SEPARATOR
from common.types import Chunk, FileResult, Manifest
from builder.exceptions import ManifestBuilderError

logger = logging.getLogger(__name__)


def to_manifest_path(relative_path: str) -> str:
    """
    Convert a '/'-separated relative path to the manifest convention.

    Name bytes that are not valid UTF-8 become U+FFFD so the manifest
    always encodes.
    """
    text = os.fsencode(relative_path).decode("utf-8", "replace")
    return text.replace("/", MANIFEST_PATH_SEPARATOR)


class ManifestAssembler:
    """
    Accumulates FileResults, in whatever order they arrive, into a Manifest.

    Only the consuming thread touches an assembler; workers never do.
    """

    def __init__(self, name: str):
        self.name = name
        self._chunks: List[Chunk] = []
        self._total_size = 0

    @property
    def file_count(self) -> int:
        return len(self._chunks)

    @property
    def total_size(self) -> int:
        return self._total_size

    @property
    def chunk_count(self) -> int:
        return sum(len(entry.chunk_ids) for entry in self._chunks)

    def add(self, result: FileResult) -> None:
        self._chunks.append(Chunk(
            chunk_ids=list(result.chunk_ids),
            source_file=to_manifest_path(result.relative_path),
            file_size=result.size,
        ))
        self._total_size += result.size

    def add_all(self, results: Iterable[FileResult]) -> None:
        for result in results:
            self.add(result)

    def finalize(self, error: Optional[ManifestBuilderError] = None) -> Manifest:
        """
        Produce the immutable Manifest.

        Args:
            error: First error reported during processing, if any

        Returns:
            Assembled Manifest

        Raises:
            ManifestBuilderError: The reported error; results gathered so far are discarded
        """
        if error is not None:
            logger.error(f"Discarding {self.file_count} assembled entries after failure: {error}")
            raise error

        manifest = Manifest(
            name=self.name,
            chunks=tuple(self._chunks),
            total_size=self._total_size,
        )
        logger.info(
            f"Assembled manifest '{self.name}': {self.file_count} files, "
            f"{self.chunk_count} chunks, {self._total_size} bytes"
        )
        return manifest
