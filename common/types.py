"""Shared data type definitions (Manifest, Chunk, FileResult, ByteRange)."""

from dataclasses import dataclass
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    """
    Manifest entry for one source file.

    chunk_ids lists, in file-offset order, the identifiers of the byte
    ranges that compose the file.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    chunk_ids: List[int] = Field(default_factory=list, alias="ChunksIds")
    source_file: str = Field(alias="File")
    file_size: int = Field(alias="FileSize", ge=0)


class Manifest(BaseModel):
    """Index mapping every source file of a tree to its chunk identifiers."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(alias="Name")
    chunks: Tuple[Chunk, ...] = Field(default_factory=tuple, alias="Chunks")
    total_size: int = Field(default=0, alias="Size", ge=0)

    @property
    def chunk_count(self) -> int:
        """Total number of chunk artifacts referenced by the manifest."""
        return sum(len(entry.chunk_ids) for entry in self.chunks)


@dataclass(frozen=True)
class FileResult:
    """
    Outcome of processing a single file, produced by a worker.
    """
    chunk_ids: Tuple[int, ...]
    relative_path: str
    size: int


@dataclass(frozen=True)
class ByteRange:
    """
    Contiguous slice of a source file backing one chunk.
    """
    index: int
    offset: int
    length: int
