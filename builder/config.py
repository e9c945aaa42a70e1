"""Configuration settings for the manifest builder."""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from common.constants import (
    DEFAULT_CHUNK_OUTPUT_PATH,
    DEFAULT_CHUNK_START_ID,
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_MIN_CHUNK_SIZE,
    PROGRESS_REPORT_INTERVAL,
    QUEUE_SLOTS_PER_WORKER,
    WORKERS_PER_CPU,
)
from builder.exceptions import InvalidSettingsError


CHUNK_OUTPUT_PATH = os.getenv("CHUNK_OUTPUT_PATH", DEFAULT_CHUNK_OUTPUT_PATH)

MIN_CHUNK_SIZE = int(os.getenv("MIN_CHUNK_SIZE", str(DEFAULT_MIN_CHUNK_SIZE)))
MAX_CHUNK_SIZE = int(os.getenv("MAX_CHUNK_SIZE", str(DEFAULT_MAX_CHUNK_SIZE)))

# 0 means derive from CPU count
WORKER_COUNT = int(os.getenv("BUILDER_WORKER_COUNT", "0"))
QUEUE_FACTOR = int(os.getenv("BUILDER_QUEUE_FACTOR", str(QUEUE_SLOTS_PER_WORKER)))

CHUNK_START_ID = int(os.getenv("CHUNK_START_ID", str(DEFAULT_CHUNK_START_ID)))
PROGRESS_INTERVAL = int(os.getenv("PROGRESS_INTERVAL", str(PROGRESS_REPORT_INTERVAL)))


def default_worker_count() -> int:
    """Worker pool size derived from available CPU parallelism."""
    return (os.cpu_count() or 1) * WORKERS_PER_CPU


@dataclass(frozen=True)
class BuilderSettings:
    """
    Resolved settings for one generation run.

    Attributes:
        chunks_dir: Directory receiving the compressed chunk artifacts
        min_chunk_size: Lower bound for the estimated chunk size
        max_chunk_size: Upper bound for the estimated chunk size
        worker_count: Number of worker threads
        queue_factor: Queue slots per worker for the file and result queues
        chunk_start_id: First chunk identifier handed out
        progress_interval: Completed files between progress reports
    """
    chunks_dir: Path = field(default_factory=lambda: Path(DEFAULT_CHUNK_OUTPUT_PATH))
    min_chunk_size: int = DEFAULT_MIN_CHUNK_SIZE
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    worker_count: int = field(default_factory=default_worker_count)
    queue_factor: int = QUEUE_SLOTS_PER_WORKER
    chunk_start_id: int = DEFAULT_CHUNK_START_ID
    progress_interval: int = PROGRESS_REPORT_INTERVAL

    @classmethod
    def from_env(cls) -> "BuilderSettings":
        """Build settings from the module-level environment configuration."""
        return cls(
            chunks_dir=Path(CHUNK_OUTPUT_PATH),
            min_chunk_size=MIN_CHUNK_SIZE,
            max_chunk_size=MAX_CHUNK_SIZE,
            worker_count=WORKER_COUNT or default_worker_count(),
            queue_factor=QUEUE_FACTOR,
            chunk_start_id=CHUNK_START_ID,
            progress_interval=PROGRESS_INTERVAL,
        )

    @property
    def queue_size(self) -> int:
        return self.worker_count * self.queue_factor

    def with_overrides(self, **changes) -> "BuilderSettings":
        return replace(self, **changes)

    def validate(self) -> "BuilderSettings":
        """
        Check that the settings describe a runnable configuration.

        Returns:
            The settings themselves, for chaining

        Raises:
            InvalidSettingsError: If a value is out of range
        """
        if self.min_chunk_size <= 0:
            raise InvalidSettingsError(f"min_chunk_size must be positive, got {self.min_chunk_size}")
        if self.max_chunk_size < self.min_chunk_size:
            raise InvalidSettingsError(
                f"max_chunk_size ({self.max_chunk_size}) is smaller than "
                f"min_chunk_size ({self.min_chunk_size})"
            )
        if self.worker_count < 1:
            raise InvalidSettingsError(f"worker_count must be at least 1, got {self.worker_count}")
        if self.queue_factor < 1:
            raise InvalidSettingsError(f"queue_factor must be at least 1, got {self.queue_factor}")
        if self.chunk_start_id < 0:
            raise InvalidSettingsError(f"chunk_start_id must not be negative, got {self.chunk_start_id}")
        if self.progress_interval < 1:
            raise InvalidSettingsError(
                f"progress_interval must be at least 1, got {self.progress_interval}"
            )
        return self
