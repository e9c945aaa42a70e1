"""Runs the chunking pipeline for one input directory and returns its Manifest."""

import logging
import time
from pathlib import Path
from typing import Callable, List, Optional, Union

from common.types import Manifest
from builder.chunk_size_estimator import ChunkSizeEstimator
from builder.chunk_storage import ensure_chunks_directory
from builder.chunker import Chunker
from builder.config import BuilderSettings
from builder.directory_walker import count_files, iter_files
from builder.exceptions import ScanError
from builder.manifest_assembler import ManifestAssembler
from builder.parallel_processor import ParallelProcessor, ProgressCallback

logger = logging.getLogger(__name__)


class ManifestGenerator:
    """
    Builds a Manifest for a directory tree.

    Pipeline: estimate one chunk size from every file's size, count files,
    fan the files out to a ParallelProcessor, fold its results into a
    ManifestAssembler. Any failure aborts the run without a manifest.
    """

    def __init__(
        self,
        settings: Optional[BuilderSettings] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_files_found: Optional[Callable[[int], None]] = None
    ):
        """
        Initialize generator.

        Args:
            settings: Run settings (default: read from environment)
            on_progress: Progress callback forwarded to the worker pool
            on_files_found: Called with the file count before chunking starts

        Raises:
            InvalidSettingsError: If settings are inconsistent
        """
        self.settings = (settings or BuilderSettings.from_env()).validate()
        self.on_progress = on_progress
        self.on_files_found = on_files_found
        self.estimator = ChunkSizeEstimator(
            min_chunk_size=self.settings.min_chunk_size,
            max_chunk_size=self.settings.max_chunk_size,
        )
        self.chunker: Optional[Chunker] = None
        self.chunk_size = 0
        self.total_files = 0

    def _excluded_dirs(self, root: Path) -> List[Path]:
        """Directories under root that the walks skip: the chunk output directory, when nested."""
        chunks_dir = Path(self.settings.chunks_dir).resolve()
        resolved_root = root.resolve()
        if chunks_dir == resolved_root or resolved_root in chunks_dir.parents:
            logger.info(f"Excluding chunk output directory {chunks_dir} from {root}")
            return [chunks_dir]
        return []

    def generate(self, root_path: Union[str, Path]) -> Manifest:
        """
        Chunk every file under root_path and assemble the manifest.

        Args:
            root_path: Input directory

        Returns:
            Manifest covering every regular file of the tree

        Raises:
            ScanError: If the tree cannot be walked
            DirectoryCreationError: If the chunk output directory cannot be created
            ManifestBuilderError: First per-file failure (a GenerationError naming the path)
        """
        start = time.monotonic()
        root = Path(root_path)
        if not root.is_dir():
            raise ScanError(f"input directory does not exist: {root}")

        excluded = self._excluded_dirs(root)
        chunk_size = self.chunk_size = self.estimator.estimate(root, excluded)
        ensure_chunks_directory(self.settings.chunks_dir)
        self.chunker = Chunker(
            chunk_size,
            chunks_dir=self.settings.chunks_dir,
            start_id=self.settings.chunk_start_id,
        )

        self.total_files = count_files(root, excluded)
        logger.info(f"Found {self.total_files} files under {root}")
        if self.on_files_found is not None:
            self.on_files_found(self.total_files)

        processor = ParallelProcessor(
            self.chunker,
            root,
            worker_count=self.settings.worker_count,
            queue_size=self.settings.queue_size,
            total_files=self.total_files,
            progress_interval=self.settings.progress_interval,
            on_progress=self.on_progress,
        )
        assembler = ManifestAssembler(name=root.resolve().name)
        assembler.add_all(processor.results(iter_files(root, excluded)))
        manifest = assembler.finalize(processor.error)

        logger.info(
            f"Generated {manifest.chunk_count} chunks of {chunk_size} bytes "
            f"in {time.monotonic() - start:.3f}s"
        )
        return manifest
