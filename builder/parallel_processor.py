"""
Bounded worker pool turning file paths into FileResults.

A walker thread feeds paths into a bounded file queue; worker threads run
Chunker.calculate and Chunker.generate_chunks per file and push FileResults
into a bounded result queue drained by the caller. Both queues block when
full, which caps memory use regardless of tree size.

The first failure wins: it is recorded once, the walker stops admitting
files, workers discard queued paths, and the caller sees the error after
in-flight work has drained.
"""

import logging
import queue
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Union

from common.constants import PROGRESS_REPORT_INTERVAL, QUEUE_SLOTS_PER_WORKER
from common.types import FileResult
from builder.chunker import Chunker
from builder.config import default_worker_count
from builder.counter import AtomicCounter
from builder.exceptions import GenerationError, InvalidSettingsError, ManifestBuilderError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, float], None]

_STOP = object()
_PUT_POLL_SECONDS = 0.1


class FirstErrorSignal:
    """
    Single-slot error holder; only the first error set is kept.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._error: Optional[ManifestBuilderError] = None
        self._event = threading.Event()

    def set(self, error: ManifestBuilderError) -> bool:
        """
        Record error unless one is already recorded.

        Returns:
            True if this call recorded the error
        """
        with self._lock:
            if self._error is not None:
                return False
            self._error = error
            self._event.set()
            return True

    def is_set(self) -> bool:
        return self._event.is_set()

    @property
    def error(self) -> Optional[ManifestBuilderError]:
        with self._lock:
            return self._error


class ParallelProcessor:
    """
    Processes every file exactly once with a fixed pool of worker threads.

    Results are yielded in completion order, not input order.
    """

    def __init__(
        self,
        chunker: Chunker,
        root_path: Union[str, Path],
        worker_count: Optional[int] = None,
        queue_size: Optional[int] = None,
        total_files: int = 0,
        progress_interval: int = PROGRESS_REPORT_INTERVAL,
        on_progress: Optional[ProgressCallback] = None
    ):
        """
        Initialize processor.

        Args:
            chunker: Chunker shared by all workers
            root_path: Input directory; result paths are relative to it
            worker_count: Number of worker threads (default 2x CPU count)
            queue_size: Capacity of the file and result queues
            total_files: Expected number of files, for progress percentages
            progress_interval: Completed files between progress reports
            on_progress: Called with (processed, total_files, files_per_second)
        """
        self.chunker = chunker
        self.root_path = Path(root_path)
        self.worker_count = worker_count or default_worker_count()
        self.queue_size = queue_size or self.worker_count * QUEUE_SLOTS_PER_WORKER
        if self.worker_count < 1 or self.queue_size < 1:
            raise InvalidSettingsError(
                f"worker_count and queue_size must be positive "
                f"(got {self.worker_count}, {self.queue_size})"
            )
        self.total_files = total_files
        self.progress_interval = progress_interval
        self.on_progress = on_progress

        self.processed = AtomicCounter()
        self._signal = FirstErrorSignal()
        self._cancelled = threading.Event()
        self._start_time = time.monotonic()

    @property
    def error(self) -> Optional[ManifestBuilderError]:
        """First error reported by the walker or a worker, if any."""
        return self._signal.error

    def _aborted(self) -> bool:
        return self._signal.is_set() or self._cancelled.is_set()

    def relative_path(self, path: Union[str, Path]) -> str:
        return Path(path).relative_to(self.root_path).as_posix()

    def process_file(self, path: Union[str, Path]) -> FileResult:
        """
        Compute and write the chunks of one file.

        Raises:
            ManifestBuilderError: If the file cannot be chunked
        """
        chunk_ids, size = self.chunker.calculate(path)
        self.chunker.generate_chunks(path, chunk_ids)
        return FileResult(
            chunk_ids=tuple(chunk_ids),
            relative_path=self.relative_path(path),
            size=size,
        )

    def _put_unless_aborted(self, file_queue: queue.Queue, path: Path) -> bool:
        while True:
            if self._aborted():
                return False
            try:
                file_queue.put(path, timeout=_PUT_POLL_SECONDS)
                return True
            except queue.Full:
                continue

    def _produce(self, paths: Iterable[Path], file_queue: queue.Queue) -> None:
        admitted = 0
        try:
            for path in paths:
                if not self._put_unless_aborted(file_queue, path):
                    logger.info(f"Stopped admitting files after {admitted}")
                    break
                admitted += 1
        except ManifestBuilderError as e:
            if self._signal.set(e):
                logger.error(f"File enumeration failed: {e}")
        except Exception as e:
            if self._signal.set(GenerationError(str(self.root_path), e)):
                logger.error(f"File enumeration failed: {e}", exc_info=True)
        finally:
            for _ in range(self.worker_count):
                file_queue.put(_STOP)

    def _work(self, file_queue: queue.Queue, result_queue: queue.Queue) -> None:
        try:
            while True:
                path = file_queue.get()
                if path is _STOP:
                    return
                if self._aborted():
                    continue

                try:
                    result = self.process_file(path)
                except Exception as e:
                    if self._signal.set(GenerationError(str(path), e)):
                        logger.error(f"Generation failed for {path}: {e}")
                    continue

                result_queue.put(result)
                self._report_progress()
        finally:
            result_queue.put(_STOP)

    def _report_progress(self) -> None:
        processed = self.processed.increment_and_fetch()
        if processed % self.progress_interval != 0:
            return

        elapsed = max(time.monotonic() - self._start_time, 1e-9)
        rate = processed / elapsed
        percent = processed / self.total_files * 100 if self.total_files else 100.0
        logger.info(f"Processed {processed} files ({percent:.1f}%) [{rate:.0f}/s]")

        if self.on_progress is not None:
            try:
                self.on_progress(processed, self.total_files, rate)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")

    def results(self, paths: Iterable[Path]) -> Iterator[FileResult]:
        """
        Process paths and yield one FileResult per file as files complete.

        The iterator ends once every worker has exited. Check error afterwards:
        when it is set, the results seen are incomplete.

        Args:
            paths: Files to process; consumed by a background walker thread

        Yields:
            FileResult per successfully processed file
        """
        file_queue: queue.Queue = queue.Queue(maxsize=self.queue_size)
        result_queue: queue.Queue = queue.Queue(maxsize=self.queue_size)
        self._start_time = time.monotonic()

        workers = [
            threading.Thread(
                target=self._work,
                args=(file_queue, result_queue),
                name=f"chunk-worker-{i}",
                daemon=True
            )
            for i in range(self.worker_count)
        ]
        producer = threading.Thread(
            target=self._produce,
            args=(paths, file_queue),
            name="file-walker",
            daemon=True
        )

        logger.debug(f"Starting {self.worker_count} workers (queue size {self.queue_size})")
        for worker in workers:
            worker.start()
        producer.start()

        finished = 0
        try:
            while finished < len(workers):
                item = result_queue.get()
                if item is _STOP:
                    finished += 1
                    continue
                yield item
        finally:
            if finished < len(workers):
                self._cancelled.set()
                while finished < len(workers):
                    if result_queue.get() is _STOP:
                        finished += 1
            producer.join()
            for worker in workers:
                worker.join()
