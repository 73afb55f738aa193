"""Parallel counting of a single file across adjacent byte ranges."""
from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from common.errors import ReadFailureError
from common.models import CountReport, RangeProgress, RuntimeConfig
from common.progress import ProgressLogger
from .aggregator import Aggregator
from .kernels import LineKernel, WordKernel, get_kernel
from .parallelism import resolve_worker_count
from .range_planner import RangePlanner
from .workers import RangeWorker, run_workers

ProgressCallback = Optional[Callable[[RangeProgress], None]]

ALL_KERNELS = (LineKernel.name, WordKernel.name)


class CountingEngine:
    """Plans ranges, fans out one worker per range, and merges their tallies."""

    def __init__(
        self,
        config: Optional[RuntimeConfig] = None,
        *,
        workers: Optional[int] = None,
        progress_log: Optional[Path] = None,
    ) -> None:
        self.config = config or RuntimeConfig()
        self.requested_workers = workers
        self.planner = RangePlanner(block_size=self.config.profile.block_size)
        self.progress_logger = ProgressLogger(progress_log) if progress_log else None

    def count(
        self,
        path: Path,
        kernels: Sequence[str] = ALL_KERNELS,
        *,
        progress_callback: ProgressCallback = None,
    ) -> CountReport:
        """Count ``kernels`` over ``path`` in one parallel pass.

        Raises :class:`FileUnavailableError` before any worker starts when the
        file cannot be accessed, and :class:`ReadFailureError` when any worker
        fails; no partial totals are returned in either case.
        """

        whitespace = self.config.global_settings.whitespace
        selected = [get_kernel(name, whitespace=whitespace) for name in dict.fromkeys(kernels)]
        path = Path(path)
        started = time.perf_counter()
        size = self.planner.file_size(path)
        worker_count = resolve_worker_count(
            self.requested_workers, limit=self.config.profile.max_workers
        )
        ranges = self.planner.plan(size, worker_count)

        aggregator = Aggregator(selected, slots=len(ranges))
        workers = run_workers(
            path,
            ranges,
            selected,
            aggregator,
            read_chunk_size=self.config.profile.read_chunk_size,
        )
        self._raise_first_failure(path, workers)
        totals = aggregator.totals()
        self._emit_progress(path, workers, progress_callback)

        return CountReport(
            file_path=path,
            size_bytes=size,
            workers=worker_count,
            ranges=list(ranges),
            lines=totals.get(LineKernel.name),
            words=totals.get(WordKernel.name),
            elapsed_seconds=time.perf_counter() - started,
        )

    def file_size(self, path: Path) -> int:
        return self.planner.file_size(Path(path))

    def _raise_first_failure(self, path: Path, workers: List[RangeWorker]) -> None:
        for worker in workers:
            if worker.error is None:
                continue
            byte_range = worker.byte_range
            raise ReadFailureError(
                path,
                range_index=byte_range.index,
                start=byte_range.start,
                end=byte_range.end,
                reason=str(worker.error) or type(worker.error).__name__,
            ) from worker.error

    def _emit_progress(
        self,
        path: Path,
        workers: List[RangeWorker],
        progress_callback: ProgressCallback,
    ) -> None:
        for worker in workers:
            byte_range = worker.byte_range
            progress = RangeProgress(
                file_path=path,
                range_index=byte_range.index,
                start=byte_range.start,
                end=byte_range.end,
                bytes_read=worker.bytes_read,
                current_phase="range-complete",
                elapsed_seconds=worker.elapsed_seconds,
            )
            if progress_callback:
                progress_callback(progress)
            if self.progress_logger:
                self.progress_logger.emit(progress)


def count_lines(path: Path, *, workers: Optional[int] = None, config: Optional[RuntimeConfig] = None) -> int:
    report = CountingEngine(config, workers=workers).count(path, (LineKernel.name,))
    return report.lines or 0


def count_words(path: Path, *, workers: Optional[int] = None, config: Optional[RuntimeConfig] = None) -> int:
    report = CountingEngine(config, workers=workers).count(path, (WordKernel.name,))
    return report.words or 0
