"""Fork-join worker threads, one per byte range."""
from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from common.errors import BackendError, ErrorCode
from common.models import ByteRange
from .aggregator import Aggregator
from .kernels import CountingKernel


class RangeWorker(threading.Thread):
    """Reads exactly one byte range through a private handle and tallies it."""

    def __init__(
        self,
        path: Path,
        byte_range: ByteRange,
        kernels: Sequence[CountingKernel],
        aggregator: Aggregator,
        *,
        read_chunk_size: int,
    ) -> None:
        super().__init__(name=f"range-worker-{byte_range.index}", daemon=True)
        self.path = path
        self.byte_range = byte_range
        self.kernels = kernels
        self.aggregator = aggregator
        self.read_chunk_size = max(1, read_chunk_size)
        self.bytes_read = 0
        self.elapsed_seconds = 0.0
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        started = time.perf_counter()
        try:
            tallies = self._scan()
            self.aggregator.submit(self.byte_range.index, tallies)
        except Exception as exc:  # noqa: BLE001 - re-raised by run_workers after join
            self.error = exc
        finally:
            self.elapsed_seconds = time.perf_counter() - started

    def _scan(self) -> Dict[str, Any]:
        tallies = {kernel.name: kernel.empty() for kernel in self.kernels}
        remaining = self.byte_range.length
        if remaining == 0:
            return tallies
        with self.path.open("rb") as handle:
            handle.seek(self.byte_range.start)
            while remaining > 0:
                chunk = handle.read(min(self.read_chunk_size, remaining))
                if not chunk:
                    raise EOFError(
                        f"unexpected end of file after {self.bytes_read} of "
                        f"{self.byte_range.length} bytes"
                    )
                remaining -= len(chunk)
                self.bytes_read += len(chunk)
                for kernel in self.kernels:
                    tallies[kernel.name] = kernel.merge(tallies[kernel.name], kernel.scan(chunk))
        return tallies


def run_workers(
    path: Path,
    ranges: Sequence[ByteRange],
    kernels: Sequence[CountingKernel],
    aggregator: Aggregator,
    *,
    read_chunk_size: int,
) -> List[RangeWorker]:
    """Start one thread per range and wait for all of them.

    Scan failures are not raised here; callers inspect ``worker.error`` once
    every thread has been joined. If a thread cannot be started, the ones
    already running are joined and a ``WORKER_START_FAILURE`` is raised.
    """

    workers = [
        RangeWorker(path, byte_range, kernels, aggregator, read_chunk_size=read_chunk_size)
        for byte_range in ranges
    ]
    started: List[RangeWorker] = []
    try:
        for worker in workers:
            worker.start()
            started.append(worker)
    except RuntimeError as exc:
        raise BackendError(
            ErrorCode.WORKER_START_FAILURE,
            f"Could not start worker {len(started) + 1} of {len(workers)} for '{path}': {exc}",
            context={"path": str(path), "started": len(started), "requested": len(workers)},
        ) from exc
    finally:
        for worker in started:
            worker.join()
    return workers
