"""Thread-safe collection of per-range tallies."""
from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Sequence

from common.errors import BackendError, ErrorCode
from .kernels import CountingKernel


class Aggregator:
    """Collects one tally set per range and folds them once every worker is done.

    Workers call :meth:`submit` concurrently; each write happens under a single
    lock. Slots are indexed by range so :meth:`totals` can merge them in file
    order, which the word kernel needs to repair words cut by a boundary.
    """

    def __init__(self, kernels: Sequence[CountingKernel], slots: int) -> None:
        if slots < 1:
            raise ValueError(f"slots must be at least 1, got {slots}")
        self.kernels = list(kernels)
        self._lock = threading.Lock()
        self._slots: List[Optional[Dict[str, Any]]] = [None] * slots
        self._filled = 0

    def submit(self, index: int, tallies: Dict[str, Any]) -> None:
        with self._lock:
            if self._slots[index] is not None:
                raise BackendError(
                    ErrorCode.STATE_ERROR,
                    f"Range {index} submitted its tallies twice",
                    context={"range_index": index},
                )
            self._slots[index] = dict(tallies)
            self._filled += 1

    @property
    def complete(self) -> bool:
        with self._lock:
            return self._filled == len(self._slots)

    def totals(self) -> Dict[str, int]:
        # Called after join; no writers remain.
        missing = [index for index, slot in enumerate(self._slots) if slot is None]
        if missing:
            raise BackendError(
                ErrorCode.STATE_ERROR,
                f"Ranges {missing} have not reported a result",
                context={"missing": missing},
            )
        results: Dict[str, int] = {}
        for kernel in self.kernels:
            folded = kernel.fold(slot[kernel.name] for slot in self._slots)
            results[kernel.name] = kernel.total(folded)
        return results
