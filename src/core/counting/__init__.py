"""Parallel line and word counting over adjacent byte ranges."""

from .aggregator import Aggregator
from .engine import CountingEngine, count_lines, count_words
from .kernels import KERNELS, LineKernel, WordKernel, get_kernel
from .parallelism import resolve_worker_count
from .range_planner import RangePlanner, plan_ranges
from .workers import RangeWorker, run_workers

__all__ = [
    "Aggregator",
    "CountingEngine",
    "KERNELS",
    "LineKernel",
    "RangePlanner",
    "RangeWorker",
    "WordKernel",
    "count_lines",
    "count_words",
    "get_kernel",
    "plan_ranges",
    "resolve_worker_count",
    "run_workers",
]
