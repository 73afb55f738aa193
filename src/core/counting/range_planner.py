"""Planning of adjacent byte ranges, one per worker."""
from __future__ import annotations

import stat
from pathlib import Path
from typing import List

from common.errors import FileUnavailableError
from common.models import DEFAULT_BLOCK_SIZE, ByteRange


def plan_ranges(file_size: int, workers: int, block_size: int = DEFAULT_BLOCK_SIZE) -> List[ByteRange]:
    """Split ``[0, file_size)`` into ``workers`` adjacent ranges of whole blocks.

    The first ``total_blocks % workers`` ranges get one extra block and the last
    non-empty range is clamped to ``file_size``. When there are fewer blocks than
    workers the trailing ranges are empty (``start == end == file_size``). An
    empty file yields a single empty range.
    """

    if file_size < 0:
        raise ValueError(f"file_size must be non-negative, got {file_size}")
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")
    if block_size < 1:
        raise ValueError(f"block_size must be at least 1, got {block_size}")
    if file_size == 0:
        return [ByteRange(index=0, start=0, end=0)]

    total_blocks = -(-file_size // block_size)
    base, remainder = divmod(total_blocks, workers)
    ranges: List[ByteRange] = []
    cursor = 0
    for index in range(workers):
        blocks = base + 1 if index < remainder else base
        end = min(file_size, cursor + blocks * block_size)
        ranges.append(ByteRange(index=index, start=cursor, end=end))
        cursor = end
    return ranges


class RangePlanner:
    """Stats the target file and plans the byte ranges for a run."""

    def __init__(self, *, block_size: int = DEFAULT_BLOCK_SIZE) -> None:
        self.block_size = max(1, block_size)

    def file_size(self, path: Path) -> int:
        try:
            info = path.stat()
        except OSError as exc:
            raise FileUnavailableError(path, exc.strerror or str(exc)) from exc
        if not stat.S_ISREG(info.st_mode):
            raise FileUnavailableError(path, "not a regular file")
        try:
            with path.open("rb"):
                pass
        except OSError as exc:
            raise FileUnavailableError(path, exc.strerror or str(exc)) from exc
        return info.st_size

    def plan(self, file_size: int, workers: int) -> List[ByteRange]:
        return plan_ranges(file_size, workers, self.block_size)

    def plan_file(self, path: Path, workers: int) -> List[ByteRange]:
        return self.plan(self.file_size(path), workers)
