"""Counting kernels: pure functions from a byte window to a partial tally.

Each kernel scans one window independently and knows how to merge the
tallies of two adjacent windows, so workers can split their range into read
chunks and the aggregator can fold per-range results in file order.
"""
from __future__ import annotations

from typing import Dict, Generic, Iterable, TypeVar

from common.models import LineTally, WordTally

LINE_TERMINATOR = b"\n"
# Same set bytes.split()/bytes.isspace() use.
ASCII_WHITESPACE = frozenset(b" \t\n\v\f\r")
# Bytes read as Latin-1 code points with the Unicode White_Space property.
LATIN1_WHITESPACE = ASCII_WHITESPACE | {0x85, 0xA0}
_LATIN1_TO_SPACE = bytes.maketrans(b"\x85\xa0", b"  ")

WHITESPACE_SETS = {"ascii": ASCII_WHITESPACE, "latin1": LATIN1_WHITESPACE}
DEFAULT_WHITESPACE = "latin1"

T = TypeVar("T")


class CountingKernel(Generic[T]):
    name = ""

    def scan(self, window: bytes) -> T:
        raise NotImplementedError

    def empty(self) -> T:
        raise NotImplementedError

    def merge(self, left: T, right: T) -> T:
        raise NotImplementedError

    def total(self, tally: T) -> int:
        raise NotImplementedError

    def fold(self, tallies: Iterable[T]) -> T:
        result = self.empty()
        for tally in tallies:
            result = self.merge(result, tally)
        return result


class LineKernel(CountingKernel[LineTally]):
    """Counts line terminators; an unterminated last line is not a line."""

    name = "lines"

    def scan(self, window: bytes) -> LineTally:
        return LineTally(lines=window.count(LINE_TERMINATOR), size=len(window))

    def empty(self) -> LineTally:
        return LineTally()

    def merge(self, left: LineTally, right: LineTally) -> LineTally:
        return LineTally(lines=left.lines + right.lines, size=left.size + right.size)

    def total(self, tally: LineTally) -> int:
        return tally.lines


class WordKernel(CountingKernel[WordTally]):
    """Counts whitespace-separated words and records mid-word window edges."""

    name = "words"

    def __init__(self, whitespace: str = DEFAULT_WHITESPACE) -> None:
        try:
            self.separators = WHITESPACE_SETS[whitespace]
        except KeyError as exc:
            available = ", ".join(sorted(WHITESPACE_SETS))
            raise ValueError(f"Unknown whitespace set '{whitespace}'. Available: {available}") from exc
        self.whitespace = whitespace

    def scan(self, window: bytes) -> WordTally:
        if not window:
            return WordTally()
        return WordTally(
            words=self._count_words(window),
            size=len(window),
            starts_mid_word=window[0] not in self.separators,
            ends_mid_word=window[-1] not in self.separators,
        )

    def empty(self) -> WordTally:
        return WordTally()

    def merge(self, left: WordTally, right: WordTally) -> WordTally:
        if not left.size:
            return right
        if not right.size:
            return left
        # A word cut by the boundary was emitted once on each side.
        split_word = 1 if left.ends_mid_word and right.starts_mid_word else 0
        return WordTally(
            words=left.words + right.words - split_word,
            size=left.size + right.size,
            starts_mid_word=left.starts_mid_word,
            ends_mid_word=right.ends_mid_word,
        )

    def total(self, tally: WordTally) -> int:
        return tally.words

    def _count_words(self, window: bytes) -> int:
        if self.whitespace == "latin1":
            window = window.translate(_LATIN1_TO_SPACE)
        # bytes.split() with no separator splits on ASCII whitespace runs, which
        # is the in_word -> separator transition count of a two-state scan.
        return len(window.split())


KERNELS: Dict[str, CountingKernel] = {
    LineKernel.name: LineKernel(),
    WordKernel.name: WordKernel(),
}


def get_kernel(name: str, *, whitespace: str = DEFAULT_WHITESPACE) -> CountingKernel:
    if name == WordKernel.name:
        return WordKernel(whitespace)
    try:
        return KERNELS[name]
    except KeyError as exc:
        available = ", ".join(sorted(KERNELS))
        raise ValueError(f"Unknown counting kernel '{name}'. Available: {available}") from exc
