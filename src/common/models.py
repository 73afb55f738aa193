"""Data models shared across the CLI, counting engine, and logging layers."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

DEFAULT_BLOCK_SIZE = 512 * 1024
DEFAULT_READ_CHUNK_SIZE = 1_048_576


@dataclass(frozen=True, slots=True)
class ByteRange:
    """Half-open ``[start, end)`` span of file offsets owned by one worker."""

    index: int
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class LineTally:
    """Newline count for one scanned window."""

    lines: int = 0
    size: int = 0


@dataclass(frozen=True, slots=True)
class WordTally:
    """Word count for one window plus the mid-word state at both of its edges."""

    words: int = 0
    size: int = 0
    starts_mid_word: bool = False
    ends_mid_word: bool = False


@dataclass(slots=True)
class RangeProgress:
    """Progress payload reported once per completed byte range."""

    file_path: Path
    range_index: int
    start: int
    end: int
    bytes_read: int
    current_phase: str
    elapsed_seconds: Optional[float] = None


@dataclass(slots=True)
class CountReport:
    """Outcome of counting a single file."""

    file_path: Path
    size_bytes: int
    workers: int
    ranges: List[ByteRange] = field(default_factory=list)
    lines: Optional[int] = None
    words: Optional[int] = None
    elapsed_seconds: float = 0.0


@dataclass(slots=True)
class GlobalSettings:
    """Global knobs that apply across profiles."""

    whitespace: str = "latin1"  # latin1 | ascii word separators


@dataclass(slots=True)
class ProfileSettings:
    """Profile-specific planner and worker limits."""

    description: str = "built-in defaults"
    block_size: int = DEFAULT_BLOCK_SIZE
    read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE
    max_workers: Optional[int] = None  # None -> platform parallelism


@dataclass(slots=True)
class RuntimeConfig:
    """Resolved configuration for a single run."""

    global_settings: GlobalSettings = field(default_factory=GlobalSettings)
    profile: ProfileSettings = field(default_factory=ProfileSettings)
