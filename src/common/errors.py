"""Shared error codes and exceptions for the counting engine and CLI."""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    CONFIG_ERROR = "CONFIG_ERROR"
    IO_ERROR = "IO_ERROR"
    STATE_ERROR = "STATE_ERROR"
    FILE_UNAVAILABLE = "FILE_UNAVAILABLE"
    READ_FAILURE = "READ_FAILURE"
    WORKER_START_FAILURE = "WORKER_START_FAILURE"


class BackendError(RuntimeError):
    """Exception carrying a structured error code for the CLI."""

    def __init__(self, code: ErrorCode, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.context = context or {}

    def __str__(self) -> str:  # pragma: no cover - formatting sugar
        base = super().__str__()
        return f"[{self.code.value}] {base}" if base else self.code.value


class FileUnavailableError(BackendError):
    """Raised when the target file cannot be stat'ed or opened."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(
            ErrorCode.FILE_UNAVAILABLE,
            f"Cannot access '{path}': {reason}",
            context={"path": str(path)},
        )


class ReadFailureError(BackendError):
    """Raised when a worker fails to seek or read its byte range."""

    def __init__(self, path: Path, *, range_index: int, start: int, end: int, reason: str) -> None:
        super().__init__(
            ErrorCode.READ_FAILURE,
            f"Reading bytes [{start}, {end}) of '{path}' failed in range {range_index}: {reason}",
            context={"path": str(path), "range_index": range_index, "start": start, "end": end},
        )
