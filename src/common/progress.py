"""Structured JSONL logging for range progress and run throughput."""
from __future__ import annotations

import json
import time
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

from .models import CountReport, RangeProgress


def _append_jsonl(path: Path, payload: Dict[str, Any]) -> None:
    payload["timestamp"] = time.time()
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(payload))
        handle.write("\n")


class ProgressLogger:
    """Appends one event per completed byte range; a ``None`` path disables it."""

    def __init__(self, path: Optional[Path]) -> None:
        self.path = path
        if path:
            path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, progress: RangeProgress) -> None:
        if not self.path:
            return
        payload = asdict(progress)
        payload["file_path"] = str(progress.file_path)
        _append_jsonl(self.path, payload)


class BenchmarkRecorder:
    """Stores one throughput record per counting run."""

    def __init__(self, path: Path) -> None:
        self.path = path
        path.parent.mkdir(parents=True, exist_ok=True)

    def record(self, report: CountReport, *, kernels: str) -> None:
        seconds = report.elapsed_seconds
        _append_jsonl(
            self.path,
            {
                "dataset": str(report.file_path),
                "kernels": kernels,
                "workers": report.workers,
                "bytes": report.size_bytes,
                "seconds": seconds,
                "bytes_per_second": report.size_bytes / seconds if seconds else 0.0,
            },
        )
