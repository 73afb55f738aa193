"""Worker count resolution."""
from __future__ import annotations

import os
from typing import Optional


def platform_parallelism() -> int:
    """Return the host's CPU count, or 1 when the platform cannot report it."""

    return os.cpu_count() or 1


def resolve_worker_count(requested: Optional[int] = None, *, limit: Optional[int] = None) -> int:
    """Pick the worker count for one run.

    An explicit ``requested`` value wins; otherwise the platform hint is used,
    capped by the profile ``limit``. The result is always at least 1.
    """

    if requested is not None:
        if requested < 1:
            raise ValueError(f"worker count must be at least 1, got {requested}")
        return requested
    available = max(1, platform_parallelism())
    if limit is not None and limit > 0:
        return min(available, limit)
    return available
