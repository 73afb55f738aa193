"""Human-readable byte sizes using binary (1024-based) units."""
from __future__ import annotations

BINARY_UNITS = ("KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB", "YiB")
_STEP = 1024


def format_byte_size(size: int) -> str:
    """Render ``size`` bytes as ``"N Bytes"`` or a 2-decimal binary unit string."""

    if size < 0:
        raise ValueError(f"byte size must be non-negative, got {size}")
    if size < _STEP:
        return f"{size} Bytes"
    exponent = 1
    while exponent < len(BINARY_UNITS) and size >= _STEP ** (exponent + 1):
        exponent += 1
    return f"{size / _STEP ** exponent:.2f} {BINARY_UNITS[exponent - 1]}"
