from __future__ import annotations

import pytest

from common.units import format_byte_size


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 Bytes"),
        (1023, "1023 Bytes"),
        (1024, "1.00 KiB"),
        (1536, "1.50 KiB"),
        (1048575, "1024.00 KiB"),
        (1048576, "1.00 MiB"),
        (5 * 1024**3, "5.00 GiB"),
        (1024**8, "1.00 YiB"),
        (2048 * 1024**8, "2048.00 YiB"),
    ],
)
def test_format_byte_size(size: int, expected: str) -> None:
    assert format_byte_size(size) == expected


def test_negative_size_rejected() -> None:
    with pytest.raises(ValueError):
        format_byte_size(-1)
