from __future__ import annotations

import pytest

from common.models import LineTally, WordTally
from core.counting.kernels import LineKernel, WordKernel, get_kernel


def test_line_kernel_counts_terminators_only() -> None:
    kernel = LineKernel()
    assert kernel.scan(b"abc\ndef\n") == LineTally(lines=2, size=8)
    assert kernel.total(kernel.scan(b"hello")) == 0
    assert kernel.total(kernel.scan(b"")) == 0


def test_word_kernel_reports_edge_state() -> None:
    tally = WordKernel().scan(b"ab cd")
    assert tally == WordTally(words=2, size=5, starts_mid_word=True, ends_mid_word=True)

    tally = WordKernel().scan(b" ab\n")
    assert tally.words == 1
    assert not tally.starts_mid_word
    assert not tally.ends_mid_word


def test_word_kernel_treats_latin1_whitespace_as_separators() -> None:
    kernel = WordKernel()
    assert kernel.scan(b"a\tb\nc\rd\x0be\x0cf g").words == 7
    # 0x85 (NEL) and 0xA0 (no-break space) separate words when bytes are read as Latin-1.
    tally = kernel.scan(b"foo\xa0bar\x85baz\xa0")
    assert tally.words == 3
    assert not tally.ends_mid_word
    assert kernel.scan(b"caf\xe9 bar").words == 2


def test_ascii_word_kernel_keeps_high_bytes_inside_words() -> None:
    kernel = WordKernel("ascii")
    assert kernel.scan(b"a\tb\nc\rd\x0be\x0cf g").words == 7
    tally = kernel.scan(b"foo\xa0bar\x85baz\xa0")
    assert tally.words == 1
    assert tally.ends_mid_word


def test_unknown_whitespace_set_rejected() -> None:
    with pytest.raises(ValueError):
        WordKernel("unicode")
    assert get_kernel("words", whitespace="ascii").whitespace == "ascii"


def test_word_merge_repairs_split_word() -> None:
    kernel = WordKernel()
    merged = kernel.merge(kernel.scan(b"hel"), kernel.scan(b"lo world"))
    assert merged.words == 2
    assert merged.starts_mid_word and merged.ends_mid_word


def test_word_merge_keeps_words_split_on_whitespace() -> None:
    kernel = WordKernel()
    merged = kernel.merge(kernel.scan(b"hello "), kernel.scan(b"world"))
    assert merged.words == 2


def test_empty_windows_are_transparent_when_merging() -> None:
    kernel = WordKernel()
    tallies = [kernel.scan(b"wo"), kernel.scan(b""), kernel.scan(b""), kernel.scan(b"rd")]
    assert kernel.total(kernel.fold(tallies)) == 1


@pytest.mark.parametrize("size", [1, 2, 3, 5, 7])
def test_folding_fixed_windows_matches_single_scan(size: int) -> None:
    payload = b"  the quick\tbrown fox\n\njumps over  the lazy dog"
    windows = [payload[i : i + size] for i in range(0, len(payload), size)]
    for kernel in (LineKernel(), WordKernel()):
        assert kernel.total(kernel.fold(kernel.scan(w) for w in windows)) == kernel.total(
            kernel.scan(payload)
        )


def test_get_kernel_rejects_unknown_name() -> None:
    assert isinstance(get_kernel("words"), WordKernel)
    with pytest.raises(ValueError) as exc:
        get_kernel("characters")
    assert "lines" in str(exc.value)
