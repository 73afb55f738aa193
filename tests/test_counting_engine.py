from __future__ import annotations

import json
import random
from pathlib import Path

import pytest

from common.errors import BackendError, ErrorCode, FileUnavailableError, ReadFailureError
from common.models import GlobalSettings, ProfileSettings, RuntimeConfig
from core.counting import CountingEngine, count_lines, count_words
from core.counting import parallelism
from core.counting.workers import RangeWorker


def _config(block_size: int = 512 * 1024, read_chunk_size: int = 1_048_576) -> RuntimeConfig:
    return RuntimeConfig(
        profile=ProfileSettings(block_size=block_size, read_chunk_size=read_chunk_size)
    )


def _write(tmp_path: Path, payload: bytes, name: str = "sample.txt") -> Path:
    path = tmp_path / name
    path.write_bytes(payload)
    return path


def test_two_terminated_lines(tmp_path) -> None:
    path = _write(tmp_path, b"abc\ndef\n")
    assert count_lines(path, workers=1) == 2
    report = CountingEngine(_config(block_size=2), workers=4).count(path)
    assert report.lines == 2
    assert report.words == 2
    assert report.size_bytes == 8
    assert len(report.ranges) == 4


def test_empty_file(tmp_path) -> None:
    path = _write(tmp_path, b"")
    report = CountingEngine(_config(), workers=4).count(path)
    assert (report.lines, report.words, report.size_bytes) == (0, 0, 0)
    assert len(report.ranges) == 1


def test_unterminated_single_word(tmp_path) -> None:
    path = _write(tmp_path, b"hello")
    assert count_lines(path, workers=3) == 0
    assert count_words(path, workers=3) == 1


def test_word_split_across_every_boundary(tmp_path) -> None:
    path = _write(tmp_path, b"abcdefgh")
    report = CountingEngine(_config(block_size=1), workers=8).count(path)
    assert report.words == 1


@pytest.mark.parametrize("workers", [1, 2, 3, 5, 8, 13])
@pytest.mark.parametrize("block_size", [1, 3, 64, 4096])
def test_parallel_counts_match_sequential_scan(tmp_path, workers: int, block_size: int) -> None:
    rng = random.Random(workers * 1000 + block_size)
    alphabet = b"abcxyz  \n\t\r"
    payload = bytes(rng.choice(alphabet) for _ in range(3000))
    path = _write(tmp_path, payload)

    engine = CountingEngine(_config(block_size=block_size, read_chunk_size=7), workers=workers)
    report = engine.count(path)

    assert report.lines == payload.count(b"\n")
    assert report.words == len(payload.split())
    assert report.size_bytes == len(payload)


def test_repeated_runs_are_identical(tmp_path) -> None:
    path = _write(tmp_path, b"one two\nthree  four five\n six")
    engine = CountingEngine(_config(block_size=4), workers=3)
    first = engine.count(path)
    second = engine.count(path)
    assert (first.lines, first.words) == (second.lines, second.words) == (2, 6)


def test_selected_kernels_only(tmp_path) -> None:
    path = _write(tmp_path, b"a b\n")
    report = CountingEngine(_config(), workers=2).count(path, ["words"])
    assert report.words == 2
    assert report.lines is None


def test_missing_file_fails_before_workers_start(tmp_path, monkeypatch) -> None:
    started: list[int] = []
    monkeypatch.setattr(RangeWorker, "start", lambda self: started.append(self.byte_range.index))
    with pytest.raises(FileUnavailableError) as exc:
        CountingEngine(_config(), workers=2).count(tmp_path / "absent.txt")
    assert exc.value.code == ErrorCode.FILE_UNAVAILABLE
    assert started == []


def test_one_failed_worker_fails_the_whole_count(tmp_path, monkeypatch) -> None:
    path = _write(tmp_path, b"x\n" * 64)
    original_scan = RangeWorker._scan

    def flaky_scan(self):
        if self.byte_range.index == 2:
            raise OSError("simulated read error")
        return original_scan(self)

    monkeypatch.setattr(RangeWorker, "_scan", flaky_scan)
    with pytest.raises(ReadFailureError) as exc:
        CountingEngine(_config(block_size=8), workers=4).count(path)
    assert exc.value.code == ErrorCode.READ_FAILURE
    assert exc.value.context["range_index"] == 2
    assert isinstance(exc.value.__cause__, OSError)


def test_file_truncated_mid_run_is_a_read_failure(tmp_path, monkeypatch) -> None:
    path = _write(tmp_path, b"word " * 100)
    engine = CountingEngine(_config(block_size=100), workers=5)
    real_plan = engine.planner.plan

    def plan_then_truncate(size, workers):
        ranges = real_plan(size, workers)
        path.write_bytes(b"word " * 10)
        return ranges

    monkeypatch.setattr(engine.planner, "plan", plan_then_truncate)
    with pytest.raises(ReadFailureError) as exc:
        engine.count(path)
    assert "unexpected end of file" in str(exc.value)


def test_progress_events_are_emitted_per_range(tmp_path) -> None:
    path = _write(tmp_path, b"a\nb\nc\nd\n")
    log_path = tmp_path / "logs" / "progress.jsonl"
    seen = []
    engine = CountingEngine(_config(block_size=2), workers=4, progress_log=log_path)
    engine.count(path, progress_callback=seen.append)

    assert [event.range_index for event in seen] == [0, 1, 2, 3]
    assert sum(event.bytes_read for event in seen) == 8
    records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert [record["range_index"] for record in records] == [0, 1, 2, 3]
    assert records[0]["file_path"] == str(path)
    assert records[0]["current_phase"] == "range-complete"


def test_worker_count_falls_back_to_one_without_platform_hint(monkeypatch) -> None:
    monkeypatch.setattr(parallelism.os, "cpu_count", lambda: None)
    assert parallelism.resolve_worker_count() == 1


def test_worker_count_resolution_order(monkeypatch) -> None:
    monkeypatch.setattr(parallelism.os, "cpu_count", lambda: 8)
    assert parallelism.resolve_worker_count() == 8
    assert parallelism.resolve_worker_count(limit=2) == 2
    assert parallelism.resolve_worker_count(3, limit=2) == 3
    with pytest.raises(ValueError):
        parallelism.resolve_worker_count(0)


def test_profile_limit_caps_workers(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(parallelism.os, "cpu_count", lambda: 16)
    path = _write(tmp_path, b"a b c\n")
    config = RuntimeConfig(profile=ProfileSettings(block_size=1, max_workers=3))
    report = CountingEngine(config).count(path)
    assert report.workers == 3
    assert len(report.ranges) == 3


@pytest.mark.parametrize("whitespace, expected", [("latin1", 3), ("ascii", 1)])
def test_whitespace_setting_selects_word_separators(tmp_path, whitespace: str, expected: int) -> None:
    path = _write(tmp_path, b"foo\xa0bar\x85baz")
    config = RuntimeConfig(
        global_settings=GlobalSettings(whitespace=whitespace),
        profile=ProfileSettings(block_size=4),
    )
    report = CountingEngine(config, workers=3).count(path)
    assert report.words == expected


def test_thread_start_failure_joins_started_workers(tmp_path, monkeypatch) -> None:
    path = _write(tmp_path, b"a b c d e f g h\n")
    started: list[RangeWorker] = []
    real_start = RangeWorker.start

    def limited_start(self):
        if self.byte_range.index >= 2:
            raise RuntimeError("can't start new thread")
        started.append(self)
        real_start(self)

    monkeypatch.setattr(RangeWorker, "start", limited_start)
    with pytest.raises(BackendError) as exc:
        CountingEngine(_config(block_size=2), workers=4).count(path)
    assert exc.value.code == ErrorCode.WORKER_START_FAILURE
    assert exc.value.context["started"] == 2
    assert len(started) == 2
    assert not any(worker.is_alive() for worker in started)
