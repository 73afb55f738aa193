"""Command line entry point: ``pwc [-c] [-l] [-w] PATH``."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from common.config import DEFAULT_PROFILE, load_runtime_config
from common.errors import BackendError
from common.models import CountReport, RangeProgress
from common.progress import BenchmarkRecorder
from common.units import format_byte_size
from core.counting import CountingEngine, LineKernel, WordKernel


def render_progress(progress: RangeProgress) -> None:
    elapsed = f" {progress.elapsed_seconds:.3f}s" if progress.elapsed_seconds is not None else ""
    print(
        f"[count] range={progress.range_index} bytes=[{progress.start}, {progress.end}) "
        f"read={progress.bytes_read}{elapsed}"
    )


def selected_kernels(args: argparse.Namespace) -> List[str]:
    if not (args.bytes or args.lines or args.words):
        return [LineKernel.name, WordKernel.name]
    kernels = []
    if args.lines:
        kernels.append(LineKernel.name)
    if args.words:
        kernels.append(WordKernel.name)
    return kernels


def render_report(args: argparse.Namespace, report: CountReport) -> List[str]:
    name = report.file_path.name
    if not (args.bytes or args.lines or args.words):
        return [f"{report.lines} {report.words} {report.size_bytes}"]
    lines = []
    if args.bytes:
        lines.append(f"{name} size is {format_byte_size(report.size_bytes)}.")
    if args.lines:
        lines.append(f"{name} has {report.lines} lines.")
    if args.words:
        lines.append(f"{name} has {report.words} words.")
    return lines


def command_count(args: argparse.Namespace) -> None:
    profile_overrides = {}
    if args.block_size is not None:
        profile_overrides["block_size"] = args.block_size
    runtime = load_runtime_config(
        args.profile,
        config_path=Path(args.config) if args.config else None,
        overrides={"profile": profile_overrides},
    )
    engine = CountingEngine(
        runtime,
        workers=args.workers,
        progress_log=Path(args.progress_log) if args.progress_log else None,
    )
    path = Path(args.path)
    kernels = selected_kernels(args)
    if kernels:
        report = engine.count(
            path,
            kernels,
            progress_callback=render_progress if args.verbose else None,
        )
    else:
        # -c alone needs the size only; no workers are started.
        report = CountReport(file_path=path, size_bytes=engine.file_size(path), workers=0)

    for line in render_report(args, report):
        print(line)

    if args.benchmark_log:
        BenchmarkRecorder(Path(args.benchmark_log)).record(report, kernels=",".join(kernels) or "bytes")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{value}'") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a value of at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pwc",
        description="Count lines, words, and bytes of a file using parallel workers",
    )
    parser.add_argument("path", help="Full path to the file")
    parser.add_argument("-c", "--bytes", action="store_true", help="Report the file size")
    parser.add_argument("-l", "--lines", action="store_true", help="Report the number of lines")
    parser.add_argument("-w", "--words", action="store_true", help="Report the number of words")
    parser.add_argument(
        "-m",
        "--characters",
        action="store_true",
        help="Report the number of characters (not supported yet)",
    )
    parser.add_argument(
        "-j",
        "--workers",
        type=_positive_int,
        default=None,
        help="Number of worker threads (default: CPU count, capped by the profile)",
    )
    parser.add_argument(
        "--block-size",
        type=_positive_int,
        default=None,
        help="Planner block size in bytes (overrides the profile)",
    )
    parser.add_argument(
        "--profile",
        default=DEFAULT_PROFILE,
        help="Configuration profile name (default: %(default)s)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the configuration JSON (default: config/defaults.json when present)",
    )
    parser.add_argument(
        "--progress-log",
        default=None,
        help="Append per-range progress events to this JSONL file",
    )
    parser.add_argument(
        "--benchmark-log",
        default=None,
        help="Append a throughput record for this run to this JSONL file",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print per-range progress")
    parser.set_defaults(func=command_count)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.characters:
        parser.error("character counting (-m/--characters) is not supported")
    try:
        args.func(args)
    except BackendError as exc:
        print(f"pwc: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
