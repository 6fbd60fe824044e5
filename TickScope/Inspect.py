"""
TickScope/Inspect.py

Quick sanity-check tool for tick files: loads one file, builds the bucket index,
queries a time window and prints the summary plus price/size histograms.

Examples:
  python -m TickScope.Inspect --file data/parsed/GLBX-20250227-P8LQFHG7JM.parquet --start 30 --end 90
  python -m TickScope.Inspect --mock GLBX-20250227-P8LQFHG7JM --bins 10
"""

from __future__ import annotations

import argparse
import math
from pathlib import Path
from typing import List, Optional, Sequence

from .Config import BIN_COUNT_PRESETS, ExplorerConfig
from .Explorer import HISTOGRAM_FIELDS, build_entry
from .Histogram import HistogramBin, histograms_for
from .Loader import LoadError, load_ticks
from .MockData import MOCK_FILES, generate_ticks
from .RangeIndex import query_range, time_bounds
from .Summary import summarize

BAR_WIDTH = 40


def _fmt(x: Optional[float], nd: int = 4) -> str:
    return "-" if x is None else f"{x:.{nd}f}"


def _print_histogram(name: str, bins: List[HistogramBin]) -> None:
    print(f"{name}_histogram ({len(bins)} bins):")
    if not bins:
        print("  (no valid values)")
        return
    top = max(b.count for b in bins) or 1
    for b in bins:
        bar = "#" * int(round(BAR_WIDTH * b.count / top))
        print(f"  {b.label:>12} | {b.count:>8} {bar}")


def _inspect(file_id: str, ticks: Sequence, *, start: float, end: float, bins: int, cfg: ExplorerConfig) -> None:
    entry = build_entry(file_id, ticks, cfg)
    print(f"file: {file_id}")
    print(f"rows_total: {len(entry.ticks)}")
    print(f"rows_indexed: {len(entry.index)}")
    if entry.index.skipped:
        print(f"rows_skipped: {entry.index.skipped}")
    bounds = time_bounds(entry.index, entry.ticks)
    if bounds is None:
        return
    print(f"seconds_min: {_fmt(bounds[0], 3)}")
    print(f"seconds_max: {_fmt(bounds[1], 3)}")
    print(f"buckets: {len(entry.index.keys)} x {entry.index.bucket_width}s")

    rows = query_range(entry.index, entry.ticks, start, end)
    print(f"window: [{start}, {end}]")
    print(f"rows_in_window: {len(rows)}")
    if not rows:
        return

    s = summarize(rows)
    print(f"ask_count: {s.ask_count}")
    print(f"bid_count: {s.bid_count}")
    print(f"price_min: {_fmt(s.min_price)}")
    print(f"price_max: {_fmt(s.max_price)}")
    print(f"price_avg: {_fmt(s.avg_price)}")
    print(f"price_std: {_fmt(s.price_std_dev)}")
    print(f"size_avg: {_fmt(s.avg_size, 2)}")

    for name, hs in histograms_for(rows, HISTOGRAM_FIELDS, bins, config=cfg).items():
        _print_histogram(name, hs)


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Inspect a tick file: time-window query + histograms.")
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--file", help="Path to a .parquet or .csv tick file")
    src.add_argument("--mock", choices=sorted(MOCK_FILES), help="Use a built-in mock file")
    ap.add_argument("--start", type=float, default=0.0, help="Window start, seconds from start (default: 0)")
    ap.add_argument("--end", type=float, default=math.inf, help="Window end, seconds from start (default: no limit)")
    ap.add_argument(
        "--bins",
        type=int,
        default=ExplorerConfig.histogram_bin_count,
        help=f"Histogram bin count (presets: {', '.join(str(b) for b in BIN_COUNT_PRESETS)})",
    )
    ap.add_argument("--bucket-width", type=int, default=ExplorerConfig.bucket_width, help="Index bucket width in seconds")
    args = ap.parse_args(argv)

    try:
        cfg = ExplorerConfig(bucket_width=args.bucket_width, histogram_bin_count=args.bins).validate()
    except ValueError as e:
        raise SystemExit(str(e)) from e
    if args.start > args.end:
        raise SystemExit(f"--end must be >= --start (got {args.start}..{args.end})")

    if args.mock:
        file_id, ticks = args.mock, generate_ticks(args.mock)
    else:
        try:
            ticks = load_ticks(Path(args.file))
        except LoadError as e:
            raise SystemExit(str(e)) from e
        file_id = str(args.file)

    _inspect(file_id, ticks, start=args.start, end=args.end, bins=args.bins, cfg=cfg)


if __name__ == "__main__":
    main()
