"""
TickScope/Histogram.py

Equal-width histograms over numeric record fields (price, size, ...).

Two passes per call:
- range pass over every record: min / max / count of valid values
- counting pass, stride-sampled once the input exceeds the sampling threshold;
  each sampled hit adds `stride` so counts stay proportional to the full set

Valid values are finite real numbers. None, NaN, +/-inf, strings and bools are ignored.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .Config import ExplorerConfig
from .Records import Side, finite_number, record_value

BIN_EPSILON = 1e-6  # widens bins so max lands in the last bin despite rounding


@dataclass(frozen=True)
class HistogramBin:
    bin_start: float
    bin_end: float
    count: int
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {"binStart": self.bin_start, "binEnd": self.bin_end, "count": self.count, "binLabel": self.label}


def _label(x: float) -> str:
    return f"{x:.2f}"


def sampling_stride(total: int, bin_count: int, config: ExplorerConfig) -> int:
    if total <= int(config.sampling_threshold):
        return 1
    return max(1, math.ceil((total * bin_count) / (config.max_sample_size * config.max_bins_assumed)))


@dataclass
class _Range:
    lo: float = math.inf
    hi: float = -math.inf
    valid: int = 0

    def add(self, v: float) -> None:
        if v < self.lo:
            self.lo = v
        if v > self.hi:
            self.hi = v
        self.valid += 1


class _Bins:
    """Bin layout for one field; index() maps a value to its bin."""

    def __init__(self, lo: float, hi: float, bin_count: int):
        self.lo = lo
        self.hi = hi
        self.n = bin_count
        self.width = (hi - lo) / bin_count + BIN_EPSILON

    def index(self, v: float) -> int:
        if v == self.hi:
            return self.n - 1
        i = int(math.floor((v - self.lo) / self.width))
        return min(max(i, 0), self.n - 1)

    def edges(self, i: int) -> tuple:
        return self.lo + i * self.width, self.lo + (i + 1) * self.width


def _scan_ranges(records: Sequence[Any], fields: Sequence[str]) -> Dict[str, _Range]:
    ranges = {f: _Range() for f in fields}
    for rec in records:
        for f in fields:
            v = finite_number(record_value(rec, f))
            if v is not None:
                ranges[f].add(v)
    return ranges


def histograms_for(
    records: Sequence[Any],
    fields: Iterable[str],
    bin_count: Optional[int] = None,
    *,
    config: Optional[ExplorerConfig] = None,
) -> Dict[str, List[HistogramBin]]:
    """
    Histogram every field in `fields` with one range scan and one counting scan.
    Fields with no valid values map to [].
    bin_count defaults to config.histogram_bin_count.
    """
    config = config or ExplorerConfig()
    bin_count = int(config.histogram_bin_count if bin_count is None else bin_count)
    if bin_count < 1:
        raise ValueError(f"bin_count must be >= 1 (got {bin_count})")
    fields = list(dict.fromkeys(fields))
    out: Dict[str, List[HistogramBin]] = {}
    if not fields:
        return out
    if not records:
        return {f: [] for f in fields}

    ranges = _scan_ranges(records, fields)

    layouts: Dict[str, _Bins] = {}
    counts: Dict[str, List[int]] = {}
    for f in fields:
        r = ranges[f]
        if r.valid == 0:
            out[f] = []
        elif r.lo == r.hi:
            # Single distinct value: one bin with the exact count.
            out[f] = [HistogramBin(bin_start=r.lo, bin_end=r.lo, count=r.valid, label=_label(r.lo))]
        else:
            layouts[f] = _Bins(r.lo, r.hi, bin_count)
            counts[f] = [0] * bin_count

    if layouts:
        total = len(records)
        stride = sampling_stride(total, bin_count, config)
        for i in range(0, total, stride):
            rec = records[i]
            for f, layout in layouts.items():
                v = finite_number(record_value(rec, f))
                if v is not None:
                    counts[f][layout.index(v)] += stride

        for f, layout in layouts.items():
            bins: List[HistogramBin] = []
            for i, c in enumerate(counts[f]):
                start, end = layout.edges(i)
                bins.append(HistogramBin(bin_start=start, bin_end=end, count=c, label=_label(start)))
            out[f] = bins

    return {f: out[f] for f in fields}


def histogram(
    records: Sequence[Any],
    field: str,
    bin_count: Optional[int] = None,
    *,
    config: Optional[ExplorerConfig] = None,
) -> List[HistogramBin]:
    return histograms_for(records, [field], bin_count, config=config)[field]


def side_histogram(records: Sequence[Any], field: str, bin_count: int = 20) -> List[Dict[str, Any]]:
    """
    Same bins as histogram(), with separate Ask / Bid counts per bin.
    Records without a side still count toward the range but not toward either column.
    Always exact (no sampling); used for per-file distributions computed once at load.
    """
    bin_count = int(bin_count)
    if bin_count < 1:
        raise ValueError(f"bin_count must be >= 1 (got {bin_count})")
    r = _scan_ranges(records, [field])[field]
    if r.valid == 0:
        return []

    if r.lo == r.hi:
        layout = None
        rows = [{"binStart": r.lo, "binEnd": r.lo, "binLabel": _label(r.lo), Side.ASK.value: 0, Side.BID.value: 0}]
    else:
        layout = _Bins(r.lo, r.hi, bin_count)
        rows = []
        for i in range(bin_count):
            start, end = layout.edges(i)
            rows.append({"binStart": start, "binEnd": end, "binLabel": _label(start), Side.ASK.value: 0, Side.BID.value: 0})

    for rec in records:
        v = finite_number(record_value(rec, field))
        if v is None:
            continue
        side = Side.parse(record_value(rec, "side"))
        if side is None:
            side = Side.parse(record_value(rec, "side_desc"))
        if side is None:
            continue
        i = 0 if layout is None else layout.index(v)
        rows[i][side.value] += 1
    return rows
