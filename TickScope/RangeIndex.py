"""
TickScope/RangeIndex.py

Time-bucket index over one file's tick sequence.

build_index() groups record positions into fixed-width buckets keyed by the
bucket start (floor(t / width) * width). query_range() answers inclusive
[lo, hi] time windows by binary-searching the sorted bucket keys, trimming the
first and last candidate buckets and taking interior buckets whole.

The sequence must be sorted ascending by seconds_from_start; positions inside a
bucket inherit that order, which is what makes the per-bucket trims valid.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .Records import seconds_of
from .Search import lower_bound, upper_bound

log = logging.getLogger(__name__)

BUCKET_WIDTH_DEFAULT = 10


@dataclass(frozen=True)
class TimeBucketIndex:
    bucket_width: float
    buckets: Dict[int, List[int]]
    keys: List[int]  # ascending bucket starts
    size: int  # number of indexed positions
    skipped: int = 0  # records without a usable timestamp

    def __len__(self) -> int:
        return self.size


def _bucket_start(t: float, width: float) -> int:
    b = math.floor(t / width) * width
    return int(b) if float(b).is_integer() else b


def build_index(sequence: Sequence[Any], bucket_width: float = BUCKET_WIDTH_DEFAULT) -> TimeBucketIndex:
    if not bucket_width > 0:
        raise ValueError(f"bucket_width must be > 0 (got {bucket_width!r})")
    buckets: Dict[int, List[int]] = {}
    skipped = 0
    size = 0
    for i, rec in enumerate(sequence):
        t = seconds_of(rec)
        if t is None or math.isinf(t):
            skipped += 1
            continue
        key = _bucket_start(t, bucket_width)
        pos = buckets.get(key)
        if pos is None:
            buckets[key] = [i]
        else:
            pos.append(i)
        size += 1
    if skipped:
        log.debug("build_index skipped %d malformed record(s) of %d", skipped, len(sequence))
    return TimeBucketIndex(
        bucket_width=bucket_width,
        buckets=buckets,
        keys=sorted(buckets),
        size=size,
        skipped=skipped,
    )


def query_positions(index: Optional[TimeBucketIndex], sequence: Sequence[Any], lo: float, hi: float) -> List[int]:
    """
    Positions (into sequence) of records with lo <= seconds_from_start <= hi, ascending.
    """
    if index is None or not index.keys:
        return []
    if not (lo <= hi):  # also rejects NaN bounds
        return []

    keys = index.keys
    width = index.bucket_width

    if math.isinf(lo):
        start_pos = 0 if lo < 0 else len(keys)
    else:
        # Bucket at or below lo. If lo is before the first bucket, scan from the first one.
        start_pos = max(0, upper_bound(keys, _bucket_start(lo, width)))
    if math.isinf(hi):
        end_pos = len(keys) - 1 if hi > 0 else -1
    else:
        # Bucket at or above hi. If hi is past the last bucket, stop at the last one.
        end_pos = min(len(keys) - 1, lower_bound(keys, _bucket_start(hi, width)))
    if start_pos > end_pos:
        return []

    def _t(i: int) -> float:
        return seconds_of(sequence[i])  # type: ignore[return-value]

    out: List[int] = []
    for p in range(start_pos, end_pos + 1):
        positions = index.buckets[keys[p]]
        i0 = lower_bound(positions, lo, key=_t) if p == start_pos else 0
        j = upper_bound(positions, hi, key=_t) + 1 if p == end_pos else len(positions)
        if i0 < j:
            out.extend(positions[i0:j])
    return out


def query_range(index: Optional[TimeBucketIndex], sequence: Sequence[Any], lo: float, hi: float) -> List[Any]:
    return [sequence[i] for i in query_positions(index, sequence, lo, hi)]


def time_bounds(index: Optional[TimeBucketIndex], sequence: Sequence[Any]) -> Optional[tuple]:
    """(first, last) indexed timestamp, or None for an empty index."""
    if index is None or not index.keys:
        return None
    first = index.buckets[index.keys[0]][0]
    last = index.buckets[index.keys[-1]][-1]
    return seconds_of(sequence[first]), seconds_of(sequence[last])
