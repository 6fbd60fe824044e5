"""
TickScope/Search.py

Binary search over ascending sequences.

Sentinels:
- lower_bound -> len(a) when every element is < target
- upper_bound -> -1 when every element is > target

`key` may be a callable or a field name; field names are read with
record_value() so records and mappings can be searched directly.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence, Union

from .Records import record_value

Key = Union[None, str, Callable[[Any], Any]]


def _projector(key: Key) -> Optional[Callable[[Any], Any]]:
    if key is None:
        return None
    if isinstance(key, str):
        name = key
        return lambda item: record_value(item, name)
    return key


def lower_bound(a: Sequence[Any], target: Any, key: Key = None) -> int:
    """First index i with a[i] >= target, or len(a)."""
    proj = _projector(key)
    lo, hi = 0, len(a)
    while lo < hi:
        mid = (lo + hi) // 2
        v = a[mid] if proj is None else proj(a[mid])
        if v < target:
            lo = mid + 1
        else:
            hi = mid
    return lo


def upper_bound(a: Sequence[Any], target: Any, key: Key = None) -> int:
    """Last index i with a[i] <= target, or -1."""
    proj = _projector(key)
    lo, hi = 0, len(a)
    while lo < hi:
        mid = (lo + hi) // 2
        v = a[mid] if proj is None else proj(a[mid])
        if target < v:
            hi = mid
        else:
            lo = mid + 1
    return lo - 1
