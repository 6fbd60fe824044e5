"""
TickScope/Records.py

Tick record model shared by the index, histogram and summary code.

Records reach the core either as TickRecord instances (from the loaders) or as
plain mappings such as {"seconds_from_start": 1.5, "price": 100.25}. Every
field read goes through record_value() so both shapes behave the same.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class Side(str, Enum):
    ASK = "Ask"
    BID = "Bid"

    @classmethod
    def parse(cls, x: Any) -> Optional["Side"]:
        if x is None:
            return None
        if isinstance(x, Side):
            return x
        s = str(x).strip().lower()
        if s in ("ask", "a", "sell", "s"):
            return cls.ASK
        if s in ("bid", "b", "buy"):
            return cls.BID
        return None


@dataclass(frozen=True)
class TickRecord:
    seconds_from_start: Optional[float]
    price: Optional[float] = None
    size: Optional[int] = None
    side: Optional[Side] = None
    symbol: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "seconds_from_start": self.seconds_from_start,
            "price": self.price,
            "size": self.size,
            "side_desc": self.side.value if self.side is not None else None,
            "symbol": self.symbol,
        }


def record_value(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def as_number(x: Any) -> Optional[float]:
    """
    Return x as a float when it is a real, non-NaN number; otherwise None.
    bool is rejected even though it subclasses int.
    """
    if x is None or isinstance(x, bool):
        return None
    if not isinstance(x, numbers.Real):
        return None
    v = float(x)
    if math.isnan(v):
        return None
    return v


def seconds_of(record: Any) -> Optional[float]:
    return as_number(record_value(record, "seconds_from_start"))


def finite_number(x: Any) -> Optional[float]:
    """as_number(), additionally rejecting +/-inf. Used where values are binned or averaged."""
    v = as_number(x)
    if v is None or math.isinf(v):
        return None
    return v
