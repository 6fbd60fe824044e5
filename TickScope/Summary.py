"""
TickScope/Summary.py

Per-file summary statistics and the bid/ask spread series shown next to the charts.
Non-finite prices, sizes and timestamps are left out of every figure.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, Set

from .Records import Side, finite_number, record_value


@dataclass(frozen=True)
class SummaryStats:
    total_records: int
    ask_count: int
    bid_count: int
    min_price: Optional[float]
    max_price: Optional[float]
    avg_price: Optional[float]
    price_std_dev: Optional[float]
    min_size: Optional[float]
    max_size: Optional[float]
    avg_size: Optional[float]
    start_seconds: Optional[float]
    end_seconds: Optional[float]
    unique_symbols: int = 0
    unique_symbol_list: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _side(rec: Any) -> Optional[Side]:
    s = Side.parse(record_value(rec, "side"))
    return s if s is not None else Side.parse(record_value(rec, "side_desc"))


def summarize(records: Sequence[Any]) -> SummaryStats:
    ask = bid = 0
    prices: List[float] = []
    sizes: List[float] = []
    start: Optional[float] = None
    end: Optional[float] = None
    symbols: Set[str] = set()
    for rec in records:
        side = _side(rec)
        if side is Side.ASK:
            ask += 1
        elif side is Side.BID:
            bid += 1
        p = finite_number(record_value(rec, "price"))
        if p is not None:
            prices.append(p)
        s = finite_number(record_value(rec, "size"))
        if s is not None:
            sizes.append(s)
        t = finite_number(record_value(rec, "seconds_from_start"))
        if t is not None:
            start = t if start is None or t < start else start
            end = t if end is None or t > end else end
        sym = record_value(rec, "symbol")
        if sym:
            symbols.add(str(sym))

    avg_price = math.fsum(prices) / len(prices) if prices else None
    std = None
    if prices:
        std = math.sqrt(math.fsum((p - avg_price) ** 2 for p in prices) / len(prices))

    return SummaryStats(
        total_records=len(records),
        ask_count=ask,
        bid_count=bid,
        min_price=min(prices) if prices else None,
        max_price=max(prices) if prices else None,
        avg_price=avg_price,
        price_std_dev=std,
        min_size=min(sizes) if sizes else None,
        max_size=max(sizes) if sizes else None,
        avg_size=math.fsum(sizes) / len(sizes) if sizes else None,
        start_seconds=start,
        end_seconds=end,
        unique_symbols=len(symbols),
        unique_symbol_list=", ".join(sorted(symbols)),
    )


def spread_series(records: Sequence[Any], interval: float = 1.0) -> List[Dict[str, float]]:
    """
    Lowest ask and highest bid per `interval` seconds, and their spread.
    Intervals that lack either side are dropped.
    """
    if not interval > 0:
        raise ValueError(f"interval must be > 0 (got {interval!r})")
    asks: Dict[float, float] = {}
    bids: Dict[float, float] = {}
    for rec in records:
        t = finite_number(record_value(rec, "seconds_from_start"))
        p = finite_number(record_value(rec, "price"))
        side = _side(rec)
        if t is None or p is None or side is None:
            continue
        k = math.floor(t / interval) * interval
        if side is Side.ASK:
            prev = asks.get(k)
            if prev is None or p < prev:
                asks[k] = p
        else:
            prev = bids.get(k)
            if prev is None or p > prev:
                bids[k] = p

    out: List[Dict[str, float]] = []
    for k in sorted(set(asks) & set(bids)):
        out.append(
            {
                "seconds_from_start": float(k),
                "min_ask": asks[k],
                "max_bid": bids[k],
                "spread": asks[k] - bids[k],
            }
        )
    return out


def spread_box(spreads: Sequence[float]) -> Optional[Dict[str, float]]:
    """Box-plot figures using floor-index quantiles over the sorted spreads."""
    vals = sorted(v for v in (finite_number(x) for x in spreads) if v is not None)
    if not vals:
        return None
    n = len(vals)
    return {
        "min": vals[0],
        "q1": vals[int(n * 0.25)],
        "median": vals[int(n * 0.5)],
        "q3": vals[int(n * 0.75)],
        "max": vals[-1],
    }
