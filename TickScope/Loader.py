"""
TickScope/Loader.py

Read tick files into time-sorted TickRecord lists.

Supported inputs:
- parquet (pyarrow.parquet) and csv (pyarrow.csv) files with a `seconds_from_start`
  column, or a `ts_event` timestamp column which is converted to seconds from the
  first event
- optional columns: price, size, side_desc (or side) with Ask / Bid values, symbol
- the built-in mock files (see MockData.py)

Rows are stably sorted by time with unusable timestamps placed last; the index
skips those rows later.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import pyarrow as pa
import pyarrow.compute as pc
import pyarrow.csv as pacsv
import pyarrow.parquet as pq

from .Config import ExplorerConfig
from .MockData import MOCK_FILES, generate_ticks
from .Records import Side, TickRecord, as_number

log = logging.getLogger(__name__)

TIME_COL = "seconds_from_start"
TS_COL = "ts_event"
OPTIONAL_COLS = ("price", "size", "side_desc", "side", "symbol")
TICK_SUFFIXES = (".parquet", ".csv")


class LoadError(RuntimeError):
    """A tick file could not be located or read."""


def _to_float(x: Any) -> Optional[float]:
    v = as_number(x)
    if v is not None:
        return v
    if isinstance(x, str) and x.strip():
        try:
            return as_number(float(x))
        except ValueError:
            return None
    return None


def _to_size(x: Any) -> Optional[int]:
    v = _to_float(x)
    return int(v) if v is not None else None


def _ts_to_ns(x: Any) -> Optional[int]:
    """
    Normalize ts_event values to epoch ns:
    - int ns
    - datetime (timestamp columns that were not cast)
    """
    if x is None:
        return None
    if isinstance(x, int):
        return int(x)
    if hasattr(x, "timestamp"):
        return int(x.timestamp() * 1e9)
    return None


def _read_table(path: Path) -> pa.Table:
    suffix = path.suffix.lower()
    if suffix == ".parquet":
        pf = pq.ParquetFile(path)
        names = pf.schema_arrow.names
        cols = [c for c in (TIME_COL, TS_COL) + OPTIONAL_COLS if c in names]
        return pf.read(columns=cols)
    if suffix == ".csv":
        return pacsv.read_csv(path)
    raise LoadError(f"Unsupported tick file type: {path.name} (expected one of {TICK_SUFFIXES})")


def _column(table: pa.Table, name: str) -> Optional[List[Any]]:
    if name not in table.column_names:
        return None
    col = table[name]
    # Keep timestamps as raw int64 ns instead of python datetimes.
    if pa.types.is_timestamp(col.type):
        col = col.cast(pa.int64())
    return col.to_pylist()


def _seconds_column(table: pa.Table) -> List[Optional[float]]:
    raw = _column(table, TIME_COL)
    if raw is not None:
        return [_to_float(x) for x in raw]
    ts = _column(table, TS_COL)
    if ts is None:
        raise LoadError(f"Missing required column {TIME_COL!r} (or {TS_COL!r}). Has: {table.column_names}")
    ns = [_ts_to_ns(x) for x in ts]
    valid = [n for n in ns if n is not None]
    if not valid:
        return [None] * len(ns)
    t0 = min(valid)
    return [(n - t0) / 1e9 if n is not None else None for n in ns]


def table_to_ticks(table: pa.Table) -> List[TickRecord]:
    seconds = _seconds_column(table)
    n = len(seconds)
    prices = _column(table, "price") or [None] * n
    sizes = _column(table, "size") or [None] * n
    sides = _column(table, "side_desc") or _column(table, "side") or [None] * n
    symbols = _column(table, "symbol") or [None] * n

    # Stable sort by time; nulls (unusable timestamps) sort last by default.
    order = pc.sort_indices(
        pa.table({TIME_COL: pa.array(seconds, type=pa.float64())}),
        sort_keys=[(TIME_COL, "ascending")],
    ).to_pylist()

    return [
        TickRecord(
            seconds_from_start=seconds[i],
            price=_to_float(prices[i]),
            size=_to_size(sizes[i]),
            side=Side.parse(sides[i]),
            symbol=str(symbols[i]) if symbols[i] not in (None, "") else None,
        )
        for i in order
    ]


def load_ticks(path: Path) -> List[TickRecord]:
    path = Path(path)
    if not path.exists():
        raise LoadError(f"Missing tick file: {path}")
    try:
        table = _read_table(path)
    except LoadError:
        raise
    except (OSError, pa.ArrowException) as e:
        raise LoadError(f"Could not read {path.name}: {e}") from e
    ticks = table_to_ticks(table)
    log.info("loaded %d tick(s) from %s", len(ticks), path)
    return ticks


def resolve_file(file_id: str, data_dir: Path) -> Path:
    """
    Map a file id (file name, with or without suffix) to a path inside data_dir.
    Rejects anything that could escape data_dir.
    """
    name = str(file_id or "").strip()
    if not name or Path(name).name != name or not re.fullmatch(r"[A-Za-z0-9][A-Za-z0-9 _.\-]{0,200}", name):
        raise LoadError(f"Invalid file id: {file_id!r}")
    data_dir = Path(data_dir)
    if name.lower().endswith(TICK_SUFFIXES):
        return data_dir / name
    for suffix in TICK_SUFFIXES:
        p = data_dir / f"{name}{suffix}"
        if p.exists():
            return p
    raise LoadError(f"No tick file for {name!r} in {data_dir}")


def load_file(file_id: str, config: ExplorerConfig) -> List[TickRecord]:
    if config.use_mock_data:
        if file_id not in MOCK_FILES:
            raise LoadError(f"Unknown mock file: {file_id!r}")
        return generate_ticks(file_id)
    return load_ticks(resolve_file(file_id, config.data_dir))


def write_ticks_parquet(ticks: List[TickRecord], path: Path) -> Path:
    """Write ticks in the layout load_ticks() expects. Used to build fixtures and sample files."""
    rows: Dict[str, List[Any]] = {TIME_COL: [], "price": [], "size": [], "side_desc": [], "symbol": []}
    for t in ticks:
        d = t.to_dict()
        for k in rows:
            rows[k].append(d[k])
    table = pa.table(
        {
            TIME_COL: pa.array(rows[TIME_COL], type=pa.float64()),
            "price": pa.array(rows["price"], type=pa.float64()),
            "size": pa.array(rows["size"], type=pa.int64()),
            "side_desc": pa.array(rows["side_desc"], type=pa.string()),
            "symbol": pa.array(rows["symbol"], type=pa.string()),
        }
    )
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    pq.write_table(table, path)
    return path
