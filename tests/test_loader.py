from __future__ import annotations

from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from TickScope.Config import ExplorerConfig
from TickScope.Loader import LoadError, load_file, load_ticks, resolve_file, write_ticks_parquet
from TickScope.Records import Side, TickRecord


def test_parquet_round_trip_is_time_sorted(tmp_path: Path) -> None:
    ticks = [
        TickRecord(3.0, price=101.0, size=4, side=Side.BID),
        TickRecord(1.0, price=100.0, size=1, side=Side.ASK),
        TickRecord(1.0, price=100.5, size=2, side=Side.BID),
    ]
    p = write_ticks_parquet(ticks, tmp_path / "f1.parquet")
    got = load_ticks(p)
    assert [t.seconds_from_start for t in got] == [1.0, 1.0, 3.0]
    # ties keep file order
    assert [t.price for t in got] == [100.0, 100.5, 101.0]
    assert got[0].side is Side.ASK
    assert got[2].size == 4


def test_csv_with_malformed_timestamp(tmp_path: Path) -> None:
    p = tmp_path / "f2.csv"
    p.write_text(
        "seconds_from_start,price,size,side_desc\n"
        "2.0,100.5,3,Ask\n"
        "abc,101,2,Bid\n"
        "1.0,100.25,5,Bid\n",
        encoding="utf-8",
    )
    got = load_ticks(p)
    assert [t.seconds_from_start for t in got] == [1.0, 2.0, None]
    assert got[0].price == 100.25
    assert got[0].side is Side.BID
    assert got[2].price == 101.0


def test_ts_event_column_becomes_seconds(tmp_path: Path) -> None:
    base = 1_700_000_000_000_000_000
    table = pa.table(
        {
            "ts_event": pa.array([base, base + 1_500_000_000, base + 3_000_000_000], type=pa.timestamp("ns", tz="UTC")),
            "price": pa.array([1.0, 2.0, 3.0]),
        }
    )
    p = tmp_path / "f3.parquet"
    pq.write_table(table, p)
    got = load_ticks(p)
    assert [t.seconds_from_start for t in got] == [0.0, 1.5, 3.0]
    assert got[1].size is None


def test_missing_time_column(tmp_path: Path) -> None:
    p = tmp_path / "f4.parquet"
    pq.write_table(pa.table({"price": [1.0]}), p)
    with pytest.raises(LoadError):
        load_ticks(p)


def test_missing_and_unsupported_files(tmp_path: Path) -> None:
    with pytest.raises(LoadError):
        load_ticks(tmp_path / "nope.parquet")
    bad = tmp_path / "f5.txt"
    bad.write_text("x", encoding="utf-8")
    with pytest.raises(LoadError):
        load_ticks(bad)


def test_resolve_file(tmp_path: Path) -> None:
    (tmp_path / "day1.csv").write_text("seconds_from_start\n1\n", encoding="utf-8")
    assert resolve_file("day1", tmp_path) == tmp_path / "day1.csv"
    assert resolve_file("day1.csv", tmp_path) == tmp_path / "day1.csv"
    for bad in ("", "../etc/passwd", "a/b", ".hidden"):
        with pytest.raises(LoadError):
            resolve_file(bad, tmp_path)
    with pytest.raises(LoadError):
        resolve_file("day2", tmp_path)


def test_load_file_mock_and_real(tmp_path: Path) -> None:
    mock = ExplorerConfig(use_mock_data=True)
    assert len(load_file("GLBX-20250227-P8LQFHG7JM", mock)) == 100
    with pytest.raises(LoadError):
        load_file("unknown", mock)

    write_ticks_parquet([TickRecord(0.0, price=1.0, size=1, side=Side.ASK)], tmp_path / "real.parquet")
    real = ExplorerConfig(data_dir=tmp_path)
    assert len(load_file("real", real)) == 1


def test_symbol_column(tmp_path: Path) -> None:
    p = tmp_path / "f5.csv"
    p.write_text(
        "seconds_from_start,price,size,side_desc,symbol\n"
        "1.0,100.5,3,Ask,ES-2025H\n"
        "0.5,100.25,1,Bid,\n",
        encoding="utf-8",
    )
    got = load_ticks(p)
    assert [t.symbol for t in got] == [None, "ES-2025H"]

    back = load_ticks(write_ticks_parquet(got, tmp_path / "f5.parquet"))
    assert back == got
