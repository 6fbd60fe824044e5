from __future__ import annotations

from pathlib import Path

import pytest

from TickScope.Inspect import main
from TickScope.Loader import write_ticks_parquet
from TickScope.MockData import generate_ticks

MOCK_ID = "GLBX-20250227-P8LQFHG7JM"


def test_mock_window(capsys) -> None:
    main(["--mock", MOCK_ID, "--start", "0", "--end", "10", "--bins", "5"])
    out = capsys.readouterr().out
    assert "rows_total: 100" in out
    assert "rows_in_window: 21" in out
    assert "price_histogram (5 bins):" in out
    assert "size_histogram (5 bins):" in out


def test_parquet_file(tmp_path: Path, capsys) -> None:
    p = write_ticks_parquet(generate_ticks(MOCK_ID, n=40), tmp_path / "t.parquet")
    main(["--file", str(p), "--start", "5", "--end", "7"])
    out = capsys.readouterr().out
    assert "rows_total: 40" in out
    assert "rows_in_window: 5" in out
    assert "buckets: 2 x 10s" in out


def test_bad_arguments(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        main(["--mock", MOCK_ID, "--start", "10", "--end", "5"])
    with pytest.raises(SystemExit):
        main(["--file", str(tmp_path / "missing.parquet")])
    with pytest.raises(SystemExit):
        main(["--mock", MOCK_ID, "--bins", "0"])
