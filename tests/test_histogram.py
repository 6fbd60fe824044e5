from __future__ import annotations

import math
import random

import pytest

from TickScope.Config import ExplorerConfig
from TickScope.Histogram import histogram, histograms_for, sampling_stride, side_histogram
from TickScope.Records import Side, TickRecord


def test_two_bin_scenario() -> None:
    recs = [{"price": 1}, {"price": 1}, {"price": 2}, {"price": 3}]
    bins = histogram(recs, "price", 2)
    assert len(bins) == 2
    assert sum(b.count for b in bins) == 4
    assert bins[0].bin_start == 1
    assert bins[0].count >= 2
    assert bins[-1].bin_end >= 3
    assert [b.count for b in bins] == [3, 1]
    assert bins[0].label == "1.00"


def test_bins_are_contiguous_and_equal_width() -> None:
    recs = [{"v": float(i)} for i in range(101)]
    bins = histogram(recs, "v", 10)
    assert len(bins) == 10
    widths = {round(b.bin_end - b.bin_start, 9) for b in bins}
    assert len(widths) == 1
    for a, b in zip(bins, bins[1:]):
        assert a.bin_end == pytest.approx(b.bin_start)
    assert sum(b.count for b in bins) == 101


def test_max_value_lands_in_last_bin() -> None:
    recs = [{"v": float(i)} for i in range(11)]
    bins = histogram(recs, "v", 10)
    assert bins[-1].count >= 1
    assert bins[-1].bin_start <= 10 <= bins[-1].bin_end
    assert sum(b.count for b in bins) == 11


def test_degenerate_single_value() -> None:
    recs = [{"price": 5.5} for _ in range(7)]
    bins = histogram(recs, "price", 20)
    assert len(bins) == 1
    assert bins[0].count == 7
    assert bins[0].bin_start == bins[0].bin_end == 5.5


def test_invalid_values_are_ignored() -> None:
    recs = [{"price": 1.0}, {"price": None}, {"price": math.nan}, {"price": "x"}, {"price": True}, {}, {"price": 3.0}]
    bins = histogram(recs, "price", 4)
    assert sum(b.count for b in bins) == 2
    assert bins[0].bin_start == 1.0


def test_no_valid_values() -> None:
    assert histogram([], "price", 10) == []
    assert histogram([{"price": None}, {"size": 3}], "price", 10) == []


def test_bin_count_must_be_positive() -> None:
    with pytest.raises(ValueError):
        histogram([{"price": 1}], "price", 0)


def test_multi_field() -> None:
    recs = [TickRecord(seconds_from_start=float(i), price=100 + i * 0.5, size=i % 4 + 1) for i in range(40)]
    out = histograms_for(recs, ["price", "size", "nope"], 5)
    assert list(out) == ["price", "size", "nope"]
    assert sum(b.count for b in out["price"]) == 40
    assert sum(b.count for b in out["size"]) == 40
    assert out["nope"] == []
    assert out["price"] == histogram(recs, "price", 5)


def test_stride_formula() -> None:
    cfg = ExplorerConfig(max_sample_size=100, sampling_threshold=1000, max_bins_assumed=10)
    assert sampling_stride(1000, 10, cfg) == 1
    assert sampling_stride(5000, 10, cfg) == 50
    assert sampling_stride(1001, 1, cfg) == 2
    assert sampling_stride(200_000, 20, ExplorerConfig()) == 4


def test_sampled_counts_keep_exact_range() -> None:
    cfg = ExplorerConfig(max_sample_size=100, sampling_threshold=1000, max_bins_assumed=10)
    rng = random.Random(5)
    recs = [{"price": rng.uniform(10, 20)} for _ in range(5000)]
    # extremes at indices the counting pass skips (stride 50)
    recs[7] = {"price": 1.0}
    recs[13] = {"price": 99.0}
    bins = histogram(recs, "price", 10, config=cfg)
    assert bins[0].bin_start == 1.0
    assert bins[-1].bin_end >= 99.0
    assert sum(b.count for b in bins) == 5000  # 100 sampled hits x stride 50


def test_sampled_counts_are_proportional() -> None:
    cfg = ExplorerConfig(max_sample_size=100, sampling_threshold=1000, max_bins_assumed=10)
    rng = random.Random(9)
    recs = [{"size": rng.randint(1, 50) if rng.random() < 0.9 else None} for _ in range(5000)]
    valid = sum(1 for r in recs if r["size"] is not None)
    bins = histogram(recs, "size", 10, config=cfg)
    assert sum(b.count for b in bins) == pytest.approx(valid, rel=0.15)


def test_side_histogram() -> None:
    recs = [
        TickRecord(0.0, price=1.0, size=1, side=Side.ASK),
        TickRecord(1.0, price=1.0, size=1, side=Side.BID),
        TickRecord(2.0, price=2.0, size=1, side=Side.ASK),
        TickRecord(3.0, price=3.0, size=1, side=None),
    ]
    rows = side_histogram(recs, "price", 2)
    assert len(rows) == 2
    assert rows[0]["Ask"] == 2 and rows[0]["Bid"] == 1
    assert rows[1]["Ask"] == 0 and rows[1]["Bid"] == 0
    assert side_histogram([], "price", 2) == []
    one = side_histogram([{"price": 4.0, "side_desc": "Bid"}], "price", 5)
    assert one == [{"binStart": 4.0, "binEnd": 4.0, "binLabel": "4.00", "Ask": 0, "Bid": 1}]


def test_infinite_values_are_ignored() -> None:
    recs = [{"price": -math.inf}, {"price": 1.0}, {"price": 2.0}, {"price": math.inf}]
    bins = histogram(recs, "price", 2)
    assert len(bins) == 2
    assert bins[0].bin_start == 1.0
    assert bins[0].label == "1.00"
    assert all(math.isfinite(b.bin_start) and math.isfinite(b.bin_end) for b in bins)
    assert [b.count for b in bins] == [1, 1]

    assert histogram([{"price": math.inf}, {"price": -math.inf}], "price", 4) == []

    rows = side_histogram([{"price": -math.inf, "side_desc": "Ask"}, {"price": 3.0, "side_desc": "Bid"}], "price", 3)
    assert rows == [{"binStart": 3.0, "binEnd": 3.0, "binLabel": "3.00", "Ask": 0, "Bid": 1}]


def test_bin_count_defaults_to_config() -> None:
    recs = [{"v": float(i)} for i in range(50)]
    assert len(histogram(recs, "v", config=ExplorerConfig(histogram_bin_count=7))) == 7
    assert len(histogram(recs, "v")) == ExplorerConfig().histogram_bin_count
    assert len(histogram(recs, "v", 3, config=ExplorerConfig(histogram_bin_count=7))) == 3
