"""
TickScope: time-indexed range queries and histograms over recorded tick files.
"""

from .Config import ExplorerConfig
from .DataCache import DataCache, FileCacheEntry
from .Histogram import HistogramBin, histogram, histograms_for
from .RangeIndex import TimeBucketIndex, build_index, query_range
from .Records import Side, TickRecord
from .Search import lower_bound, upper_bound

__all__ = [
    "DataCache",
    "ExplorerConfig",
    "FileCacheEntry",
    "HistogramBin",
    "Side",
    "TickRecord",
    "TimeBucketIndex",
    "build_index",
    "histogram",
    "histograms_for",
    "lower_bound",
    "query_range",
    "upper_bound",
]
