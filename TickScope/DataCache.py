"""
TickScope/DataCache.py

Per-file memo of loaded ticks, their time index and the artifacts derived at load time.

There is no eviction policy: entries stay until invalidate_all(). The cache also
tracks which files are currently selected so a clear resets both.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .RangeIndex import TimeBucketIndex
from .Summary import SummaryStats

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileCacheEntry:
    file_id: str
    ticks: Sequence[Any]
    index: TimeBucketIndex
    summary: SummaryStats
    distributions: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)  # field -> per-side bins
    spreads: List[Dict[str, float]] = field(default_factory=list)
    loaded_at: float = 0.0


class DataCache:
    def __init__(self) -> None:
        self._entries: Dict[str, FileCacheEntry] = {}
        self._selected: List[str] = []
        self.cleared_at: Optional[float] = None

    def get(self, file_id: str) -> Optional[FileCacheEntry]:
        return self._entries.get(file_id)

    def put(self, file_id: str, entry: FileCacheEntry) -> None:
        # Single assignment: readers see either the old entry or the new one.
        self._entries[file_id] = entry

    def invalidate_all(self) -> None:
        n = len(self._entries)
        self._entries = {}
        self._selected = []
        self.cleared_at = time.time()
        log.info("cache cleared (%d file(s) dropped)", n)

    def file_ids(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # ---------------- selection ----------------

    @property
    def selected(self) -> List[str]:
        return list(self._selected)

    def select(self, file_id: str) -> None:
        if file_id not in self._selected:
            self._selected.append(file_id)

    def deselect(self, file_id: str) -> None:
        self._selected = [f for f in self._selected if f != file_id]

    def is_selected(self, file_id: str) -> bool:
        return file_id in self._selected
