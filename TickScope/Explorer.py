"""
TickScope/Explorer.py

Glue between the loader, the cache and the query/histogram engines.

A file is loaded at most once: the first request starts a load task, concurrent
requests for the same file await that task, and later requests are pure cache
lookups. Loading and index building run in a worker thread; the finished entry
is committed on the event loop with a single DataCache.put.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .Config import ExplorerConfig
from .DataCache import DataCache, FileCacheEntry
from .FileCatalog import CatalogItem, mock_catalog, scan_catalog
from .Histogram import HistogramBin, histograms_for, side_histogram
from .Loader import LoadError, load_file
from .RangeIndex import build_index, query_range
from .Summary import SummaryStats, spread_series, summarize

log = logging.getLogger(__name__)

HISTOGRAM_FIELDS = ("price", "size")

LoaderFn = Callable[[str], Sequence[Any]]


def build_entry(file_id: str, ticks: Sequence[Any], config: ExplorerConfig) -> FileCacheEntry:
    ticks = tuple(ticks)
    index = build_index(ticks, config.bucket_width)
    if index.skipped:
        log.warning("%s: %d record(s) without a usable timestamp were not indexed", file_id, index.skipped)
    return FileCacheEntry(
        file_id=file_id,
        ticks=ticks,
        index=index,
        summary=summarize(ticks),
        distributions={f: side_histogram(ticks, f, config.histogram_bin_count) for f in HISTOGRAM_FIELDS},
        spreads=spread_series(ticks),
        loaded_at=time.time(),
    )


class TickExplorer:
    def __init__(
        self,
        config: Optional[ExplorerConfig] = None,
        cache: Optional[DataCache] = None,
        loader: Optional[LoaderFn] = None,
    ):
        self.config = (config or ExplorerConfig()).validate()
        self.cache = cache if cache is not None else DataCache()
        self._loader: LoaderFn = loader or (lambda file_id: load_file(file_id, self.config))
        self._pending: Dict[str, "asyncio.Future[FileCacheEntry]"] = {}
        self._generation = 0  # bumped by clear_cache(); stale loads do not commit

    # ---------------- files ----------------

    def list_files(self) -> List[CatalogItem]:
        if self.config.use_mock_data:
            return mock_catalog()
        return scan_catalog(self.config.data_dir)

    def _load_and_build(self, file_id: str) -> FileCacheEntry:
        try:
            ticks = self._loader(file_id)
        except LoadError:
            raise
        except Exception as e:
            raise LoadError(f"Error loading file data: {e}") from e
        return build_entry(file_id, ticks, self.config)

    def load(self, file_id: str) -> FileCacheEntry:
        """Blocking load for scripts and tests; same caching rules as ensure_loaded()."""
        entry = self.cache.get(file_id)
        if entry is not None:
            log.debug("using cached data for %s", file_id)
            return entry
        entry = self._load_and_build(file_id)
        self.cache.put(file_id, entry)
        return entry

    async def ensure_loaded(self, file_id: str) -> FileCacheEntry:
        entry = self.cache.get(file_id)
        if entry is not None:
            log.debug("using cached data for %s", file_id)
            return entry

        fut = self._pending.get(file_id)
        if fut is None:
            fut = asyncio.ensure_future(self._load_async(file_id, self._generation))
            self._pending[file_id] = fut

            def _done(f: "asyncio.Future[FileCacheEntry]", file_id: str = file_id) -> None:
                if self._pending.get(file_id) is f:
                    del self._pending[file_id]

            fut.add_done_callback(_done)
        else:
            log.debug("awaiting pending load for %s", file_id)
        # Shield: a cancelled caller must not cancel the load other callers share.
        return await asyncio.shield(fut)

    async def _load_async(self, file_id: str, generation: int) -> FileCacheEntry:
        entry = await asyncio.to_thread(self._load_and_build, file_id)
        if generation == self._generation:
            self.cache.put(file_id, entry)
        else:
            log.info("cache cleared while %s was loading; result not cached", file_id)
        return entry

    def pending(self) -> List[str]:
        return list(self._pending)

    # ---------------- selection ----------------

    async def toggle_selection(self, file_id: str) -> bool:
        """Select (loading if needed) or deselect a file. Returns the new selection state."""
        if self.cache.is_selected(file_id):
            self.cache.deselect(file_id)
            return False
        self.cache.select(file_id)
        try:
            await self.ensure_loaded(file_id)
        except LoadError:
            self.cache.deselect(file_id)
            raise
        return True

    # ---------------- queries ----------------

    def query(self, file_id: str, lo: float, hi: float) -> List[Any]:
        entry = self.cache.get(file_id)
        if entry is None:
            return []
        return query_range(entry.index, entry.ticks, lo, hi)

    def histograms(
        self,
        file_id: str,
        fields: Iterable[str] = HISTOGRAM_FIELDS,
        bin_count: Optional[int] = None,
        lo: Optional[float] = None,
        hi: Optional[float] = None,
    ) -> Dict[str, List[HistogramBin]]:
        entry = self.cache.get(file_id)
        fields = list(fields)
        if entry is None:
            return {f: [] for f in fields}
        if lo is None and hi is None:
            records: Sequence[Any] = entry.ticks
        else:
            records = query_range(
                entry.index,
                entry.ticks,
                float("-inf") if lo is None else lo,
                float("inf") if hi is None else hi,
            )
        n = self.config.histogram_bin_count if bin_count is None else bin_count
        return histograms_for(records, fields, n, config=self.config)

    def summary(self, file_id: str) -> Optional[SummaryStats]:
        entry = self.cache.get(file_id)
        return entry.summary if entry is not None else None

    def distributions(self, file_id: str) -> Optional[Dict[str, List[Dict[str, Any]]]]:
        entry = self.cache.get(file_id)
        return entry.distributions if entry is not None else None

    def spreads(self, file_id: str) -> Optional[List[Dict[str, float]]]:
        entry = self.cache.get(file_id)
        return entry.spreads if entry is not None else None

    def clear_cache(self) -> None:
        self._generation += 1
        self._pending = {}
        self.cache.invalidate_all()
