"""
TickScope/Server.py

JSON API over the tick explorer:
- file catalog + selection
- time-range tick queries (bucket index)
- histograms, per-side distributions, summary statistics, bid/ask spreads
- cache clear / status

Run:
  python -m TickScope.Server

Then query, e.g.:
  http://127.0.0.1:8000/api/files
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from .Config import BIN_COUNT_PRESETS, ExplorerConfig
from .DataCache import FileCacheEntry
from .Explorer import HISTOGRAM_FIELDS, TickExplorer
from .Loader import LoadError
from .RangeIndex import time_bounds
from .Summary import spread_box

# How long /api/cache/status reports "cleared" after a clear (UI feedback only).
CACHE_CLEARED_TTL_S = 3.0


def _tick_dict(r: Any) -> Dict[str, Any]:
    return r.to_dict() if hasattr(r, "to_dict") else dict(r)


def _parse_fields(fields: str) -> List[str]:
    out = [f.strip() for f in str(fields or "").split(",") if f.strip()]
    if not out:
        raise ValueError("fields must name at least one column, e.g. price,size")
    return out


def create_app(config: Optional[ExplorerConfig] = None, explorer: Optional[TickExplorer] = None) -> FastAPI:
    explorer = explorer or TickExplorer(config or ExplorerConfig.from_env())
    app = FastAPI(title="TickScope")
    app.state.explorer = explorer

    def _load_failed(file_id: str, e: LoadError) -> HTTPException:
        known = {it.file_id for it in explorer.list_files()}
        return HTTPException(status_code=400 if file_id in known else 404, detail=str(e))

    async def _entry(file_id: str) -> FileCacheEntry:
        try:
            return await explorer.ensure_loaded(file_id)
        except LoadError as e:
            raise _load_failed(file_id, e) from e

    # Handlers are async so all explorer state is touched from the event loop only.
    @app.get("/api/files")
    async def files():
        return JSONResponse(
            {
                "mock": explorer.config.use_mock_data,
                "data_dir": str(explorer.config.data_dir),
                "items": [it.to_dict() for it in explorer.list_files()],
                "selected": explorer.cache.selected,
            }
        )

    @app.get("/api/metadata")
    async def metadata(file_id: str = Query(...)):
        entry = await _entry(file_id)
        bounds = time_bounds(entry.index, entry.ticks)
        return JSONResponse(
            {
                "file_id": file_id,
                "records": len(entry.ticks),
                "indexed": len(entry.index),
                "skipped": entry.index.skipped,
                "bucket_width": entry.index.bucket_width,
                "bucket_count": len(entry.index.keys),
                "start_seconds": bounds[0] if bounds else None,
                "end_seconds": bounds[1] if bounds else None,
                "bin_count_default": explorer.config.histogram_bin_count,
                "bin_count_presets": list(BIN_COUNT_PRESETS),
            }
        )

    @app.get("/api/ticks")
    async def ticks(
        file_id: str = Query(...),
        start: float = Query(0.0, description="Seconds from start (inclusive)."),
        end: Optional[float] = Query(None, description="Seconds from start (inclusive). Omit for no upper limit."),
        limit: Optional[int] = Query(None, ge=1, le=1_000_000),
    ):
        await _entry(file_id)
        rows = explorer.query(file_id, start, float("inf") if end is None else end)
        total = len(rows)
        if limit is not None:
            rows = rows[: int(limit)]
        return JSONResponse(
            {
                "file_id": file_id,
                "start": start,
                "end": end,
                "count": total,
                "truncated": len(rows) < total,
                "ticks": [_tick_dict(r) for r in rows],
            }
        )

    @app.get("/api/histogram")
    async def histogram(
        file_id: str = Query(...),
        fields: str = Query(",".join(HISTOGRAM_FIELDS)),
        bins: Optional[int] = Query(None, ge=1, le=1000),
        start: Optional[float] = Query(None),
        end: Optional[float] = Query(None),
    ):
        try:
            names = _parse_fields(fields)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        await _entry(file_id)
        n = explorer.config.histogram_bin_count if bins is None else int(bins)
        hists = explorer.histograms(file_id, names, n, lo=start, hi=end)
        return JSONResponse(
            {
                "file_id": file_id,
                "bins": n,
                "histograms": {f: [b.to_dict() for b in hs] for f, hs in hists.items()},
            }
        )

    @app.get("/api/distribution")
    async def distribution(file_id: str = Query(...)):
        entry = await _entry(file_id)
        return JSONResponse({"file_id": file_id, "distributions": entry.distributions})

    @app.get("/api/summary")
    async def summary(file_id: str = Query(...)):
        entry = await _entry(file_id)
        return JSONResponse({"file_id": file_id, "summary": entry.summary.to_dict()})

    @app.get("/api/spread")
    async def spread(file_id: str = Query(...)):
        entry = await _entry(file_id)
        return JSONResponse(
            {
                "file_id": file_id,
                "series": entry.spreads,
                "box": spread_box([row["spread"] for row in entry.spreads]),
            }
        )

    @app.post("/api/select")
    async def select(request: Request):
        try:
            payload = await request.json()
            file_id = str(payload.get("file_id") or "").strip()
        except Exception as e:
            raise HTTPException(status_code=400, detail=f"Invalid JSON body: {e}") from e
        if not file_id:
            raise HTTPException(status_code=400, detail="file_id is required")
        try:
            selected = await explorer.toggle_selection(file_id)
        except LoadError as e:
            raise _load_failed(file_id, e) from e
        return JSONResponse({"file_id": file_id, "selected": selected, "selected_files": explorer.cache.selected})

    @app.post("/api/cache/clear")
    async def cache_clear():
        explorer.clear_cache()
        return JSONResponse({"ok": True})

    @app.get("/api/cache/status")
    async def cache_status():
        cleared_at = explorer.cache.cleared_at
        recently = cleared_at is not None and (time.time() - float(cleared_at)) < CACHE_CLEARED_TTL_S
        payload: Dict[str, Any] = {
            "files": explorer.cache.file_ids(),
            "selected": explorer.cache.selected,
            "pending": explorer.pending(),
            "cleared": recently,
        }
        return JSONResponse(payload)

    return app


APP = create_app()


if __name__ == "__main__":
    import uvicorn

    # Override with env vars if desired:
    #   HOST=127.0.0.1 PORT=8000 TICKSCOPE_MOCK=1 python -m TickScope.Server
    cfg = ExplorerConfig.from_env()
    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port, reload=False)
