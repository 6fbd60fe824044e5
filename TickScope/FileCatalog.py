"""
TickScope/FileCatalog.py

Scan a tick data directory (parquet / csv) and build the list of loadable files:
- file id (file name without suffix)
- display name
- path
- row count (parquet metadata; None for csv, which would need a full read)

This is used by the explorer to populate the file selector.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pyarrow.parquet as pq

from .MockData import list_mock_files


@dataclass(frozen=True)
class CatalogItem:
    file_id: str
    name: str
    path: str
    rows: Optional[int] = None

    def to_dict(self) -> Dict[str, object]:
        return {"id": self.file_id, "name": self.name, "path": self.path, "rows": self.rows}


def _parquet_rows(path: Path) -> Optional[int]:
    try:
        return int(pq.ParquetFile(path).metadata.num_rows)
    except Exception:
        return None


def scan_catalog(data_dir: Path) -> List[CatalogItem]:
    """
    One item per tick file in data_dir. When a parquet and a csv share a stem,
    the parquet wins. Sorted by file id, newest-looking names (e.g. dated ids) first.
    """
    data_dir = Path(data_dir)
    if not data_dir.exists():
        return []

    picked: Dict[str, Path] = {}
    for suffix in (".csv", ".parquet"):
        for p in data_dir.glob(f"*{suffix}"):
            if p.is_file():
                picked[p.stem] = p

    items: List[CatalogItem] = []
    for stem, p in picked.items():
        rows = _parquet_rows(p) if p.suffix.lower() == ".parquet" else None
        items.append(CatalogItem(file_id=stem, name=stem, path=str(p), rows=rows))

    items.sort(key=lambda x: x.file_id, reverse=True)
    return items


def mock_catalog() -> List[CatalogItem]:
    return [CatalogItem(file_id=m.file_id, name=m.name, path=m.path) for m in list_mock_files()]
