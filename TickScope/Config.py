"""
TickScope/Config.py

Explorer settings. Defaults match the dashboard (10 s buckets, 20 bins, 100k sample cap).

Override with env vars if desired:
  TICKSCOPE_DATA_DIR=./data TICKSCOPE_BUCKET_WIDTH=5 python -m TickScope.Server
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple


DATA_DIR_DEFAULT = Path("data/parsed")
BIN_COUNT_PRESETS: Tuple[int, ...] = (10, 20, 30, 50, 100)

_TRUE = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ExplorerConfig:
    bucket_width: int = 10  # seconds per index bucket
    histogram_bin_count: int = 20
    max_sample_size: int = 100_000
    sampling_threshold: int = 100_000  # records above this are stride-sampled when counting
    max_bins_assumed: int = 10
    data_dir: Path = DATA_DIR_DEFAULT
    use_mock_data: bool = False
    host: str = "127.0.0.1"
    port: int = 8000

    def validate(self) -> "ExplorerConfig":
        if not self.bucket_width > 0:
            raise ValueError(f"bucket_width must be > 0 (got {self.bucket_width!r})")
        if int(self.histogram_bin_count) < 1:
            raise ValueError(f"histogram_bin_count must be >= 1 (got {self.histogram_bin_count!r})")
        if int(self.max_sample_size) < 1 or int(self.max_bins_assumed) < 1:
            raise ValueError("max_sample_size and max_bins_assumed must be >= 1")
        if int(self.sampling_threshold) < 0:
            raise ValueError("sampling_threshold must be >= 0")
        return self

    def with_overrides(self, **changes) -> "ExplorerConfig":
        return replace(self, **changes).validate()

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ExplorerConfig":
        env = os.environ if env is None else env
        base = cls()

        def _int(name: str, default: int) -> int:
            raw = env.get(name)
            if raw is None or not str(raw).strip():
                return default
            try:
                return int(str(raw).strip())
            except ValueError as e:
                raise ValueError(f"{name} must be an integer (got {raw!r})") from e

        cfg = cls(
            bucket_width=_int("TICKSCOPE_BUCKET_WIDTH", base.bucket_width),
            histogram_bin_count=_int("TICKSCOPE_BIN_COUNT", base.histogram_bin_count),
            max_sample_size=_int("TICKSCOPE_MAX_SAMPLE_SIZE", base.max_sample_size),
            sampling_threshold=_int("TICKSCOPE_SAMPLING_THRESHOLD", base.sampling_threshold),
            max_bins_assumed=_int("TICKSCOPE_MAX_BINS_ASSUMED", base.max_bins_assumed),
            data_dir=Path(env.get("TICKSCOPE_DATA_DIR") or base.data_dir),
            use_mock_data=str(env.get("TICKSCOPE_MOCK", "")).strip().lower() in _TRUE,
            host=env.get("HOST", base.host),
            port=_int("PORT", base.port),
        )
        return cfg.validate()
