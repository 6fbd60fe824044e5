"""
TickScope/MockData.py

Synthetic tick files for demos and tests. Output is deterministic per file id.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Dict, List

from .Records import Side, TickRecord


@dataclass(frozen=True)
class MockFile:
    file_id: str
    base_price: float
    volatility: float
    symbol: str

    @property
    def name(self) -> str:
        return self.file_id

    @property
    def path(self) -> str:
        return f"data/parsed/{self.file_id}"


MOCK_FILES: Dict[str, MockFile] = {
    "GLBX-20250227-P8LQFHG7JM": MockFile("GLBX-20250227-P8LQFHG7JM", base_price=100.0, volatility=0.5, symbol="ES-2025H"),
    "GLBX-20250226-X7KPFGT5LM": MockFile("GLBX-20250226-X7KPFGT5LM", base_price=98.0, volatility=0.7, symbol="ES-2025M"),
}

MOCK_TICK_COUNT = 100
MOCK_TICK_SPACING_S = 0.5


def list_mock_files() -> List[MockFile]:
    return list(MOCK_FILES.values())


def generate_ticks(file_id: str, n: int = MOCK_TICK_COUNT) -> List[TickRecord]:
    """
    n ticks spaced MOCK_TICK_SPACING_S apart: a slow sine around the base price plus noise.
    Raises KeyError for unknown ids.
    """
    mock = MOCK_FILES[file_id]
    rng = random.Random(file_id)
    out: List[TickRecord] = []
    for i in range(n):
        price = mock.base_price + math.sin(i * 0.1) * mock.volatility + rng.random() * mock.volatility
        out.append(
            TickRecord(
                seconds_from_start=i * MOCK_TICK_SPACING_S,
                price=round(price, 4),
                size=rng.randint(10, 109),
                side=Side.ASK if rng.random() > 0.5 else Side.BID,
                symbol=mock.symbol,
            )
        )
    return out
