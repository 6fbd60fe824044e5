from __future__ import annotations

from typing import List

import pytest

from TickScope.Records import Side, TickRecord


def make_ticks(times: List[float], price0: float = 100.0) -> List[TickRecord]:
    return [
        TickRecord(
            seconds_from_start=float(t),
            price=price0 + (i % 7) * 0.25,
            size=1 + (i % 5),
            side=Side.ASK if i % 2 == 0 else Side.BID,
        )
        for i, t in enumerate(times)
    ]


@pytest.fixture
def scenario_ticks() -> List[TickRecord]:
    return make_ticks([0, 5, 9, 10, 15, 25])
