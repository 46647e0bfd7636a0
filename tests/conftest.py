"""Pytest configuration and fixtures."""

from typing import Callable, List, Optional, Sequence

import numpy as np
import pytest

from ta_engine.domain.candle import Candle
from ta_engine.domain.candle_store import CandleStore

BASE_TS = 1_700_000_000_000
MINUTE_MS = 60_000

CandleFactory = Callable[..., List[Candle]]


def candles_from_closes(
    closes: Sequence[float],
    volumes: Optional[Sequence[float]] = None,
    spread: float = 1.0,
) -> List[Candle]:
    """Oldest-first candles whose open is the previous close."""
    candles = []
    prev = closes[0]
    for i, close in enumerate(closes):
        open_ = prev
        candles.append(
            Candle(
                timestamp=BASE_TS + i * MINUTE_MS,
                open=open_,
                high=max(open_, close) + spread,
                low=min(open_, close) - spread,
                close=close,
                volume=volumes[i] if volumes is not None else 1000.0,
            )
        )
        prev = close
    return candles


@pytest.fixture
def make_candles() -> CandleFactory:
    """Factory building oldest-first candles from a close series."""
    return candles_from_closes


@pytest.fixture
def sample_candles() -> List[Candle]:
    """120 random-walk candles (seeded)."""
    np.random.seed(42)
    closes = 100 + np.cumsum(np.random.randn(120) * 0.5)
    volumes = np.random.randint(1000, 10000, 120).astype(float)
    return candles_from_closes(closes.tolist(), volumes.tolist(), spread=0.3)


@pytest.fixture
def rising_candles() -> List[Candle]:
    """80 candles with strictly rising closes."""
    return candles_from_closes([100.0 + i for i in range(80)])


@pytest.fixture
def falling_candles() -> List[Candle]:
    """80 candles with strictly falling closes."""
    return candles_from_closes([200.0 - i for i in range(80)])


@pytest.fixture
def sample_store(sample_candles: List[Candle]) -> CandleStore:
    """Store holding the random-walk candles."""
    return CandleStore(sample_candles, max_size=1000)
