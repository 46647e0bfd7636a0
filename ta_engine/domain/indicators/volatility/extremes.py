"""
Rolling MAX (highest high) and MIN (lowest low).

Both return the current candle's high / low until ``period`` candles
have been seen.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque

from ...candle import Candle
from ..base import (
    IndicatorBuilder,
    IndicatorCategory,
    TAsBuilderFactory,
    require_positive_period,
)


@dataclass(frozen=True)
class MAX:
    """Highest high over ``period`` candles."""

    period: int
    max: float

    def get(self) -> float:
        return self.max

    def __str__(self) -> str:
        return f"MAX({self.period}: {self.max})"


@dataclass(frozen=True)
class MIN:
    """Lowest low over ``period`` candles."""

    period: int
    min: float

    def get(self) -> float:
        return self.min

    def __str__(self) -> str:
        return f"MIN({self.period}: {self.min})"


class MAXBuilder(IndicatorBuilder[MAX]):
    name = "max"

    def __init__(self, period: int):
        self.period = require_positive_period(self.name, period)
        self._highs: Deque[float] = deque(maxlen=period)

    def reset(self) -> None:
        self._highs.clear()

    def _empty_snapshot(self) -> MAX:
        return MAX(self.period, 0.0)

    def next(self, candle: Candle) -> MAX:
        self._highs.append(candle.high)
        if len(self._highs) < self.period:
            return MAX(self.period, candle.high)
        return MAX(self.period, max(self._highs))


class MINBuilder(IndicatorBuilder[MIN]):
    name = "min"

    def __init__(self, period: int):
        self.period = require_positive_period(self.name, period)
        self._lows: Deque[float] = deque(maxlen=period)

    def reset(self) -> None:
        self._lows.clear()

    def _empty_snapshot(self) -> MIN:
        return MIN(self.period, 0.0)

    def next(self, candle: Candle) -> MIN:
        self._lows.append(candle.low)
        if len(self._lows) < self.period:
            return MIN(self.period, candle.low)
        return MIN(self.period, min(self._lows))


class MAXsBuilderFactory(TAsBuilderFactory[int, MAX]):
    family = "max"
    category = IndicatorCategory.VOLATILITY
    default_keys = (10, 20, 50)

    @classmethod
    def parse_key(cls, raw: object) -> int:
        return require_positive_period(cls.family, raw)

    @classmethod
    def create_builder(cls, key: int) -> MAXBuilder:
        return MAXBuilder(key)


class MINsBuilderFactory(TAsBuilderFactory[int, MIN]):
    family = "min"
    category = IndicatorCategory.VOLATILITY
    default_keys = (10, 20, 50)

    @classmethod
    def parse_key(cls, raw: object) -> int:
        return require_positive_period(cls.family, raw)

    @classmethod
    def create_builder(cls, key: int) -> MINBuilder:
        return MINBuilder(key)
