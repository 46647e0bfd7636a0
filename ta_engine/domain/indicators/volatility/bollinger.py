"""
Bollinger Bands Indicator.

Population standard deviation bands around the SMA of the last
``period`` closes.

Signals:
- Price at upper band: Overbought
- Price at lower band: Oversold
- Narrow bandwidth: Low volatility, potential breakout
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Sequence, Tuple

import numpy as np

from ...candle import Candle
from ...exceptions import IndicatorConfigError
from ..base import (
    IndicatorBuilder,
    IndicatorCategory,
    TAsBuilderFactory,
    require_positive_multiplier,
    require_positive_period,
)

_EPSILON = 2.220446049250313e-16


@dataclass(frozen=True)
class BBand:
    """Bollinger Bands at one point in time."""

    period: int
    multiplier: float
    middle: float
    upper: float
    lower: float

    @property
    def average(self) -> float:
        return self.middle

    def bandwidth(self) -> float:
        """(upper - lower) / middle, 0 when the middle band is ~0."""
        if abs(self.middle) < _EPSILON:
            return 0.0
        return (self.upper - self.lower) / self.middle

    def percent_b(self, price: float) -> float:
        """Position of ``price`` inside the band, 0.5 when the band has no width."""
        band_range = self.upper - self.lower
        if abs(band_range) < _EPSILON:
            return 0.5
        return (price - self.lower) / band_range

    def __str__(self) -> str:
        return (
            f"BB({self.period},{self.multiplier}: "
            f"{self.middle:.2f}, {self.upper:.2f}, {self.lower:.2f})"
        )


class BBandBuilder(IndicatorBuilder[BBand]):
    """Incremental Bollinger Bands over a fixed-size close window."""

    name = "bband"

    def __init__(self, period: int = 20, multiplier: float = 2.0):
        self.period = require_positive_period(self.name, period)
        self.multiplier = require_positive_multiplier(self.name, multiplier)
        self._window: Deque[float] = deque(maxlen=period)

    def reset(self) -> None:
        self._window.clear()

    def _band(self, middle: float, upper: float, lower: float) -> BBand:
        return BBand(self.period, self.multiplier, middle, upper, lower)

    def _empty_snapshot(self) -> BBand:
        return self._band(0.0, 0.0, 0.0)

    def next(self, candle: Candle) -> BBand:
        price = candle.close
        self._window.append(price)
        if len(self._window) < self.period:
            return self._band(price, price, price)

        values = np.fromiter(self._window, dtype=np.float64, count=self.period)
        mean = float(values.mean())
        std = float(values.std())  # ddof=0: population
        if not (math.isfinite(mean) and math.isfinite(std)):
            return self._band(price, price, price)

        return self._band(mean, mean + std * self.multiplier, mean - std * self.multiplier)


class BBandsBuilderFactory(TAsBuilderFactory[Tuple[int, float], BBand]):
    """Keys are (period, multiplier) pairs; a bare int uses multiplier 2.0."""

    family = "bband"
    category = IndicatorCategory.VOLATILITY
    default_keys = ((20, 2.0),)

    @classmethod
    def parse_key(cls, raw: Any) -> Tuple[int, float]:
        if isinstance(raw, int):
            raw = (raw, 2.0)
        elif isinstance(raw, dict):
            raw = (raw.get("period", 20), raw.get("multiplier", 2.0))
        if not isinstance(raw, Sequence) or len(raw) != 2:
            raise IndicatorConfigError(cls.family, "key must be (period, multiplier)", key=raw)
        period = require_positive_period(cls.family, raw[0])
        return period, require_positive_multiplier(cls.family, raw[1])

    @classmethod
    def create_builder(cls, key: Tuple[int, float]) -> BBandBuilder:
        return BBandBuilder(*key)
