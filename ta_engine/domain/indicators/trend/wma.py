"""
Weighted Moving Average.

Linear weights 1..period from the oldest to the newest close in the
window, normalised by ``period * (period + 1) / 2``.
"""

from __future__ import annotations

from collections import deque
from typing import Deque

import numpy as np

from ...candle import Candle
from ..base import IndicatorBuilder, finite_or, require_positive_period
from .ma import MAType, MovingAverage, MovingAverageFactory


class WMABuilder(IndicatorBuilder[MovingAverage]):
    """Incremental WMA."""

    name = "wma"

    def __init__(self, period: int):
        self.period = require_positive_period(self.name, period)
        self._weights = np.arange(1, period + 1, dtype=np.float64)
        self._denominator = period * (period + 1) / 2.0
        self._window: Deque[float] = deque(maxlen=period)

    def reset(self) -> None:
        self._window.clear()

    def _empty_snapshot(self) -> MovingAverage:
        return MovingAverage(MAType.WMA, self.period, 0.0)

    def next(self, candle: Candle) -> MovingAverage:
        self._window.append(candle.close)
        if len(self._window) < self.period:
            return MovingAverage(MAType.WMA, self.period, candle.close)

        value = float(np.dot(np.fromiter(self._window, dtype=np.float64), self._weights))
        return MovingAverage(
            MAType.WMA, self.period, finite_or(value / self._denominator, candle.close)
        )


class WMAsBuilderFactory(MovingAverageFactory):
    family = "wma"
    ma_type = MAType.WMA

    @classmethod
    def create_builder(cls, key: int) -> WMABuilder:
        return WMABuilder(key)
