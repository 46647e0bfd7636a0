"""
Simple Moving Average.

Rolling arithmetic mean of the last ``period`` closes, maintained with a
running sum. During warm-up the current close is returned.
"""

from __future__ import annotations

from collections import deque
from typing import Deque

from ...candle import Candle
from ..base import IndicatorBuilder, require_positive_period
from .ma import MAType, MovingAverage, MovingAverageFactory


class SMABuilder(IndicatorBuilder[MovingAverage]):
    """Incremental SMA."""

    name = "sma"

    def __init__(self, period: int):
        self.period = require_positive_period(self.name, period)
        self._window: Deque[float] = deque(maxlen=period)
        self._sum = 0.0

    def reset(self) -> None:
        self._window.clear()
        self._sum = 0.0

    def _empty_snapshot(self) -> MovingAverage:
        return MovingAverage(MAType.SMA, self.period, 0.0)

    def next(self, candle: Candle) -> MovingAverage:
        close = candle.close
        if len(self._window) == self.period:
            self._sum -= self._window[0]
        self._window.append(close)
        self._sum += close

        if len(self._window) < self.period:
            return MovingAverage(MAType.SMA, self.period, close)
        return MovingAverage(MAType.SMA, self.period, self._sum / self.period)


class SMAsBuilderFactory(MovingAverageFactory):
    family = "sma"
    ma_type = MAType.SMA

    @classmethod
    def create_builder(cls, key: int) -> SMABuilder:
        return SMABuilder(key)
