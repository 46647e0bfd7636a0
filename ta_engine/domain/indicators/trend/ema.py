"""
Exponential Moving Average.

Seeded with the SMA of the first ``period`` closes, then updated with
``ema = alpha * close + (1 - alpha) * ema`` where ``alpha = 2 / (period + 1)``.
"""

from __future__ import annotations

from typing import Optional

from ...candle import Candle
from ..base import IndicatorBuilder, require_positive_period
from .ma import MAType, MovingAverage, MovingAverageFactory


class ExponentialSmoother:
    """
    O(1) EMA recurrence over a stream of floats.

    ``value`` stays None until ``period`` samples have been seen; the
    first value is their simple mean.
    """

    def __init__(self, period: int):
        self.period = period
        self.alpha = 2.0 / (period + 1)
        self.reset()

    def reset(self) -> None:
        self.value: Optional[float] = None
        self._seed_sum = 0.0
        self._count = 0

    @property
    def ready(self) -> bool:
        return self.value is not None

    def update(self, x: float) -> Optional[float]:
        if self.value is None:
            self._seed_sum += x
            self._count += 1
            if self._count == self.period:
                self.value = self._seed_sum / self.period
            return self.value
        self.value = self.alpha * x + (1.0 - self.alpha) * self.value
        return self.value


class EMABuilder(IndicatorBuilder[MovingAverage]):
    """Incremental EMA."""

    name = "ema"

    def __init__(self, period: int):
        self.period = require_positive_period(self.name, period)
        self._smoother = ExponentialSmoother(period)

    def reset(self) -> None:
        self._smoother.reset()

    def _empty_snapshot(self) -> MovingAverage:
        return MovingAverage(MAType.EMA, self.period, 0.0)

    def next(self, candle: Candle) -> MovingAverage:
        value = self._smoother.update(candle.close)
        return MovingAverage(
            MAType.EMA, self.period, candle.close if value is None else value
        )


class EMAsBuilderFactory(MovingAverageFactory):
    family = "ema"
    ma_type = MAType.EMA

    @classmethod
    def create_builder(cls, key: int) -> EMABuilder:
        return EMABuilder(key)
