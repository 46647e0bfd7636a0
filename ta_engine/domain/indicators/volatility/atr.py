"""
ATR (Average True Range) Indicator.

Measures volatility as the smoothed true range, where true range is
``max(high - low, |high - prev_close|, |low - prev_close|)`` and the
first candle's true range is ``high - low``.

Smoothing:
- Fewer than ``period`` true ranges: simple mean of those seen so far
- Afterwards: Wilder's smoothing seeded with the mean of the first ``period``
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...candle import Candle
from ..base import (
    IndicatorBuilder,
    IndicatorCategory,
    TAsBuilderFactory,
    WilderSmoother,
    finite_or,
    require_positive_period,
)


@dataclass(frozen=True)
class ATR:
    """ATR value for one period."""

    period: int
    value: float

    def get(self) -> float:
        return self.value

    def __str__(self) -> str:
        return f"ATR({self.period}: {self.value:.2f})"


def atr_value(atr: ATR) -> float:
    return atr.value


def true_range(candle: Candle, prev_close: Optional[float]) -> float:
    if prev_close is None:
        return candle.high - candle.low
    return max(
        candle.high - candle.low,
        abs(candle.high - prev_close),
        abs(candle.low - prev_close),
    )


class ATRBuilder(IndicatorBuilder[ATR]):
    """Incremental ATR."""

    name = "atr"

    def __init__(self, period: int = 14):
        self.period = require_positive_period(self.name, period)
        self._smoother = WilderSmoother(period)
        self._prev_close: Optional[float] = None

    def reset(self) -> None:
        self._smoother.reset()
        self._prev_close = None

    def _empty_snapshot(self) -> ATR:
        return ATR(self.period, 0.0)

    def next(self, candle: Candle) -> ATR:
        tr = true_range(candle, self._prev_close)
        self._prev_close = candle.close
        value = self._smoother.update(tr)
        if value is None:
            value = self._smoother.partial_mean
        return ATR(self.period, finite_or(value, 0.0))


class ATRsBuilderFactory(TAsBuilderFactory[int, ATR]):
    family = "atr"
    category = IndicatorCategory.VOLATILITY
    default_keys = (14,)
    common_keys = (7, 14, 21)

    @classmethod
    def parse_key(cls, raw: object) -> int:
        return require_positive_period(cls.family, raw)

    @classmethod
    def create_builder(cls, key: int) -> ATRBuilder:
        return ATRBuilder(key)
