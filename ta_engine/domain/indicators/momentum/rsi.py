"""
RSI (Relative Strength Index) Indicator.

Momentum oscillator measuring speed and magnitude of price changes,
computed with Wilder's smoothing of average gain and average loss.

Signals:
- RSI > 70: Overbought
- RSI < 30: Oversold
- 50 during warm-up (fewer than ``period`` price changes)
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

NEUTRAL_RSI = 50.0

# avg_loss below this is treated as zero
ZERO_LOSS_EPSILON = 1e-6


@dataclass(frozen=True)
class RSI:
    """RSI value for one period."""

    period: int
    value: float

    def get(self) -> float:
        return self.value

    def is_overbought(self, threshold: float = 70.0) -> bool:
        return self.value >= threshold

    def is_oversold(self, threshold: float = 30.0) -> bool:
        return self.value <= threshold

    def is_within_range(self, lower: float, upper: float) -> bool:
        return lower <= self.value <= upper

    def __str__(self) -> str:
        return f"RSI({self.period}: {self.value:.2f})"


def rsi_value(rsi: RSI) -> float:
    return rsi.value


class RSIBuilder(IndicatorBuilder[RSI]):
    """
    Incremental RSI with Wilder's smoothing.

    The first average gain/loss is the simple mean of the first ``period``
    changes; afterwards ``avg = (prev_avg * (period - 1) + current) / period``.
    """

    name = "rsi"

    def __init__(self, period: int):
        self.period = require_positive_period(self.name, period)
        self._avg_gain = WilderSmoother(period)
        self._avg_loss = WilderSmoother(period)
        self._prev_close: Optional[float] = None

    def reset(self) -> None:
        self._avg_gain.reset()
        self._avg_loss.reset()
        self._prev_close = None

    def _empty_snapshot(self) -> RSI:
        return RSI(self.period, NEUTRAL_RSI)

    def next(self, candle: Candle) -> RSI:
        close = candle.close
        prev = self._prev_close
        self._prev_close = close
        if prev is None:
            return RSI(self.period, NEUTRAL_RSI)

        change = close - prev
        avg_gain = self._avg_gain.update(max(change, 0.0))
        avg_loss = self._avg_loss.update(max(-change, 0.0))
        if avg_gain is None or avg_loss is None:
            return RSI(self.period, NEUTRAL_RSI)

        return RSI(self.period, compute_rsi(avg_gain, avg_loss))


def compute_rsi(avg_gain: float, avg_loss: float) -> float:
    """RSI from smoothed averages, guarded against zero loss and NaN."""
    if avg_loss < ZERO_LOSS_EPSILON:
        return 100.0
    rs = avg_gain / avg_loss
    value = finite_or(100.0 - 100.0 / (1.0 + rs), NEUTRAL_RSI)
    return min(max(value, 0.0), 100.0)


class RSIsBuilderFactory(TAsBuilderFactory[int, RSI]):
    family = "rsi"
    category = IndicatorCategory.MOMENTUM
    default_keys = (14,)
    common_keys = (9, 14, 25)

    @classmethod
    def parse_key(cls, raw: object) -> int:
        return require_positive_period(cls.family, raw)

    @classmethod
    def create_builder(cls, key: int) -> RSIBuilder:
        return RSIBuilder(key)
