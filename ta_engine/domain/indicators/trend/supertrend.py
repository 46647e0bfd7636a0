"""
SuperTrend Indicator.

ATR-based trend follower with ratcheting bands:

- basic bands: (high + low) / 2 +/- multiplier * ATR
- the final upper band only moves down (and the lower band only up)
  unless the previous close broke through it
- direction flips when the close crosses the active band; the
  SuperTrend value is the lower band in an uptrend and the upper band
  in a downtrend

The snapshot stays neutral (direction 0) until ``period`` candles have
been seen or while ATR is not positive.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from ...candle import Candle
from ...exceptions import IndicatorConfigError
from ..base import (
    IndicatorBuilder,
    IndicatorCategory,
    TAsBuilderFactory,
    require_positive_multiplier,
    require_positive_period,
)
from ..volatility.atr import ATRBuilder


@dataclass(frozen=True)
class SuperTrend:
    """SuperTrend value, direction (+1 up, -1 down, 0 neutral) and final bands."""

    value: float = 0.0
    direction: int = 0
    upper_band: float = 0.0
    lower_band: float = 0.0

    def is_uptrend(self) -> bool:
        return self.direction > 0

    def is_downtrend(self) -> bool:
        return self.direction < 0

    def __str__(self) -> str:
        trend = "UP" if self.is_uptrend() else "DOWN" if self.is_downtrend() else "NEUTRAL"
        return (
            f"SuperTrend({trend}: {self.value:.2f}, "
            f"{self.upper_band:.2f}, {self.lower_band:.2f})"
        )


class SuperTrendBuilder(IndicatorBuilder[SuperTrend]):
    """Incremental SuperTrend keeping only the previous bands, direction and close."""

    name = "supertrend"

    def __init__(self, period: int = 10, multiplier: float = 3.0):
        self.period = require_positive_period(self.name, period)
        self.multiplier = require_positive_multiplier(self.name, multiplier)
        self._atr = ATRBuilder(period)
        self.reset()

    def reset(self) -> None:
        self._atr.reset()
        self._count = 0
        self._previous: Optional[SuperTrend] = None
        self._previous_close: Optional[float] = None

    def _empty_snapshot(self) -> SuperTrend:
        return SuperTrend()

    def next(self, candle: Candle) -> SuperTrend:
        atr = self._atr.next(candle).value
        self._count += 1
        if self._count < self.period or not math.isfinite(atr) or atr <= 0.0:
            return SuperTrend()

        mid = (candle.high + candle.low) / 2.0
        basic_upper = mid + self.multiplier * atr
        basic_lower = mid - self.multiplier * atr
        close = candle.close
        prev = self._previous

        if prev is None:
            direction = 1 if close > basic_upper else -1
            upper, lower = basic_upper, basic_lower
        else:
            prev_close = self._previous_close if self._previous_close is not None else close
            upper = (
                basic_upper
                if basic_upper < prev.upper_band or prev_close > prev.upper_band
                else prev.upper_band
            )
            lower = (
                basic_lower
                if basic_lower > prev.lower_band or prev_close < prev.lower_band
                else prev.lower_band
            )
            if prev.is_downtrend():
                direction = -1 if close <= upper else 1
            else:
                direction = 1 if close >= lower else -1

        result = SuperTrend(
            value=lower if direction > 0 else upper,
            direction=direction,
            upper_band=upper,
            lower_band=lower,
        )
        self._previous = result
        self._previous_close = close
        return result


class SuperTrendsBuilderFactory(TAsBuilderFactory[Tuple[int, float], SuperTrend]):
    """Keys are (period, multiplier) pairs."""

    family = "supertrend"
    category = IndicatorCategory.TREND
    default_keys = ((10, 3.0),)

    @classmethod
    def parse_key(cls, raw: Any) -> Tuple[int, float]:
        if isinstance(raw, dict):
            raw = (raw.get("period", 10), raw.get("multiplier", 3.0))
        if not isinstance(raw, Sequence) or len(raw) != 2:
            raise IndicatorConfigError(cls.family, "key must be (period, multiplier)", key=raw)
        period = require_positive_period(cls.family, raw[0])
        return period, require_positive_multiplier(cls.family, raw[1])

    @classmethod
    def create_builder(cls, key: Tuple[int, float]) -> SuperTrendBuilder:
        return SuperTrendBuilder(*key)
