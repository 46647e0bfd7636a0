"""
MACD (Moving Average Convergence Divergence) Indicator.

Trend-following momentum indicator built from the difference between a
fast and a slow EMA, with a signal line (EMA of the MACD line).

Warm-up:
- All components are 0 until the slow EMA has ``slow_period`` closes.
- The signal line is 0 until ``signal_period`` MACD values exist, so the
  histogram equals the MACD line during that span.

Signals:
- MACD crosses above signal: Bullish
- MACD crosses below signal: Bearish
- Histogram sign: momentum direction
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from ...candle import Candle
from ...exceptions import IndicatorConfigError
from ..base import (
    IndicatorBuilder,
    IndicatorCategory,
    TAsBuilderFactory,
    require_positive_period,
)
from ..trend.ema import ExponentialSmoother


@dataclass(frozen=True)
class MACDParams:
    """Hashable MACD key (fast, slow, signal)."""

    fast_period: int = 12
    slow_period: int = 26
    signal_period: int = 9

    def __post_init__(self) -> None:
        validate_macd_params(self.fast_period, self.slow_period, self.signal_period)

    def __str__(self) -> str:
        return f"({self.fast_period},{self.slow_period},{self.signal_period})"


def validate_macd_params(fast: int, slow: int, signal: int) -> None:
    require_positive_period("macd", fast, "fast_period")
    require_positive_period("macd", slow, "slow_period")
    require_positive_period("macd", signal, "signal_period")
    if fast >= slow:
        raise IndicatorConfigError(
            "macd", "fast_period must be less than slow_period",
            fast_period=fast, slow_period=slow,
        )


@dataclass(frozen=True)
class MACD:
    """MACD line, signal line and histogram at one point in time."""

    fast_period: int
    slow_period: int
    signal_period: int
    macd_line: float
    signal_line: float
    histogram: float

    @property
    def params(self) -> MACDParams:
        return MACDParams(self.fast_period, self.slow_period, self.signal_period)

    def is_bullish(self) -> bool:
        return self.macd_line > self.signal_line

    def is_bearish(self) -> bool:
        return self.macd_line < self.signal_line

    def __str__(self) -> str:
        return (
            f"MACD({self.fast_period},{self.slow_period},{self.signal_period}: "
            f"{self.macd_line:.2f}, {self.signal_line:.2f}, {self.histogram:.2f})"
        )


class MACDBuilder(IndicatorBuilder[MACD]):
    """Incremental MACD using O(1) EMA recurrences seeded by SMAs."""

    name = "macd"

    def __init__(self, fast_period: int = 12, slow_period: int = 26, signal_period: int = 9):
        validate_macd_params(fast_period, slow_period, signal_period)
        self.fast_period = fast_period
        self.slow_period = slow_period
        self.signal_period = signal_period
        self._fast = ExponentialSmoother(fast_period)
        self._slow = ExponentialSmoother(slow_period)
        self._signal = ExponentialSmoother(signal_period)

    @classmethod
    def from_params(cls, params: MACDParams) -> "MACDBuilder":
        return cls(params.fast_period, params.slow_period, params.signal_period)

    def reset(self) -> None:
        self._fast.reset()
        self._slow.reset()
        self._signal.reset()

    def _snapshot(self, macd: float, signal: float) -> MACD:
        return MACD(
            self.fast_period, self.slow_period, self.signal_period,
            macd, signal, macd - signal,
        )

    def _empty_snapshot(self) -> MACD:
        return self._snapshot(0.0, 0.0)

    def next(self, candle: Candle) -> MACD:
        fast = self._fast.update(candle.close)
        slow = self._slow.update(candle.close)
        if fast is None or slow is None:
            return self._empty_snapshot()

        macd = fast - slow
        signal = self._signal.update(macd)
        return self._snapshot(macd, 0.0 if signal is None else signal)


class MACDsBuilderFactory(TAsBuilderFactory[MACDParams, MACD]):
    family = "macd"
    category = IndicatorCategory.MOMENTUM
    default_keys = (MACDParams(12, 26, 9),)

    @classmethod
    def parse_key(cls, raw: Any) -> MACDParams:
        """Accept MACDParams, a (fast, slow, signal) sequence or a mapping."""
        if isinstance(raw, MACDParams):
            return raw
        if isinstance(raw, dict):
            return MACDParams(
                raw.get("fast_period", raw.get("fast", 12)),
                raw.get("slow_period", raw.get("slow", 26)),
                raw.get("signal_period", raw.get("signal", 9)),
            )
        if isinstance(raw, Sequence) and len(raw) == 3:
            return MACDParams(*raw)
        raise IndicatorConfigError(cls.family, "key must be (fast, slow, signal)", key=raw)

    @classmethod
    def create_builder(cls, key: MACDParams) -> MACDBuilder:
        return MACDBuilder.from_params(key)
