"""
ATR analyzer: volatility level and direction.

Expanding/contracting compare the latest ATR against the mean of the
``n`` items before it. Increasing/decreasing require the ATR to move
strictly in one direction across the last ``n`` items.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.base import TAs
from ..indicators.volatility.atr import ATR, ATRsBuilderFactory
from .base import Analyzer, AnalyzerData


@dataclass(frozen=True)
class ATRAnalyzerData(AnalyzerData):
    atrs: TAs[int, ATR]

    def get_atr(self, period: int) -> float:
        return self.atrs.get(period).value


class ATRAnalyzer(Analyzer[ATRAnalyzerData]):
    def __init__(
        self,
        periods: Sequence[int],
        storage: CandleStore,
        max_history: Optional[int] = None,
    ):
        super().__init__(max_history)
        self.atrs_builder = ATRsBuilderFactory.build(periods)
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> ATRAnalyzerData:
        return ATRAnalyzerData(candle, self.atrs_builder.next(candle))

    def _latest_atr(self, period: int) -> float:
        latest = self.get(0)
        return latest.get_atr(period) if latest is not None else 0.0

    # -------------------------------------------------------------------------
    # Bands
    # -------------------------------------------------------------------------

    def calculate_upper_band(self, candle: Candle, period: int, multiplier: float) -> float:
        """(high + low) / 2 + latest ATR * multiplier."""
        return (candle.high + candle.low) / 2.0 + self._latest_atr(period) * multiplier

    def calculate_lower_band(self, candle: Candle, period: int, multiplier: float) -> float:
        """(high + low) / 2 - latest ATR * multiplier."""
        return (candle.high + candle.low) / 2.0 - self._latest_atr(period) * multiplier

    def is_above_threshold(self, period: int, threshold: float) -> bool:
        latest = self.get(0)
        return latest is not None and latest.get_atr(period) > threshold

    # -------------------------------------------------------------------------
    # Level
    # -------------------------------------------------------------------------

    def _previous_mean(self, period: int, n: int) -> Optional[float]:
        if n <= 0 or len(self) <= n:
            return None
        return sum(self.items[i].get_atr(period) for i in range(1, n + 1)) / n

    def is_volatility_expanding(self, period: int, n: int) -> bool:
        mean = self._previous_mean(period, n)
        return mean is not None and self._latest_atr(period) > mean

    def is_volatility_contracting(self, period: int, n: int) -> bool:
        mean = self._previous_mean(period, n)
        return mean is not None and self._latest_atr(period) < mean

    def is_high_volatility(self, n: int, period: int, threshold: float, p: int = 0) -> bool:
        return self.is_all(lambda d: d.get_atr(period) > threshold, n, p)

    def is_low_volatility(self, n: int, period: int, threshold: float, p: int = 0) -> bool:
        return self.is_all(lambda d: d.get_atr(period) < threshold, n, p)

    def is_atr_above_threshold_signal(
        self, n: int, m: int, period: int, threshold: float, p: int = 0
    ) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.get_atr(period) > threshold, n, m, p)

    def is_atr_below_threshold_signal(
        self, n: int, m: int, period: int, threshold: float, p: int = 0
    ) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.get_atr(period) < threshold, n, m, p)

    is_high_volatility_signal = is_atr_above_threshold_signal
    is_low_volatility_signal = is_atr_below_threshold_signal

    # -------------------------------------------------------------------------
    # Direction
    # -------------------------------------------------------------------------

    def _atr_series(self, period: int, start: int, count: int) -> list:
        end = min(start + count, len(self))
        return [self.items[i].get_atr(period) for i in range(start, end)]

    def _is_moving(self, period: int, n: int, p: int, rising: bool) -> bool:
        if n < 2 or n + p > len(self):
            return False
        values = self._atr_series(period, p, n)
        if rising:
            return all(cur > older for cur, older in zip(values, values[1:]))
        return all(cur < older for cur, older in zip(values, values[1:]))

    def is_volatility_increasing(self, n: int, period: int) -> bool:
        """ATR strictly rising over the last n items (n >= 2)."""
        return self._is_moving(period, n, 0, rising=True)

    def is_volatility_decreasing(self, n: int, period: int) -> bool:
        """ATR strictly falling over the last n items (n >= 2)."""
        return self._is_moving(period, n, 0, rising=False)

    def is_volatility_increasing_signal(self, n: int, m: int, period: int, p: int = 0) -> bool:
        """
        ATR rising over the last n items after a non-rising stretch.

        The m items before the window must not show a step where the ATR
        rose.
        """
        if len(self) < n + m + p + 1:
            return False
        if not self._is_moving(period, n, p, rising=True):
            return False
        previous = self._atr_series(period, p + n, m)
        return all(cur <= older for cur, older in zip(previous, previous[1:]))

    def is_volatility_decreasing_signal(self, n: int, m: int, period: int, p: int = 0) -> bool:
        """ATR falling over the last n items after a non-falling stretch."""
        if len(self) < n + m + p + 1:
            return False
        if not self._is_moving(period, n, p, rising=False):
            return False
        previous = self._atr_series(period, p + n, m)
        return all(cur >= older for cur, older in zip(previous, previous[1:]))
