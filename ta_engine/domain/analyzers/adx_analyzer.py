"""
ADX analyzer: trend strength across one or more ADX periods.

Strength bands:
- strong: ADX >= 25
- very strong: ADX >= 50
- weak: ADX < 25
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.base import TAs
from ..indicators.trend.adx import ADX, ADXsBuilderFactory
from .base import Analyzer, AnalyzerData

STRONG_TREND = 25.0
VERY_STRONG_TREND = 50.0


@dataclass(frozen=True)
class ADXAnalyzerData(AnalyzerData):
    adxs: TAs[int, ADX]

    def get_adx(self, period: int) -> float:
        return self.adxs.get(period).adx

    def is_all_adx_strong_trend(self) -> bool:
        return self.adxs.is_all(lambda a: a.adx >= STRONG_TREND)

    def is_all_adx_very_strong_trend(self) -> bool:
        return self.adxs.is_all(lambda a: a.adx >= VERY_STRONG_TREND)

    def is_all_adx_weak_trend(self) -> bool:
        return self.adxs.is_all(lambda a: a.adx < STRONG_TREND)


class ADXAnalyzer(Analyzer[ADXAnalyzerData]):
    def __init__(
        self,
        adx_periods: Sequence[int],
        storage: CandleStore,
        max_history: Optional[int] = None,
    ):
        super().__init__(max_history)
        self.adxs_builder = ADXsBuilderFactory.build(adx_periods)
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> ADXAnalyzerData:
        return ADXAnalyzerData(candle, self.adxs_builder.next(candle))

    def get_adx(self, period: int) -> float:
        """Latest ADX for ``period``; 0.0 on an empty history."""
        latest = self.get(0)
        return latest.get_adx(period) if latest is not None else 0.0

    def is_strong_trend(self, n: int) -> bool:
        return self.is_all(lambda d: d.is_all_adx_strong_trend(), n)

    def is_very_strong_trend(self, n: int) -> bool:
        return self.is_all(lambda d: d.is_all_adx_very_strong_trend(), n)

    def is_weak_trend(self, n: int) -> bool:
        return self.is_all(lambda d: d.is_all_adx_weak_trend(), n)

    def _adx_steps(self, period: int, start: int, count: int) -> list:
        """(current, previous) ADX pairs for items[start:start+count]."""
        return [
            (self.items[i].get_adx(period), self.items[i + 1].get_adx(period))
            for i in range(start, start + count)
        ]

    def is_trend_strengthening(self, period: int, n: int) -> bool:
        """ADX rose on each of the last n steps."""
        if len(self) < n + 1:
            return False
        return all(cur > prev for cur, prev in self._adx_steps(period, 0, n))

    def is_trend_weakening(self, period: int, n: int) -> bool:
        """ADX fell on each of the last n steps."""
        if len(self) < n + 1:
            return False
        return all(cur < prev for cur, prev in self._adx_steps(period, 0, n))

    def is_trend_reversal(self, period: int, n: int, m: int) -> bool:
        """ADX rose for the last n steps after falling for the m steps before."""
        if len(self) < n + m + 1:
            return False
        rising = all(cur > prev for cur, prev in self._adx_steps(period, 0, n))
        was_falling = all(cur < prev for cur, prev in self._adx_steps(period, n, m))
        return rising and was_falling
