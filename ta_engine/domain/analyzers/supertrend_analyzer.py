"""
SuperTrend analyzer over one or more (period, multiplier) settings.

Predicates come in three shapes:
- point checks on the latest item (is_price_above_supertrend, ...)
- ``*_continuous`` / is_uptrend: all of items[p:p+n]
- ``*_signal``: breakthrough, true for items[p:p+n] and false for the
  m items before
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.base import TAs
from ..indicators.trend.supertrend import SuperTrend, SuperTrendsBuilderFactory
from .base import Analyzer, AnalyzerData

SuperTrendKey = Tuple[int, float]


@dataclass(frozen=True)
class SuperTrendAnalyzerData(AnalyzerData):
    supertrends: TAs[SuperTrendKey, SuperTrend]

    def get_supertrend(self, period: int, multiplier: float) -> SuperTrend:
        return self.supertrends.get((period, float(multiplier)))

    def is_uptrend(self, period: int, multiplier: float) -> bool:
        return self.get_supertrend(period, multiplier).is_uptrend()

    def is_downtrend(self, period: int, multiplier: float) -> bool:
        return self.get_supertrend(period, multiplier).is_downtrend()

    def is_price_above(self, period: int, multiplier: float) -> bool:
        return self.candle.close > self.get_supertrend(period, multiplier).value

    def is_price_below(self, period: int, multiplier: float) -> bool:
        return self.candle.close < self.get_supertrend(period, multiplier).value

    def is_all_uptrend(self) -> bool:
        return self.supertrends.is_all(lambda st: st.is_uptrend())

    def is_all_downtrend(self) -> bool:
        return self.supertrends.is_all(lambda st: st.is_downtrend())


class SuperTrendAnalyzer(Analyzer[SuperTrendAnalyzerData]):
    """
    Args:
        settings: (period, multiplier) pairs.
        storage: Candles to replay on construction.
        max_history: Optional history cap.
    """

    def __init__(
        self,
        settings: Sequence[Any],
        storage: CandleStore,
        max_history: Optional[int] = None,
    ):
        super().__init__(max_history)
        self.supertrends_builder = SuperTrendsBuilderFactory.build(settings)
        self.settings = self.supertrends_builder.keys
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> SuperTrendAnalyzerData:
        return SuperTrendAnalyzerData(candle, self.supertrends_builder.next(candle))

    def __repr__(self) -> str:
        settings = ", ".join(f"({p}:{m})" for p, m in self.settings)
        return f"SuperTrendAnalyzer(settings=[{settings}], items={len(self)})"

    # -------------------------------------------------------------------------
    # Latest item
    # -------------------------------------------------------------------------

    def is_all_uptrend(self) -> bool:
        latest = self.get(0)
        return latest is not None and latest.is_all_uptrend()

    def is_all_downtrend(self) -> bool:
        latest = self.get(0)
        return latest is not None and latest.is_all_downtrend()

    def is_trend_changed(self, period: int, multiplier: float, n: int) -> bool:
        """Direction differs between items[0] and items[n], neither neutral."""
        return self._trend_changed_at(0, period, multiplier, n)

    def _trend_changed_at(self, index: int, period: int, multiplier: float, n: int) -> bool:
        if len(self) <= index + n:
            return False
        current = self.items[index].get_supertrend(period, multiplier).direction
        previous = self.items[index + n].get_supertrend(period, multiplier).direction
        return current != previous and current != 0 and previous != 0

    def is_price_above_supertrend(self, period: int, multiplier: float) -> bool:
        latest = self.get(0)
        return latest is not None and latest.is_price_above(period, multiplier)

    def is_price_below_supertrend(self, period: int, multiplier: float) -> bool:
        latest = self.get(0)
        return latest is not None and latest.is_price_below(period, multiplier)

    def _crossed_above_at(self, index: int, period: int, multiplier: float) -> bool:
        if len(self) < index + 2:
            return False
        current, previous = self.items[index], self.items[index + 1]
        return previous.is_price_below(period, multiplier) and current.is_price_above(period, multiplier)

    def _crossed_below_at(self, index: int, period: int, multiplier: float) -> bool:
        if len(self) < index + 2:
            return False
        current, previous = self.items[index], self.items[index + 1]
        return previous.is_price_above(period, multiplier) and current.is_price_below(period, multiplier)

    def is_price_crossing_above_supertrend(self, period: int, multiplier: float) -> bool:
        """Close moved from below to above the line on the latest candle."""
        return self._crossed_above_at(0, period, multiplier)

    def is_price_crossing_below_supertrend(self, period: int, multiplier: float) -> bool:
        """Close moved from above to below the line on the latest candle."""
        return self._crossed_below_at(0, period, multiplier)

    # -------------------------------------------------------------------------
    # Windows
    # -------------------------------------------------------------------------

    def is_uptrend(self, n: int, period: int, multiplier: float, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_uptrend(period, multiplier), n, p)

    def is_downtrend(self, n: int, period: int, multiplier: float, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_downtrend(period, multiplier), n, p)

    def is_price_above_supertrend_continuous(
        self, n: int, period: int, multiplier: float, p: int = 0
    ) -> bool:
        return self.is_all(lambda d: d.is_price_above(period, multiplier), n, p)

    def is_price_below_supertrend_continuous(
        self, n: int, period: int, multiplier: float, p: int = 0
    ) -> bool:
        return self.is_all(lambda d: d.is_price_below(period, multiplier), n, p)

    def is_price_above_supertrend_signal(
        self, n: int, m: int, period: int, multiplier: float, p: int = 0
    ) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_price_above(period, multiplier), n, m, p)

    def is_price_below_supertrend_signal(
        self, n: int, m: int, period: int, multiplier: float, p: int = 0
    ) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_price_below(period, multiplier), n, m, p)

    def is_uptrend_signal(self, n: int, m: int, period: int, multiplier: float, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_uptrend(period, multiplier), n, m, p)

    def is_downtrend_signal(self, n: int, m: int, period: int, multiplier: float, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_downtrend(period, multiplier), n, m, p)

    def is_all_uptrend_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_all_uptrend(), n, m, p)

    def is_all_downtrend_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_all_downtrend(), n, m, p)

    def is_price_crossing_above_supertrend_signal(
        self, n: int, m: int, period: int, multiplier: float, p: int = 0
    ) -> bool:
        return self.is_break_through_by_index(
            lambda i: self._crossed_above_at(i, period, multiplier), n, m, p
        )

    def is_price_crossing_below_supertrend_signal(
        self, n: int, m: int, period: int, multiplier: float, p: int = 0
    ) -> bool:
        return self.is_break_through_by_index(
            lambda i: self._crossed_below_at(i, period, multiplier), n, m, p
        )

    def is_trend_changed_signal(
        self, n: int, m: int, period: int, multiplier: float, trend_period: int, p: int = 0
    ) -> bool:
        return self.is_break_through_by_index(
            lambda i: self._trend_changed_at(i, period, multiplier, trend_period), n, m, p
        )
