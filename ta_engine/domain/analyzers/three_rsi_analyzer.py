"""
Three-RSI analyzer.

Tracks several RSI periods at once together with a single moving average
and an ADX filter. The RSI set is ordered by period, so arrangement
checks compare short against long RSIs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.base import TAs
from ..indicators.momentum.rsi import RSI, RSIsBuilderFactory, rsi_value
from ..indicators.trend.adx import ADX, ADXBuilder
from ..indicators.trend.ma import MAType, MovingAverage
from ..indicators.trend.moving_averages import MAsBuilderFactory
from .base import Analyzer, AnalyzerData

ADX_TREND_THRESHOLD = 20.0
RSI_MIDLINE = 50.0


@dataclass(frozen=True)
class ThreeRSIAnalyzerData(AnalyzerData):
    rsis: TAs[int, RSI]
    ma: MovingAverage
    adx: ADX

    def is_candle_greater_than_ma(self, candle_fn: Callable[[Candle], float]) -> bool:
        return self.is_candle_greater_than(candle_fn, lambda d: d.ma.value)

    def is_candle_less_than_ma(self, candle_fn: Callable[[Candle], float]) -> bool:
        return self.is_candle_less_than(candle_fn, lambda d: d.ma.value)

    def __str__(self) -> str:
        return f"candle={self.candle}, rsis={self.rsis}, ma={self.ma}, adx={self.adx}"


class ThreeRSIAnalyzer(Analyzer[ThreeRSIAnalyzerData]):
    """
    Multi-period RSI with MA and ADX context.

    Args:
        rsi_periods: RSI periods, shortest first.
        ma_type: Kind of the single moving average.
        ma_period: Moving average period.
        adx_period: ADX period.
        storage: Candles to replay on construction.
        max_history: Optional history cap.
    """

    def __init__(
        self,
        rsi_periods: Sequence[int],
        ma_type: "MAType | str",
        ma_period: int,
        adx_period: int,
        storage: CandleStore,
        max_history: Optional[int] = None,
    ):
        super().__init__(max_history)
        self.rsis_builder = RSIsBuilderFactory.build(rsi_periods)
        self.ma_builder = MAsBuilderFactory.create_builder(ma_type, ma_period)
        self.adx_builder = ADXBuilder(adx_period)
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> ThreeRSIAnalyzerData:
        return ThreeRSIAnalyzerData(
            candle,
            rsis=self.rsis_builder.next(candle),
            ma=self.ma_builder.next(candle),
            adx=self.adx_builder.next(candle),
        )

    def is_rsi_all_less_than_50(self, n: int) -> bool:
        return self.is_all(lambda d: d.rsis.is_all(lambda r: r.value < RSI_MIDLINE), n)

    def is_rsi_all_greater_than_50(self, n: int) -> bool:
        return self.is_all(lambda d: d.rsis.is_all(lambda r: r.value > RSI_MIDLINE), n)

    def is_rsi_reverse_arrangement(self, n: int) -> bool:
        """Short RSIs below long RSIs for n items."""
        return self.is_reverse_arrangement(lambda d: d.rsis, rsi_value, n)

    def is_rsi_regular_arrangement(self, n: int) -> bool:
        """Short RSIs above long RSIs for n items."""
        return self.is_regular_arrangement(lambda d: d.rsis, rsi_value, n)

    def is_candle_low_below_ma(self, n: int) -> bool:
        return self.is_all(lambda d: d.is_candle_less_than_ma(lambda c: c.low), n)

    def is_candle_high_above_ma(self, n: int) -> bool:
        return self.is_all(lambda d: d.is_candle_greater_than_ma(lambda c: c.high), n)

    def is_adx_greater_than_20(self, n: int) -> bool:
        return self.is_all(lambda d: d.adx.adx > ADX_TREND_THRESHOLD, n)
