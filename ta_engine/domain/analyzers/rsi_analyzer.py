"""RSI analyzer with a moving-average stack for trend context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.base import TAs
from ..indicators.momentum.rsi import RSI, RSIBuilder
from ..indicators.trend.ma import MAType, MovingAverage
from ..indicators.trend.moving_averages import MAsBuilderFactory
from .base import Analyzer, AnalyzerData, MovingAverageMixin


@dataclass(frozen=True)
class RSIAnalyzerData(AnalyzerData):
    mas: TAs[int, MovingAverage]
    rsi: RSI

    def __str__(self) -> str:
        return f"candle={self.candle}, rsi={self.rsi}, mas={self.mas}"


class RSIAnalyzer(MovingAverageMixin, Analyzer[RSIAnalyzerData]):
    """
    Single-period RSI plus an MA stack.

    Args:
        rsi_period: RSI period.
        ma_type: Moving average kind for the stack.
        ma_periods: Strictly ascending MA periods.
        storage: Candles to replay on construction.
    """

    def __init__(
        self,
        rsi_period: int,
        ma_type: "MAType | str",
        ma_periods: Sequence[int],
        storage: CandleStore,
        max_history: Optional[int] = None,
    ):
        super().__init__(max_history)
        self.rsi_builder = RSIBuilder(rsi_period)
        self.mas_builder = MAsBuilderFactory.build(ma_type, ma_periods)
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> RSIAnalyzerData:
        return RSIAnalyzerData(
            candle,
            mas=self.mas_builder.next(candle),
            rsi=self.rsi_builder.next(candle),
        )

    def get_rsi(self) -> float:
        return self.get_value(0, lambda d: d.rsi.value)

    def is_rsi_less_than(self, value: float, n: int) -> bool:
        return self.is_all(lambda d: d.rsi.value < value, n)

    def is_rsi_greater_than(self, value: float, n: int) -> bool:
        return self.is_all(lambda d: d.rsi.value > value, n)
