"""Moving-average arrangement analyzer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.base import TAs
from ..indicators.trend.ma import MAType, MovingAverage
from ..indicators.trend.moving_averages import MAsBuilderFactory
from .base import Analyzer, AnalyzerData, MovingAverageMixin


@dataclass(frozen=True)
class MAAnalyzerData(AnalyzerData):
    mas: TAs[int, MovingAverage]

    def __str__(self) -> str:
        return f"candle={self.candle}, mas={self.mas}"


class MAAnalyzer(MovingAverageMixin, Analyzer[MAAnalyzerData]):
    """Tracks a stacked set of moving averages of one kind."""

    def __init__(
        self,
        ma_type: "MAType | str",
        ma_periods: Sequence[int],
        storage: CandleStore,
        max_history: Optional[int] = None,
    ):
        super().__init__(max_history)
        self.mas_builder = MAsBuilderFactory.build(ma_type, ma_periods)
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> MAAnalyzerData:
        return MAAnalyzerData(candle, self.mas_builder.next(candle))
