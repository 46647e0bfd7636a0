"""Bollinger Band analyzer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.volatility.bollinger import BBand, BBandBuilder
from .base import Analyzer, AnalyzerData

MIN_BAND_WIDTH = 0.02


@dataclass(frozen=True)
class BBandAnalyzerData(AnalyzerData):
    bband: BBand

    def band_width(self) -> float:
        """(upper - lower) / middle; 0.0 when the middle band is zero."""
        if self.bband.average == 0.0:
            return 0.0
        return (self.bband.upper - self.bband.lower) / self.bband.average


class BBandAnalyzer(Analyzer[BBandAnalyzerData]):
    """
    Close position relative to the bands.

    The band predicates look at the last ``n`` items (default: only the
    latest one) and are False on an empty history.
    """

    def __init__(
        self,
        period: int,
        multiplier: float,
        storage: CandleStore,
        max_history: Optional[int] = None,
    ):
        super().__init__(max_history)
        self.bband_builder = BBandBuilder(period, multiplier)
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> BBandAnalyzerData:
        return BBandAnalyzerData(candle, self.bband_builder.next(candle))

    def is_below_lower_band(self, n: int = 1) -> bool:
        return self.is_all(lambda d: d.candle.close < d.bband.lower, n)

    def is_above_upper_band(self, n: int = 1) -> bool:
        return self.is_all(lambda d: d.candle.close > d.bband.upper, n)

    def is_above_middle_band(self, n: int = 1) -> bool:
        return self.is_all(lambda d: d.candle.close > d.bband.average, n)

    def is_below_middle_band(self, n: int = 1) -> bool:
        return self.is_all(lambda d: d.candle.close < d.bband.average, n)

    def is_band_width_sufficient(self, min_width: float = MIN_BAND_WIDTH) -> bool:
        """Latest relative band width exceeds ``min_width``."""
        return self.is_all(lambda d: d.band_width() > min_width, 1)
