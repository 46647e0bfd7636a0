"""MACD analyzer: histogram thresholds and signal-line crosses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.momentum.macd import MACD, MACDBuilder
from .base import Analyzer, AnalyzerData


@dataclass(frozen=True)
class MACDAnalyzerData(AnalyzerData):
    macd: MACD

    def is_histogram_above_threshold(self, threshold: float) -> bool:
        return self.macd.histogram > threshold

    def is_histogram_below_threshold(self, threshold: float) -> bool:
        return self.macd.histogram < threshold

    def is_macd_above_signal(self) -> bool:
        return self.macd.macd_line > self.macd.signal_line

    def is_macd_below_signal(self) -> bool:
        return self.macd.macd_line < self.macd.signal_line


class MACDAnalyzer(Analyzer[MACDAnalyzerData]):
    def __init__(
        self,
        fast_period: int,
        slow_period: int,
        signal_period: int,
        storage: CandleStore,
        max_history: Optional[int] = None,
    ):
        super().__init__(max_history)
        self.macd_builder = MACDBuilder(fast_period, slow_period, signal_period)
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> MACDAnalyzerData:
        return MACDAnalyzerData(candle, self.macd_builder.next(candle))

    def is_histogram_above_threshold(self, threshold: float, n: int) -> bool:
        return self.is_all(lambda d: d.is_histogram_above_threshold(threshold), n)

    def is_histogram_below_threshold(self, threshold: float, n: int) -> bool:
        return self.is_all(lambda d: d.is_histogram_below_threshold(threshold), n)

    def is_macd_crossed_above_signal(self, n: int, m: int) -> bool:
        """MACD line moved above the signal line within the last n items."""
        return self.is_break_through_by_satisfying(lambda d: d.is_macd_above_signal(), n, m)

    def is_macd_crossed_below_signal(self, n: int, m: int) -> bool:
        """MACD line moved below the signal line within the last n items."""
        return self.is_break_through_by_satisfying(lambda d: d.is_macd_below_signal(), n, m)
