"""
Volume analyzer.

Ratios are current volume over the rolling average for each configured
period; a ratio of 1.0 means average volume.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.base import TAs
from ..indicators.volume.volume_ratio import Volume, VolumesBuilderFactory
from .base import Analyzer, AnalyzerData

SURGE_GROWTH = 1.5
DECLINE_SHRINK = 0.5


@dataclass(frozen=True)
class VolumeAnalyzerData(AnalyzerData):
    volumes: TAs[int, Volume]

    def get_volume_ratio(self, period: int) -> float:
        return self.volumes.get(period).volume_ratio

    def is_all_volume_ratio_above_average(self) -> bool:
        return self.volumes.is_all(lambda v: v.volume_ratio >= 1.0)

    def is_all_volume_ratio_significantly_above(self, threshold: float) -> bool:
        return self.volumes.is_all(lambda v: v.volume_ratio >= threshold)

    def is_all_volume_ratio_below_average(self) -> bool:
        return self.volumes.is_all(lambda v: v.volume_ratio < 1.0)

    def is_current_volume_above_average(self, period: int) -> bool:
        return self.volumes.get(period).is_above_average()

    def is_bullish_with_increased_volume(self, period: int) -> bool:
        return self.candle.is_bullish() and self.is_current_volume_above_average(period)

    def is_bearish_with_increased_volume(self, period: int) -> bool:
        return self.candle.is_bearish() and self.is_current_volume_above_average(period)


class VolumeAnalyzer(Analyzer[VolumeAnalyzerData]):
    """
    Args:
        periods: Averaging periods; defaults to 10, 20, 50.
        storage: Candles to replay on construction.
        max_history: Optional history cap.
    """

    def __init__(
        self,
        periods: Optional[Sequence[int]],
        storage: CandleStore,
        max_history: Optional[int] = None,
    ):
        super().__init__(max_history)
        if periods is None:
            self.volumes_builder = VolumesBuilderFactory.build([10, 20, 50])
        else:
            self.volumes_builder = VolumesBuilderFactory.build(periods)
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> VolumeAnalyzerData:
        return VolumeAnalyzerData(candle, self.volumes_builder.next(candle))

    def is_volume_above_average(self, n: int) -> bool:
        return self.is_all(lambda d: d.is_all_volume_ratio_above_average(), n)

    def is_volume_significantly_above(self, threshold: float, n: int) -> bool:
        return self.is_all(lambda d: d.is_all_volume_ratio_significantly_above(threshold), n)

    def is_volume_below_average(self, n: int) -> bool:
        return self.is_all(lambda d: d.is_all_volume_ratio_below_average(), n)

    def is_volume_surge(self, period: int, threshold: float) -> bool:
        """Ratio above ``threshold`` and 1.5x the previous ratio."""
        if len(self) < 2:
            return False
        current = self.items[0].get_volume_ratio(period)
        previous = self.items[1].get_volume_ratio(period)
        return current > threshold and current > previous * SURGE_GROWTH

    def is_volume_decline(self, period: int, threshold: float) -> bool:
        """Ratio below ``threshold`` and under half the previous ratio."""
        if len(self) < 2:
            return False
        current = self.items[0].get_volume_ratio(period)
        previous = self.items[1].get_volume_ratio(period)
        return current < threshold and current < previous * DECLINE_SHRINK

    def _ratios(self, period: int, n: int) -> list:
        return [self.items[i].get_volume_ratio(period) for i in range(n)]

    def is_increasing_volume_in_uptrend(self, period: int, n: int) -> bool:
        """n bullish candles with the volume ratio rising into the latest one."""
        if n <= 0 or len(self) < n:
            return False
        if not all(self.items[i].candle.is_bullish() for i in range(n)):
            return False
        ratios = self._ratios(period, n)
        return all(cur > older for cur, older in zip(ratios, ratios[1:]))

    def is_decreasing_volume_in_downtrend(self, period: int, n: int) -> bool:
        """n bearish candles with the volume ratio falling into the latest one."""
        if n <= 0 or len(self) < n:
            return False
        if not all(self.items[i].candle.is_bearish() for i in range(n)):
            return False
        ratios = self._ratios(period, n)
        return all(cur < older for cur, older in zip(ratios, ratios[1:]))

    def is_bullish_with_increased_volume(self, period: int, n: int) -> bool:
        return self.is_all(lambda d: d.is_bullish_with_increased_volume(period), n)

    def is_bearish_with_increased_volume(self, period: int, n: int) -> bool:
        return self.is_all(lambda d: d.is_bearish_with_increased_volume(period), n)
