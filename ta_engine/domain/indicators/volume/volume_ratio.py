"""
Volume Ratio Indicator.

Compares the current bar's volume to the rolling average volume over
the last ``period`` bars (current bar included). During warm-up the
average covers the bars seen so far and the ratio is reported as 1.0.

Signals:
- Ratio > 2: High volume, significant activity
- Ratio < 0.5: Low volume, lack of interest
- Ratio is 1.0 whenever the average is zero
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque

from ...candle import Candle
from ..base import (
    IndicatorBuilder,
    IndicatorCategory,
    TAsBuilderFactory,
    finite_or,
    require_positive_period,
)


@dataclass(frozen=True)
class Volume:
    """Average volume, current volume and their ratio."""

    period: int
    average_volume: float = 0.0
    current_volume: float = 0.0
    volume_ratio: float = 1.0

    def get(self) -> float:
        return self.volume_ratio

    def is_above_average(self) -> bool:
        return self.current_volume > self.average_volume

    def is_spike(self, threshold: float = 2.0) -> bool:
        return self.volume_ratio > threshold

    def __str__(self) -> str:
        return (
            f"Volume({self.period}: avg={self.average_volume:.2f}, "
            f"current={self.current_volume:.2f}, ratio={self.volume_ratio:.2f})"
        )


class VolumeBuilder(IndicatorBuilder[Volume]):
    """Incremental volume average and ratio with a running sum."""

    name = "volume"

    def __init__(self, period: int = 20):
        self.period = require_positive_period(self.name, period)
        self._window: Deque[float] = deque(maxlen=period)
        self._sum = 0.0

    def reset(self) -> None:
        self._window.clear()
        self._sum = 0.0

    def _empty_snapshot(self) -> Volume:
        return Volume(self.period)

    def next(self, candle: Candle) -> Volume:
        volume = candle.volume
        if len(self._window) == self.period:
            self._sum -= self._window[0]
        self._window.append(volume)
        self._sum += volume

        average = self._sum / len(self._window)
        if len(self._window) < self.period:
            return Volume(self.period, average, volume, 1.0)
        ratio = finite_or(volume / average, 1.0) if average > 0.0 else 1.0
        return Volume(self.period, average, volume, ratio)


class VolumesBuilderFactory(TAsBuilderFactory[int, Volume]):
    family = "volume"
    category = IndicatorCategory.VOLUME
    default_keys = (20,)
    common_keys = (10, 20, 50)

    @classmethod
    def parse_key(cls, raw: object) -> int:
        return require_positive_period(cls.family, raw)

    @classmethod
    def create_builder(cls, key: int) -> VolumeBuilder:
        return VolumeBuilder(key)
