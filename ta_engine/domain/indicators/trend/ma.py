"""
Moving average sum type shared by SMA, EMA and WMA.

MAType is the closed set of moving-average kinds; every MA builder
produces the same MovingAverage snapshot tagged with its kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from ..base import IndicatorCategory, TAsBuilderFactory, require_positive_period
from ...exceptions import IndicatorConfigError


class MAType(Enum):
    """Moving average kind."""

    SMA = "sma"
    EMA = "ema"
    WMA = "wma"


@dataclass(frozen=True)
class MovingAverage:
    """Moving average value for one period at one point in time."""

    kind: MAType
    period: int
    value: float

    def get(self) -> float:
        return self.value

    def __str__(self) -> str:
        return f"{self.kind.name}({self.period}: {self.value:.2f})"


def ma_value(ma: MovingAverage) -> float:
    return ma.value


class MovingAverageFactory(TAsBuilderFactory[int, MovingAverage]):
    """Shared key validation for the SMA, EMA and WMA families."""

    category = IndicatorCategory.TREND
    ma_type: MAType
    default_keys = (5, 10, 20, 50, 100, 200)

    @classmethod
    def parse_key(cls, raw: object) -> int:
        return require_positive_period(cls.family, raw)

    @classmethod
    def validate_keys(cls, keys: Sequence[int]) -> None:
        validate_ascending_periods(cls.family, keys)


def validate_ascending_periods(indicator: str, periods: Sequence[int]) -> List[int]:
    """Periods must be non-empty, positive and strictly ascending."""
    periods = list(periods)
    if not periods:
        raise IndicatorConfigError(indicator, "period list must not be empty")
    for p in periods:
        require_positive_period(indicator, p)
    if any(a >= b for a, b in zip(periods, periods[1:])):
        raise IndicatorConfigError(
            indicator, "periods must be strictly ascending", periods=periods
        )
    return periods
