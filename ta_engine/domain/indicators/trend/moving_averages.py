"""
MA family dispatch.

Maps each MAType to its factory so callers can pick the moving-average
kind at runtime (e.g. from configuration).
"""

from __future__ import annotations

from typing import Dict, Sequence, Type

from ..base import IndicatorBuilder, TAsBuilder
from .ema import EMAsBuilderFactory
from .ma import MAType, MovingAverage, MovingAverageFactory
from .sma import SMAsBuilderFactory
from .wma import WMAsBuilderFactory

MA_FACTORIES: Dict[MAType, Type[MovingAverageFactory]] = {
    MAType.SMA: SMAsBuilderFactory,
    MAType.EMA: EMAsBuilderFactory,
    MAType.WMA: WMAsBuilderFactory,
}


def parse_ma_type(value: "MAType | str") -> MAType:
    """Accept an MAType or its name/value in any case ("sma", "EMA")."""
    if isinstance(value, MAType):
        return value
    return MAType(str(value).lower())


class MAsBuilderFactory:
    """Builds MA sets for any MAType."""

    @staticmethod
    def build(ma_type: "MAType | str", periods: Sequence[int]) -> TAsBuilder[int, MovingAverage]:
        """
        Create a TAsBuilder of moving averages.

        Args:
            ma_type: SMA, EMA or WMA.
            periods: Non-empty, strictly ascending list of positive periods.

        Raises:
            IndicatorConfigError: If the periods are invalid.
        """
        return MA_FACTORIES[parse_ma_type(ma_type)].build(periods)

    @staticmethod
    def create_builder(ma_type: "MAType | str", period: int) -> IndicatorBuilder[MovingAverage]:
        return MA_FACTORIES[parse_ma_type(ma_type)].create_builder(period)
