"""
Trend indicators package.

Trend indicators identify the direction and strength of market trends.

Indicators:
- SMA / EMA / WMA moving averages (MAType sum type)
- ADX: Average Directional Index
- SuperTrend
- Ichimoku Cloud
"""

from .adx import ADX, ADXBuilder, ADXsBuilderFactory
from .ema import EMABuilder, EMAsBuilderFactory, ExponentialSmoother
from .ichimoku import Ichimoku, IchimokuBuilder, IchimokuParams, IchimokusBuilderFactory
from .ma import MAType, MovingAverage
from .moving_averages import MA_FACTORIES, MAsBuilderFactory
from .sma import SMABuilder, SMAsBuilderFactory
from .supertrend import SuperTrend, SuperTrendBuilder, SuperTrendsBuilderFactory
from .wma import WMABuilder, WMAsBuilderFactory

__all__ = [
    "ADX",
    "ADXBuilder",
    "ADXsBuilderFactory",
    "EMABuilder",
    "EMAsBuilderFactory",
    "ExponentialSmoother",
    "Ichimoku",
    "IchimokuBuilder",
    "IchimokuParams",
    "IchimokusBuilderFactory",
    "MAType",
    "MovingAverage",
    "MA_FACTORIES",
    "MAsBuilderFactory",
    "SMABuilder",
    "SMAsBuilderFactory",
    "SuperTrend",
    "SuperTrendBuilder",
    "SuperTrendsBuilderFactory",
    "WMABuilder",
    "WMAsBuilderFactory",
]
