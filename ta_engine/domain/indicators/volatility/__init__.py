"""
Volatility indicators package.

Indicators:
- ATR: Average True Range
- Bollinger Bands
- MAX / MIN: rolling highest high and lowest low
"""

from .atr import ATR, ATRBuilder, ATRsBuilderFactory
from .bollinger import BBand, BBandBuilder, BBandsBuilderFactory
from .extremes import MAX, MIN, MAXBuilder, MAXsBuilderFactory, MINBuilder, MINsBuilderFactory

__all__ = [
    "ATR",
    "ATRBuilder",
    "ATRsBuilderFactory",
    "BBand",
    "BBandBuilder",
    "BBandsBuilderFactory",
    "MAX",
    "MIN",
    "MAXBuilder",
    "MAXsBuilderFactory",
    "MINBuilder",
    "MINsBuilderFactory",
]
