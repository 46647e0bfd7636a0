"""
Momentum indicators package.

Momentum indicators measure the rate of price change.

Indicators:
- RSI: Relative Strength Index (Wilder's smoothing)
- MACD: Moving Average Convergence Divergence
"""

from .macd import MACD, MACDBuilder, MACDParams, MACDsBuilderFactory
from .rsi import RSI, RSIBuilder, RSIsBuilderFactory

__all__ = [
    "MACD",
    "MACDBuilder",
    "MACDParams",
    "MACDsBuilderFactory",
    "RSI",
    "RSIBuilder",
    "RSIsBuilderFactory",
]
