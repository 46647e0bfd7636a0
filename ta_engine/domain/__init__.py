"""
Domain layer for the technical-analysis engine.

Contains:
- Candle value type and CandleStore buffer
- Incremental indicator builders (indicators/)
- Stateful analyzers with signal predicates (analyzers/)
- Exception hierarchy
"""

from .candle import Candle, candles_from_dataframe, candles_to_dataframe
from .candle_store import CandleStore
from .exceptions import (
    ConfigurationError,
    FatalError,
    IndicatorConfigError,
    InsufficientDataError,
    RecoverableError,
    TAEngineError,
)

__all__ = [
    "Candle",
    "CandleStore",
    "candles_from_dataframe",
    "candles_to_dataframe",
    "TAEngineError",
    "RecoverableError",
    "FatalError",
    "ConfigurationError",
    "IndicatorConfigError",
    "InsufficientDataError",
]
