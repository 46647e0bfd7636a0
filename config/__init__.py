"""Configuration management."""

from .config_manager import ConfigManager
from .models import (
    CandleStoreConfig,
    EngineConfig,
    HybridConfig,
    IndicatorConfig,
    LoggingConfig,
)

__all__ = [
    "ConfigManager",
    "EngineConfig",
    "CandleStoreConfig",
    "IndicatorConfig",
    "HybridConfig",
    "LoggingConfig",
]
