"""Configuration data models.

Every field has the engine default, so a missing YAML section or key
falls back to the values below.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class CandleStoreConfig:
    """Candle store sizing."""
    max_size: int = 1000
    dedup: bool = True


@dataclass
class IndicatorConfig:
    """Indicator sets built by TechnicalAnalysisBuilder."""
    ma_periods: List[int] = field(default_factory=lambda: [5, 10, 20, 50, 100, 200])
    rsi_periods: List[int] = field(default_factory=lambda: [9, 14, 25])
    adx_periods: List[int] = field(default_factory=lambda: [14])
    bband_params: List[List[float]] = field(default_factory=lambda: [[20, 2.0]])  # [[period, multiplier], ...]
    macd_params: List[List[int]] = field(default_factory=lambda: [[12, 26, 9]])  # [[fast, slow, signal], ...]
    max_min_periods: List[int] = field(default_factory=lambda: [10, 20, 50])
    ichimoku_params: List[List[int]] = field(default_factory=lambda: [[9, 26, 52]])  # [[tenkan, kijun, senkou], ...]
    volume_periods: List[int] = field(default_factory=lambda: [10, 20, 50])
    vwap_periods: List[int] = field(default_factory=lambda: [0])  # 0 = cumulative


@dataclass
class HybridConfig:
    """Hybrid analyzer parameters."""
    ma_type: str = "ema"
    ma_period: int = 20
    macd_fast_period: int = 12
    macd_slow_period: int = 26
    macd_signal_period: int = 9
    rsi_period: int = 14
    rsi_lower: float = 30.0
    rsi_upper: float = 70.0


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    console: bool = True
    log_dir: Optional[str] = None  # None disables file logging
    json: bool = False
    max_bytes: int = 10 * 1024 * 1024  # Rotation threshold
    backup_count: int = 5  # Number of rotated files to keep
    timezone: str = "local"  # "UTC", "local" or an IANA name


@dataclass
class EngineConfig:
    """Complete engine configuration."""
    candle_store: CandleStoreConfig = field(default_factory=CandleStoreConfig)
    indicators: IndicatorConfig = field(default_factory=IndicatorConfig)
    hybrid: HybridConfig = field(default_factory=HybridConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
