"""Stateful analyzers built on indicator snapshot histories."""

from .adx_analyzer import ADXAnalyzer, ADXAnalyzerData
from .atr_analyzer import ATRAnalyzer, ATRAnalyzerData
from .base import Analyzer, AnalyzerData, MovingAverageMixin
from .bband_analyzer import BBandAnalyzer, BBandAnalyzerData
from .hybrid_analyzer import HybridAnalyzer, HybridAnalyzerData, MarketCondition, SignalType
from .ichimoku_analyzer import IchimokuAnalyzer, IchimokuAnalyzerData
from .ma_analyzer import MAAnalyzer, MAAnalyzerData
from .macd_analyzer import MACDAnalyzer, MACDAnalyzerData
from .momentum_analyzer import (
    MomentumAnalyzer,
    MomentumAnalyzerData,
    MomentumDirection,
    MomentumState,
    OverBoughtOverSold,
)
from .rsi_analyzer import RSIAnalyzer, RSIAnalyzerData
from .supertrend_analyzer import SuperTrendAnalyzer, SuperTrendAnalyzerData
from .support_resistance_analyzer import (
    LevelType,
    SupportResistanceAnalyzer,
    SupportResistanceAnalyzerData,
    SupportResistanceLevel,
)
from .three_rsi_analyzer import ThreeRSIAnalyzer, ThreeRSIAnalyzerData
from .volume_analyzer import VolumeAnalyzer, VolumeAnalyzerData
from .vwap_analyzer import VWAPAnalyzer, VWAPAnalyzerData

__all__ = [
    "Analyzer",
    "AnalyzerData",
    "MovingAverageMixin",
    "ADXAnalyzer",
    "ADXAnalyzerData",
    "ATRAnalyzer",
    "ATRAnalyzerData",
    "BBandAnalyzer",
    "BBandAnalyzerData",
    "HybridAnalyzer",
    "HybridAnalyzerData",
    "MarketCondition",
    "SignalType",
    "IchimokuAnalyzer",
    "IchimokuAnalyzerData",
    "MAAnalyzer",
    "MAAnalyzerData",
    "MACDAnalyzer",
    "MACDAnalyzerData",
    "MomentumAnalyzer",
    "MomentumAnalyzerData",
    "MomentumDirection",
    "MomentumState",
    "OverBoughtOverSold",
    "RSIAnalyzer",
    "RSIAnalyzerData",
    "SuperTrendAnalyzer",
    "SuperTrendAnalyzerData",
    "LevelType",
    "SupportResistanceAnalyzer",
    "SupportResistanceAnalyzerData",
    "SupportResistanceLevel",
    "ThreeRSIAnalyzer",
    "ThreeRSIAnalyzerData",
    "VolumeAnalyzer",
    "VolumeAnalyzerData",
    "VWAPAnalyzer",
    "VWAPAnalyzerData",
]
