"""
Indicators package for incremental technical analysis.

Provides:
- IndicatorBuilder: Base class for streaming indicator builders
- TAs / TAsBuilder: Keyed multi-series snapshot and builder
- TAsBuilderFactory: Per-family factory base
- IndicatorRegistry: Auto-discovery and management of indicator families
- TechnicalAnalysisBuilder: Standard indicator bundle
"""

from .base import (
    IndicatorBuilder,
    IndicatorCategory,
    TAs,
    TAsBuilder,
    TAsBuilderFactory,
    WilderSmoother,
)
from .registry import IndicatorRegistry, get_indicator_registry
from .technical_analysis import (
    TechnicalAnalysis,
    TechnicalAnalysisBuilder,
    detect_price_spike,
    overbought_oversold_analysis,
    quick_analysis,
)

__all__ = [
    "IndicatorBuilder",
    "IndicatorCategory",
    "TAs",
    "TAsBuilder",
    "TAsBuilderFactory",
    "WilderSmoother",
    "IndicatorRegistry",
    "get_indicator_registry",
    "TechnicalAnalysis",
    "TechnicalAnalysisBuilder",
    "detect_price_spike",
    "overbought_oversold_analysis",
    "quick_analysis",
]
