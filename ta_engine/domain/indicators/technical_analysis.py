"""
Composite technical analysis over a standard indicator set.

TechnicalAnalysisBuilder bundles one multi-series builder per family
(SMA and EMA sets, RSI, ADX, Bollinger Bands, MACD, MAX, MIN, Ichimoku,
Volume, VWAP) and produces a TechnicalAnalysis snapshot per candle.

Also provides quick one-shot helpers:
- quick_analysis: (SMA, EMA, RSI) for a single period
- detect_price_spike: last close-to-close move above a percentage
- overbought_oversold_analysis: RSI(14) zone as 1 / 0 / -1
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

from ...utils.logging_setup import get_logger
from ..candle import Candle
from .base import IndicatorBuilder, TAs, TAsBuilder
from .momentum.macd import MACD, MACDParams, MACDsBuilderFactory
from .momentum.rsi import RSI, RSIBuilder, RSIsBuilderFactory
from .trend.adx import ADX, ADXsBuilderFactory
from .trend.ema import EMABuilder, EMAsBuilderFactory
from .trend.ichimoku import Ichimoku, IchimokuParams, IchimokusBuilderFactory
from .trend.ma import MovingAverage
from .trend.sma import SMABuilder, SMAsBuilderFactory
from .volatility.bollinger import BBand, BBandsBuilderFactory
from .volatility.extremes import MAX, MIN, MAXsBuilderFactory, MINsBuilderFactory
from .volume.volume_ratio import Volume, VolumesBuilderFactory
from .volume.vwap import VWAP, VWAPParams, VWAPsBuilderFactory

if TYPE_CHECKING:
    from config.models import IndicatorConfig

logger = get_logger(__name__)

DEFAULT_MA_PERIODS = (5, 10, 20, 50, 100, 200)
DEFAULT_RSI_PERIODS = (9, 14, 25)
DEFAULT_ADX_PERIODS = (14,)
DEFAULT_BBAND_PARAMS = ((20, 2.0),)
DEFAULT_MACD_PARAMS = (MACDParams(12, 26, 9),)
DEFAULT_MAX_MIN_PERIODS = (10, 20, 50)
DEFAULT_ICHIMOKU_PARAMS = (IchimokuParams(9, 26, 52),)
DEFAULT_VOLUME_PERIODS = (10, 20, 50)
DEFAULT_VWAP_PERIODS = (0,)


@dataclass(frozen=True)
class TechnicalAnalysis:
    """All indicator sets at one point in time."""

    smas: TAs[int, MovingAverage]
    emas: TAs[int, MovingAverage]
    rsis: TAs[int, RSI]
    adxs: TAs[int, ADX]
    bbands: TAs[Tuple[int, float], BBand]
    macds: TAs[MACDParams, MACD]
    maxs: TAs[int, MAX]
    mins: TAs[int, MIN]
    ichimokus: TAs[IchimokuParams, Ichimoku]
    volumes: TAs[int, Volume]
    vwaps: TAs[VWAPParams, VWAP]


class TechnicalAnalysisBuilder(IndicatorBuilder[TechnicalAnalysis]):
    """
    Builder for the standard indicator bundle.

    Defaults:
        MA (SMA and EMA): 5, 10, 20, 50, 100, 200
        RSI: 9, 14, 25
        ADX: 14
        Bollinger Bands: (20, 2.0)
        MACD: (12, 26, 9)
        MAX / MIN: 10, 20, 50
        Ichimoku: (9, 26, 52)
        Volume: 10, 20, 50
        VWAP: cumulative (period 0)

    The ``with_*`` setters replace one family's keys and return self.
    """

    name = "technical_analysis"

    def __init__(self) -> None:
        self._smas = SMAsBuilderFactory.build(DEFAULT_MA_PERIODS)
        self._emas = EMAsBuilderFactory.build(DEFAULT_MA_PERIODS)
        self._rsis = RSIsBuilderFactory.build(DEFAULT_RSI_PERIODS)
        self._adxs = ADXsBuilderFactory.build(DEFAULT_ADX_PERIODS)
        self._bbands = BBandsBuilderFactory.build(DEFAULT_BBAND_PARAMS)
        self._macds = MACDsBuilderFactory.build(DEFAULT_MACD_PARAMS)
        self._maxs = MAXsBuilderFactory.build(DEFAULT_MAX_MIN_PERIODS)
        self._mins = MINsBuilderFactory.build(DEFAULT_MAX_MIN_PERIODS)
        self._ichimokus = IchimokusBuilderFactory.build(DEFAULT_ICHIMOKU_PARAMS)
        self._volumes = VolumesBuilderFactory.build(DEFAULT_VOLUME_PERIODS)
        self._vwaps = VWAPsBuilderFactory.build(DEFAULT_VWAP_PERIODS)

    @classmethod
    def from_config(cls, config: "IndicatorConfig") -> "TechnicalAnalysisBuilder":
        """Create a builder from the ``indicators`` configuration section."""
        logger.debug(f"Building technical analysis from config: {config}")
        return (
            cls()
            .with_ma_periods(config.ma_periods)
            .with_rsi_periods(config.rsi_periods)
            .with_adx_periods(config.adx_periods)
            .with_bband_params(config.bband_params)
            .with_macd_params(config.macd_params)
            .with_max_min_periods(config.max_min_periods)
            .with_ichimoku_params(config.ichimoku_params)
            .with_volume_periods(config.volume_periods)
            .with_vwap_periods(config.vwap_periods)
        )

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def with_ma_periods(self, periods: Sequence[int]) -> "TechnicalAnalysisBuilder":
        self._smas = SMAsBuilderFactory.build(periods)
        self._emas = EMAsBuilderFactory.build(periods)
        return self

    def with_rsi_periods(self, periods: Sequence[int]) -> "TechnicalAnalysisBuilder":
        self._rsis = RSIsBuilderFactory.build(periods)
        return self

    def with_adx_periods(self, periods: Sequence[int]) -> "TechnicalAnalysisBuilder":
        self._adxs = ADXsBuilderFactory.build(periods)
        return self

    def with_bband_params(self, params: Sequence) -> "TechnicalAnalysisBuilder":
        self._bbands = BBandsBuilderFactory.build(params)
        return self

    def with_macd_params(self, params: Sequence) -> "TechnicalAnalysisBuilder":
        self._macds = MACDsBuilderFactory.build(params)
        return self

    def with_max_min_periods(self, periods: Sequence[int]) -> "TechnicalAnalysisBuilder":
        self._maxs = MAXsBuilderFactory.build(periods)
        self._mins = MINsBuilderFactory.build(periods)
        return self

    def with_ichimoku_params(self, params: Sequence) -> "TechnicalAnalysisBuilder":
        self._ichimokus = IchimokusBuilderFactory.build(params)
        return self

    def with_volume_periods(self, periods: Sequence[int]) -> "TechnicalAnalysisBuilder":
        self._volumes = VolumesBuilderFactory.build(periods)
        return self

    def with_vwap_periods(self, periods: Sequence[int]) -> "TechnicalAnalysisBuilder":
        self._vwaps = VWAPsBuilderFactory.build(periods)
        return self

    # -------------------------------------------------------------------------
    # Builder interface
    # -------------------------------------------------------------------------

    def _children(self) -> Tuple[TAsBuilder, ...]:
        return (
            self._smas, self._emas, self._rsis, self._adxs, self._bbands,
            self._macds, self._maxs, self._mins, self._ichimokus, self._volumes, self._vwaps,
        )

    def reset(self) -> None:
        for child in self._children():
            child.reset()

    def _empty_snapshot(self) -> TechnicalAnalysis:
        return TechnicalAnalysis(*(child._empty_snapshot() for child in self._children()))

    def next(self, candle: Candle) -> TechnicalAnalysis:
        return TechnicalAnalysis(*(child.next(candle) for child in self._children()))


def quick_analysis(candles: Sequence[Candle], period: int = 14) -> Tuple[float, float, float]:
    """
    SMA, EMA and RSI of ``candles`` (oldest first) for one period.

    Returns (0.0, 0.0, 50.0) for an empty input.
    """
    if not candles:
        return 0.0, 0.0, 50.0
    sma = SMABuilder(period).build(candles)
    ema = EMABuilder(period).build(candles)
    rsi = RSIBuilder(period).build(candles)
    return sma.value, ema.value, rsi.value


def detect_price_spike(candles: Sequence[Candle], threshold_percent: Optional[float] = None) -> bool:
    """True if the last close moved at least ``threshold_percent`` (default 3%) from the previous one."""
    if len(candles) < 2:
        return False
    threshold = 3.0 if threshold_percent is None else threshold_percent
    prev_close = candles[-2].close
    if prev_close == 0.0:
        return False
    change = (candles[-1].close - prev_close) / prev_close * 100.0
    return abs(change) >= threshold


def overbought_oversold_analysis(candles: Sequence[Candle]) -> int:
    """RSI(14) zone: 1 overbought, -1 oversold, 0 neutral or no data."""
    if not candles:
        return 0
    rsi = RSIBuilder(14).build(candles)
    if rsi.is_overbought():
        return 1
    if rsi.is_oversold():
        return -1
    return 0
