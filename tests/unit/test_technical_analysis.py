"""
Unit tests for the composite technical analysis builder and helpers.

Tests:
- Default and configured key sets
- Snapshot contents
- quick_analysis, detect_price_spike, overbought_oversold_analysis
"""

import pytest

from config.models import IndicatorConfig
from ta_engine.domain.indicators.momentum.macd import MACDParams
from ta_engine.domain.indicators.momentum.rsi import RSIBuilder
from ta_engine.domain.indicators.technical_analysis import (
    TechnicalAnalysisBuilder,
    detect_price_spike,
    overbought_oversold_analysis,
    quick_analysis,
)
from ta_engine.domain.indicators.trend.ichimoku import IchimokuParams
from ta_engine.domain.indicators.trend.sma import SMABuilder
from ta_engine.domain.indicators.volume.vwap import VWAPParams


class TestTechnicalAnalysisBuilder:
    """Tests for TechnicalAnalysisBuilder."""

    def test_default_keys(self, sample_candles) -> None:
        """Test every family carries its default keys."""
        ta = TechnicalAnalysisBuilder().build(sample_candles)

        assert ta.smas.keys == (5, 10, 20, 50, 100, 200)
        assert ta.emas.keys == (5, 10, 20, 50, 100, 200)
        assert ta.rsis.keys == (9, 14, 25)
        assert ta.adxs.keys == (14,)
        assert ta.bbands.keys == ((20, 2.0),)
        assert ta.macds.keys == (MACDParams(12, 26, 9),)
        assert ta.maxs.keys == (10, 20, 50)
        assert ta.mins.keys == (10, 20, 50)
        assert ta.ichimokus.keys == (IchimokuParams(9, 26, 52),)
        assert ta.volumes.keys == (10, 20, 50)
        assert ta.vwaps.keys == (VWAPParams(0),)

    def test_matches_single_builders(self, sample_candles) -> None:
        """Test bundled snapshots equal stand-alone builder output."""
        ta = TechnicalAnalysisBuilder().build(sample_candles)
        assert ta.smas.get(20) == SMABuilder(20).build(sample_candles)
        assert ta.rsis.get(14) == RSIBuilder(14).build(sample_candles)

    def test_with_setters(self, sample_candles) -> None:
        """Test with_* setters replace one family and chain."""
        builder = (
            TechnicalAnalysisBuilder()
            .with_ma_periods([3, 7])
            .with_rsi_periods([14])
            .with_bband_params([(10, 1.5)])
        )
        ta = builder.build(sample_candles)
        assert ta.smas.keys == (3, 7)
        assert ta.emas.keys == (3, 7)
        assert ta.rsis.keys == (14,)
        assert ta.bbands.keys == ((10, 1.5),)
        assert ta.adxs.keys == (14,)

    def test_from_config(self) -> None:
        """Test keys come from an IndicatorConfig section."""
        config = IndicatorConfig(
            ma_periods=[5, 20],
            rsi_periods=[14],
            adx_periods=[7, 14],
            bband_params=[[20, 2.0]],
            macd_params=[[8, 17, 9]],
            max_min_periods=[10],
            ichimoku_params=[[7, 22, 44]],
            volume_periods=[20],
            vwap_periods=[0, 20],
        )
        ta = TechnicalAnalysisBuilder.from_config(config).build([])
        assert ta.smas.keys == (5, 20)
        assert ta.adxs.keys == (7, 14)
        assert ta.macds.keys == (MACDParams(8, 17, 9),)
        assert ta.ichimokus.keys == (IchimokuParams(7, 22, 44),)
        assert ta.vwaps.keys == (VWAPParams(0), VWAPParams(20))

    def test_empty_build(self) -> None:
        """Test build([]) yields warm-up placeholders."""
        ta = TechnicalAnalysisBuilder().build([])
        assert ta.rsis.get(14).value == 50.0
        assert ta.volumes.get(20).volume_ratio == 1.0


class TestQuickAnalysis:
    """Tests for quick_analysis."""

    def test_empty(self) -> None:
        """Test the neutral triple for no candles."""
        assert quick_analysis([]) == (0.0, 0.0, 50.0)

    def test_values(self, rising_candles) -> None:
        """Test SMA, EMA and RSI of a rising series."""
        sma, ema, rsi = quick_analysis(rising_candles, 14)
        assert sma == pytest.approx(sum(100.0 + i for i in range(66, 80)) / 14)
        assert ema > 0.0
        assert rsi == pytest.approx(100.0)


class TestDetectPriceSpike:
    """Tests for detect_price_spike."""

    def test_needs_two_candles(self, make_candles) -> None:
        """Test fewer than two candles never spike."""
        assert not detect_price_spike([])
        assert not detect_price_spike(make_candles([100.0]))

    def test_default_threshold(self, make_candles) -> None:
        """Test the default 3% threshold in both directions."""
        assert detect_price_spike(make_candles([100.0, 103.0]))
        assert detect_price_spike(make_candles([100.0, 96.0]))
        assert not detect_price_spike(make_candles([100.0, 102.0]))

    def test_custom_threshold(self, make_candles) -> None:
        """Test an explicit threshold percentage."""
        assert detect_price_spike(make_candles([100.0, 101.5]), threshold_percent=1.0)

    def test_zero_previous_close(self, make_candles) -> None:
        """Test a zero previous close is not a spike."""
        assert not detect_price_spike(make_candles([0.0, 10.0]))


class TestOverboughtOversold:
    """Tests for overbought_oversold_analysis."""

    def test_empty(self) -> None:
        """Test no candles is neutral."""
        assert overbought_oversold_analysis([]) == 0

    def test_overbought(self, rising_candles) -> None:
        """Test a steady rise is overbought."""
        assert overbought_oversold_analysis(rising_candles) == 1

    def test_oversold(self, falling_candles) -> None:
        """Test a steady fall is oversold."""
        assert overbought_oversold_analysis(falling_candles) == -1

    def test_warmup_is_neutral(self, make_candles) -> None:
        """Test RSI warm-up reads as neutral."""
        assert overbought_oversold_analysis(make_candles([100.0, 101.0, 102.0])) == 0
