"""
Unit tests for the single-family analyzers.

Tests:
- MAAnalyzer / RSIAnalyzer arrangement and threshold predicates
- ThreeRSIAnalyzer midline, MA and ADX context
- MACDAnalyzer histogram and signal crossings
- BBandAnalyzer band position and width
- ADXAnalyzer trend strength
- ATRAnalyzer volatility level and direction
- VolumeAnalyzer ratios, surges and declines
"""

from typing import List, Sequence

import pytest

from ta_engine.domain.analyzers import (
    ADXAnalyzer,
    ATRAnalyzer,
    BBandAnalyzer,
    MAAnalyzer,
    MACDAnalyzer,
    RSIAnalyzer,
    ThreeRSIAnalyzer,
    VolumeAnalyzer,
)
from ta_engine.domain.candle import Candle
from ta_engine.domain.candle_store import CandleStore

BASE_TS = 1_700_000_000_000
MINUTE_MS = 60_000


def _store(candles: Sequence[Candle]) -> CandleStore:
    return CandleStore(candles)


def _ranged_candles(ranges: Sequence[float]) -> List[Candle]:
    """Flat closes at 100 whose high - low (and true range) equals each range."""
    return [
        Candle(
            timestamp=BASE_TS + i * MINUTE_MS,
            open=100.0,
            high=100.0 + r / 2.0,
            low=100.0 - r / 2.0,
            close=100.0,
            volume=1000.0,
        )
        for i, r in enumerate(ranges)
    ]


class TestMAAnalyzer:
    """Tests for MAAnalyzer."""

    def test_uptrend_arrangement(self, rising_candles) -> None:
        """Test short MAs above long MAs in a rise."""
        analyzer = MAAnalyzer("sma", [5, 10, 20], _store(rising_candles))
        assert analyzer.is_ma_regular_arrangement(10)
        assert not analyzer.is_ma_reverse_arrangement(1)

    def test_downtrend_arrangement(self, falling_candles) -> None:
        """Test short MAs below long MAs in a fall."""
        analyzer = MAAnalyzer("sma", [5, 10, 20], _store(falling_candles))
        assert analyzer.is_ma_reverse_arrangement(10)
        assert not analyzer.is_ma_regular_arrangement(1)

    def test_get_ma(self, rising_candles) -> None:
        """Test the latest value of the MA at a key position."""
        analyzer = MAAnalyzer("sma", [5, 10, 20], _store(rising_candles))
        assert analyzer.get_ma(0) == pytest.approx(177.0)

    def test_rate_of_return(self, rising_candles) -> None:
        """Test close-vs-MA return bounds."""
        analyzer = MAAnalyzer("sma", [5, 10, 20], _store(rising_candles))
        assert analyzer.is_ma_greater_than_rate_of_return(2, 0.0, 5)
        assert analyzer.is_ma_less_than_rate_of_return(2, 0.1, 5)
        assert not analyzer.is_ma_less_than_rate_of_return(2, 0.0, 5)

    def test_ma_crossed(self, make_candles) -> None:
        """Test a short/long ordering flip on the latest candle."""
        analyzer = MAAnalyzer("sma", [2, 4], _store(make_candles([10.0, 10.0, 10.0, 10.0, 9.0])))
        assert not analyzer.is_ma_crossed(0, 1)
        analyzer.next(make_candles([10.0] * 5 + [20.0])[-1])
        assert analyzer.is_ma_crossed(0, 1)

    def test_golden_cross(self, make_candles) -> None:
        """Test regular arrangement starting after a non-regular stretch."""
        closes = [10.0] * 6 + [11.0]
        analyzer = MAAnalyzer("sma", [2, 4], _store(make_candles(closes)))
        assert analyzer.is_ma_regular_arrangement_golden_cross(1, 2)
        assert not analyzer.is_ma_reverse_arrangement_dead_cross(1, 2)


class TestRSIAnalyzer:
    """Tests for RSIAnalyzer."""

    def test_rise(self, rising_candles) -> None:
        """Test RSI saturates high in a steady rise."""
        analyzer = RSIAnalyzer(14, "ema", [5, 20], _store(rising_candles))
        assert analyzer.get_rsi() == pytest.approx(100.0)
        assert analyzer.is_rsi_greater_than(70.0, 10)
        assert not analyzer.is_rsi_less_than(30.0, 1)
        assert analyzer.is_ma_regular_arrangement(5)

    def test_fall(self, falling_candles) -> None:
        """Test RSI saturates low in a steady fall."""
        analyzer = RSIAnalyzer(14, "ema", [5, 20], _store(falling_candles))
        assert analyzer.get_rsi() == pytest.approx(0.0)
        assert analyzer.is_rsi_less_than(30.0, 10)

    def test_empty_store(self) -> None:
        """Test value access on an empty history raises IndexError."""
        analyzer = RSIAnalyzer(14, "ema", [5, 20], CandleStore())
        with pytest.raises(IndexError):
            analyzer.get_rsi()


class TestThreeRSIAnalyzer:
    """Tests for ThreeRSIAnalyzer."""

    def test_rise(self, rising_candles) -> None:
        """Test every RSI above 50, high above MA, strong ADX."""
        analyzer = ThreeRSIAnalyzer([9, 14, 25], "ema", 20, 14, _store(rising_candles))
        assert analyzer.is_rsi_all_greater_than_50(10)
        assert not analyzer.is_rsi_all_less_than_50(1)
        assert analyzer.is_candle_high_above_ma(10)
        assert not analyzer.is_candle_low_below_ma(1)
        assert analyzer.is_adx_greater_than_20(10)

    def test_fall(self, falling_candles) -> None:
        """Test every RSI below 50 and lows under the MA."""
        analyzer = ThreeRSIAnalyzer([9, 14, 25], "ema", 20, 14, _store(falling_candles))
        assert analyzer.is_rsi_all_less_than_50(10)
        assert analyzer.is_candle_low_below_ma(10)

    def test_saturated_rsis_are_not_arranged(self, rising_candles) -> None:
        """Test equal RSI values are neither regular nor reverse."""
        analyzer = ThreeRSIAnalyzer([9, 14, 25], "ema", 20, 14, _store(rising_candles))
        assert not analyzer.is_rsi_regular_arrangement(1)
        assert not analyzer.is_rsi_reverse_arrangement(1)

    def test_candle_comparators(self, rising_candles) -> None:
        """Test candle fields compared with the MA and with other values."""
        latest = ThreeRSIAnalyzer([9, 14, 25], "ema", 20, 14, _store(rising_candles)).items[0]
        assert latest.is_candle_greater_than_ma(lambda c: c.close)
        assert latest.is_candle_greater_than_ma(lambda c: c.low)
        assert not latest.is_candle_less_than_ma(lambda c: c.high)
        assert latest.is_candle_greater_than(lambda c: c.high, lambda d: d.candle.close)
        assert latest.is_candle_less_than(lambda c: c.low, lambda d: d.candle.open)


class TestMACDAnalyzer:
    """Tests for MACDAnalyzer."""

    def test_cross_above(self, make_candles) -> None:
        """Test MACD moves above its signal when a flat market turns up."""
        closes = [100.0] * 40 + [100.0 + i for i in range(1, 6)]
        analyzer = MACDAnalyzer(12, 26, 9, _store(make_candles(closes)))
        assert analyzer.is_macd_crossed_above_signal(5, 3)
        assert not analyzer.is_macd_crossed_below_signal(5, 3)
        assert analyzer.is_histogram_above_threshold(0.0, 5)
        assert not analyzer.is_histogram_below_threshold(0.0, 1)

    def test_cross_below(self, make_candles) -> None:
        """Test MACD moves below its signal when a flat market turns down."""
        closes = [100.0] * 40 + [100.0 - i for i in range(1, 6)]
        analyzer = MACDAnalyzer(12, 26, 9, _store(make_candles(closes)))
        assert analyzer.is_macd_crossed_below_signal(5, 3)
        assert analyzer.is_histogram_below_threshold(0.0, 5)

    def test_cross_needs_history(self, make_candles) -> None:
        """Test crossings need n + m items."""
        analyzer = MACDAnalyzer(12, 26, 9, _store(make_candles([100.0, 101.0])))
        assert not analyzer.is_macd_crossed_above_signal(2, 1)


class TestBBandAnalyzer:
    """Tests for BBandAnalyzer."""

    def test_breakout_up(self, make_candles) -> None:
        """Test a jump after a flat market closes above the upper band."""
        analyzer = BBandAnalyzer(20, 2.0, _store(make_candles([100.0] * 20 + [110.0])))
        assert analyzer.is_above_upper_band()
        assert analyzer.is_above_middle_band()
        assert not analyzer.is_below_lower_band()
        assert analyzer.is_band_width_sufficient()

    def test_breakout_down(self, make_candles) -> None:
        """Test a drop after a flat market closes below the lower band."""
        analyzer = BBandAnalyzer(20, 2.0, _store(make_candles([100.0] * 20 + [90.0])))
        assert analyzer.is_below_lower_band()
        assert analyzer.is_below_middle_band()

    def test_flat_market_width(self, make_candles) -> None:
        """Test zero-width bands are never sufficient."""
        analyzer = BBandAnalyzer(20, 2.0, _store(make_candles([100.0] * 25)))
        assert not analyzer.is_band_width_sufficient()
        assert analyzer.items[0].band_width() == 0.0

    def test_empty(self) -> None:
        """Test predicates on an empty history are False."""
        analyzer = BBandAnalyzer(20, 2.0, CandleStore())
        assert not analyzer.is_above_upper_band()
        assert not analyzer.is_below_lower_band()
        assert not analyzer.is_band_width_sufficient()


class TestADXAnalyzer:
    """Tests for ADXAnalyzer."""

    def test_strong_trend(self, rising_candles) -> None:
        """Test a steady rise is a very strong trend."""
        analyzer = ADXAnalyzer([14], _store(rising_candles))
        assert analyzer.get_adx(14) == pytest.approx(100.0)
        assert analyzer.is_strong_trend(5)
        assert analyzer.is_very_strong_trend(5)
        assert not analyzer.is_weak_trend(1)

    def test_constant_adx_is_flat(self, rising_candles) -> None:
        """Test a saturated ADX neither strengthens nor weakens."""
        analyzer = ADXAnalyzer([14], _store(rising_candles))
        assert not analyzer.is_trend_strengthening(14, 3)
        assert not analyzer.is_trend_weakening(14, 3)
        assert not analyzer.is_trend_reversal(14, 2, 2)

    def test_warmup_is_weak(self, make_candles) -> None:
        """Test ADX 0 during warm-up reads as weak."""
        analyzer = ADXAnalyzer([14], _store(make_candles([100.0 + i for i in range(10)])))
        assert analyzer.is_weak_trend(10)

    def test_empty(self) -> None:
        """Test an empty history reports ADX 0."""
        analyzer = ADXAnalyzer([14], CandleStore())
        assert analyzer.get_adx(14) == 0.0
        assert not analyzer.is_strong_trend(1)


class TestATRAnalyzer:
    """Tests for ATRAnalyzer."""

    @pytest.fixture
    def expanding(self) -> ATRAnalyzer:
        """Ten bars of range 2, then ranges 4, 6, 8, 10."""
        return ATRAnalyzer([3], _store(_ranged_candles([2.0] * 10 + [4.0, 6.0, 8.0, 10.0])))

    def test_bands(self, expanding) -> None:
        """Test bands around the candle midpoint."""
        atr = expanding.items[0].get_atr(3)
        candle = expanding.items[0].candle
        assert expanding.calculate_upper_band(candle, 3, 2.0) == pytest.approx(100.0 + 2.0 * atr)
        assert expanding.calculate_lower_band(candle, 3, 2.0) == pytest.approx(100.0 - 2.0 * atr)
        assert expanding.is_above_threshold(3, 5.0)

    def test_expanding(self, expanding) -> None:
        """Test the latest ATR exceeds the mean of the previous items."""
        assert expanding.is_volatility_expanding(3, 3)
        assert not expanding.is_volatility_contracting(3, 3)
        assert not expanding.is_volatility_expanding(3, 20)

    def test_direction(self, expanding) -> None:
        """Test strictly rising ATR over the last four items."""
        assert expanding.is_volatility_increasing(4, 3)
        assert expanding.is_volatility_increasing(5, 3)
        assert not expanding.is_volatility_increasing(6, 3)
        assert not expanding.is_volatility_increasing(1, 3)
        assert not expanding.is_volatility_decreasing(2, 3)

    def test_direction_signal(self, expanding) -> None:
        """Test a rise that follows a flat stretch."""
        assert expanding.is_volatility_increasing_signal(4, 3, 3)
        assert expanding.is_volatility_increasing_signal(2, 2, 3, p=2)
        assert not expanding.is_volatility_increasing_signal(2, 2, 3, p=1)
        assert not expanding.is_volatility_decreasing_signal(4, 3, 3)

    def test_threshold_signals(self, expanding) -> None:
        """Test ATR crossing a fixed level."""
        assert expanding.is_high_volatility(2, 3, 4.0)
        assert expanding.is_atr_above_threshold_signal(3, 3, 3, 3.0)
        assert expanding.is_high_volatility_signal(3, 3, 3, 3.0)
        assert not expanding.is_low_volatility_signal(3, 3, 3, 3.0)
        assert expanding.is_low_volatility(3, 3, 2.5, p=4)


class TestVolumeAnalyzer:
    """Tests for VolumeAnalyzer."""

    def test_default_periods(self, sample_store) -> None:
        """Test the default averaging periods."""
        analyzer = VolumeAnalyzer(None, sample_store)
        assert analyzer.volumes_builder.keys == (10, 20, 50)

    def test_surge(self, make_candles) -> None:
        """Test a jump to 3.6x the average after steady volume."""
        candles = make_candles([100.0] * 11, volumes=[1000.0] * 10 + [5000.0])
        analyzer = VolumeAnalyzer([10], _store(candles))
        assert analyzer.is_volume_surge(10, 2.0)
        assert analyzer.is_volume_significantly_above(2.0, 1)
        assert analyzer.is_volume_above_average(1)
        assert not analyzer.is_volume_decline(10, 0.5)

    def test_decline(self, make_candles) -> None:
        """Test a collapse below half of the previous ratio."""
        candles = make_candles([100.0] * 12, volumes=[1000.0] * 10 + [5000.0, 100.0])
        analyzer = VolumeAnalyzer([10], _store(candles))
        assert analyzer.is_volume_decline(10, 0.5)
        assert analyzer.is_volume_below_average(1)
        assert not analyzer.is_volume_surge(10, 2.0)

    def test_increasing_volume_in_uptrend(self, make_candles) -> None:
        """Test rising ratios across bullish candles."""
        closes = [100.0 + i for i in range(13)]
        candles = make_candles(closes, volumes=[1000.0] * 10 + [2000.0, 3000.0, 4000.0])
        analyzer = VolumeAnalyzer([10], _store(candles))
        assert analyzer.is_increasing_volume_in_uptrend(10, 3)
        assert analyzer.is_bullish_with_increased_volume(10, 3)
        assert not analyzer.is_bearish_with_increased_volume(10, 1)
        assert not analyzer.is_decreasing_volume_in_downtrend(10, 3)

    def test_decreasing_volume_in_downtrend(self, make_candles) -> None:
        """Test falling ratios across bearish candles."""
        closes = [200.0 - i for i in range(13)]
        candles = make_candles(closes, volumes=[1000.0] * 10 + [4000.0, 3000.0, 2000.0])
        analyzer = VolumeAnalyzer([10], _store(candles))
        assert analyzer.is_decreasing_volume_in_downtrend(10, 3)
        assert analyzer.is_bearish_with_increased_volume(10, 3)
