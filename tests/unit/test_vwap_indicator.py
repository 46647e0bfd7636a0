"""
Unit tests for the VWAP builder.

Tests:
- Warm-up reports the current typical price
- Rolling and cumulative windows
- Zero-volume windows
- Snapshot helpers and key parsing
"""

import pytest

from ta_engine.domain.candle import Candle
from ta_engine.domain.exceptions import IndicatorConfigError
from ta_engine.domain.indicators.volume.vwap import (
    VWAP,
    VWAPBuilder,
    VWAPParams,
    VWAPsBuilderFactory,
)

BASE_TS = 1_700_000_000_000
MINUTE_MS = 60_000


def _bar(i: int, typical: float, volume: float) -> Candle:
    """Candle whose typical price is exactly ``typical``."""
    return Candle(
        timestamp=BASE_TS + i * MINUTE_MS,
        open=typical,
        high=typical + 1.0,
        low=typical - 1.0,
        close=typical,
        volume=volume,
    )


@pytest.fixture
def bars():
    """Typical prices 10, 12, 14, 16 with volumes 100, 300, 100, 100."""
    return [
        _bar(0, 10.0, 100.0),
        _bar(1, 12.0, 300.0),
        _bar(2, 14.0, 100.0),
        _bar(3, 16.0, 100.0),
    ]


class TestVWAPBuilder:
    """Tests for VWAPBuilder."""

    def test_warmup_returns_typical_price(self, bars) -> None:
        """Test fewer than period candles report the latest typical price."""
        builder = VWAPBuilder(3)
        assert builder.next(bars[0]).value == pytest.approx(10.0)
        assert builder.next(bars[1]).value == pytest.approx(12.0)

    def test_rolling_window(self, bars) -> None:
        """Test the weighted average over the last period candles."""
        builder = VWAPBuilder(3)
        values = [builder.next(bar).value for bar in bars]
        assert values[2] == pytest.approx(6000.0 / 500.0)
        assert values[3] == pytest.approx(6600.0 / 500.0)

    def test_cumulative(self, bars) -> None:
        """Test period 0 accumulates every candle since reset."""
        builder = VWAPBuilder(0)
        assert builder.next(bars[0]).value == pytest.approx(10.0)
        assert builder.next(bars[1]).value == pytest.approx(4600.0 / 400.0)

    def test_build_matches_next(self, bars) -> None:
        """Test build() equals replaying next()."""
        stepper = VWAPBuilder(3)
        last = None
        for bar in bars:
            last = stepper.next(bar)
        assert VWAPBuilder(3).build(bars) == last

    def test_reset_starts_new_session(self, bars) -> None:
        """Test reset() clears the cumulative sums."""
        builder = VWAPBuilder(0)
        builder.build(bars)
        builder.reset()
        assert builder.next(bars[3]).value == pytest.approx(16.0)

    def test_zero_volume(self) -> None:
        """Test a window without volume reports 0.0."""
        builder = VWAPBuilder(0)
        vwap = builder.build([_bar(0, 10.0, 0.0), _bar(1, 12.0, 0.0)])
        assert vwap.value == 0.0
        assert vwap.price_to_vwap_percent(12.0) == 0.0

    def test_zero_volume_after_window_slides(self) -> None:
        """Test the rolling window drops back to 0.0 once its volume leaves."""
        candles = [_bar(0, 10.0, 100.0), _bar(1, 11.0, 0.0), _bar(2, 12.0, 0.0)]
        assert VWAPBuilder(2).build(candles).value == 0.0

    def test_empty(self) -> None:
        """Test build([]) returns a zero VWAP."""
        assert VWAPBuilder(20).build([]) == VWAP(VWAPParams(20), 0.0)


class TestVWAPSnapshot:
    """Tests for VWAP helpers."""

    def test_price_position(self) -> None:
        vwap = VWAP(VWAPParams(0), 100.0)
        assert vwap.is_price_above(101.0)
        assert vwap.is_price_below(99.0)
        assert not vwap.is_price_above(100.0)
        assert vwap.price_to_vwap_percent(110.0) == pytest.approx(10.0)

    def test_str(self) -> None:
        assert str(VWAP(VWAPParams(20), 101.256)) == "VWAP(20: 101.26)"


class TestVWAPsBuilderFactory:
    """Tests for VWAP key handling."""

    def test_presets(self) -> None:
        assert VWAPsBuilderFactory.build_default().keys == (VWAPParams(0),)
        assert VWAPsBuilderFactory.build_common().keys == (VWAPParams(0), VWAPParams(20), VWAPParams(50))

    def test_parse_keys(self) -> None:
        """Test ints, mappings and params are accepted."""
        builder = VWAPsBuilderFactory.build([0, {"period": 20}, VWAPParams(50)])
        assert builder.keys == (VWAPParams(0), VWAPParams(20), VWAPParams(50))

    @pytest.mark.parametrize("raw", [-1, "20", [20]])
    def test_invalid_keys(self, raw) -> None:
        with pytest.raises(IndicatorConfigError):
            VWAPsBuilderFactory.build([raw])
