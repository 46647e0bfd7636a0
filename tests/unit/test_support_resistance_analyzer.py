"""
Unit tests for SupportResistanceAnalyzer.

Tests:
- Pivot level detection and confidence
- Nearest levels and distances
- Bounces, rejections and breakouts
"""

from typing import List

import pytest

from ta_engine.domain.analyzers import (
    LevelType,
    SupportResistanceAnalyzer,
    SupportResistanceLevel,
)
from ta_engine.domain.analyzers.support_resistance_analyzer import (
    identify_levels,
    level_confidence,
    nearest_levels,
)
from ta_engine.domain.candle import Candle
from ta_engine.domain.candle_store import CandleStore

BASE_TS = 1_700_000_000_000
MINUTE_MS = 60_000

# (high, low) oldest first: swing highs 110 / 109.8 and swing lows 90 / 90.3
RANGES = [
    (105.0, 95.0),
    (106.0, 96.0),
    (110.0, 94.0),
    (106.0, 92.0),
    (104.0, 90.0),
    (105.0, 93.0),
    (107.0, 95.0),
    (109.8, 96.0),
    (106.0, 94.0),
    (104.0, 90.3),
    (105.0, 95.0),
    (103.0, 97.0),
    (102.0, 98.0),
]


def _ranged(rows) -> List[Candle]:
    return [
        Candle(timestamp=BASE_TS + i * MINUTE_MS, open=100.0, high=high, low=low, close=100.0, volume=1000.0)
        for i, (high, low) in enumerate(rows)
    ]


@pytest.fixture
def ranging() -> SupportResistanceAnalyzer:
    return SupportResistanceAnalyzer(CandleStore(_ranged(RANGES)))


class TestLevels:
    """Tests for level detection."""

    def test_identify(self) -> None:
        """Test each swing pivot is confirmed by its twin."""
        levels = identify_levels(list(reversed(_ranged(RANGES))), 0.5, 2)
        resistances = sorted(lv.price for lv in levels if lv.level_type is LevelType.RESISTANCE)
        supports = sorted(lv.price for lv in levels if lv.level_type is LevelType.SUPPORT)
        assert resistances == [109.8, 110.0]
        assert supports == [90.0, 90.3]
        assert all(lv.touch_count == 2 for lv in levels)

    def test_min_touch_count(self) -> None:
        assert identify_levels(list(reversed(_ranged(RANGES))), 0.5, 3) == []

    def test_too_few_candles(self, make_candles) -> None:
        """Test fewer than five candles have no pivots."""
        analyzer = SupportResistanceAnalyzer(CandleStore(make_candles([100.0, 101.0, 99.0, 100.0])))
        assert analyzer.items[0].levels == ()
        assert not analyzer.is_above_support(1)

    def test_confidence(self) -> None:
        assert level_confidence(2, 0, 10) == pytest.approx(0.7)
        assert level_confidence(5, 0, 10) == 1.0
        assert level_confidence(2, 5, 10) == pytest.approx(0.45)

    def test_nearest(self) -> None:
        """Test levels at the price itself are neither support nor resistance."""
        levels = [
            SupportResistanceLevel(95.0, 2, LevelType.SUPPORT, 0, 0.5),
            SupportResistanceLevel(100.0, 2, LevelType.BOTH, 0, 0.5),
            SupportResistanceLevel(105.0, 2, LevelType.RESISTANCE, 0, 0.5),
        ]
        support, resistance = nearest_levels(100.0, levels)
        assert support.price == 95.0
        assert resistance.price == 105.0


class TestNearestLevels:
    """Tests on the latest item of a ranging market."""

    def test_nearest(self, ranging) -> None:
        latest = ranging.items[0]
        assert len(latest.levels) == 4
        assert latest.nearest_support.price == 90.3
        assert latest.nearest_resistance.price == 109.8
        assert latest.nearest_support.last_touch == 3
        assert latest.nearest_support.confidence == pytest.approx(0.2 + 0.5 * (1.0 - 3.0 / 13.0))
        assert latest.nearest_resistance.confidence == pytest.approx(0.2 + 0.5 * (1.0 - 5.0 / 13.0))

    def test_position(self, ranging) -> None:
        latest = ranging.items[0]
        assert latest.is_above_support()
        assert latest.is_below_resistance()
        assert latest.distance_to_nearest_support() == pytest.approx(9.7)
        assert latest.is_near_support(10.0)
        assert not latest.is_near_support(5.0)

    def test_strong_levels(self, ranging) -> None:
        latest = ranging.items[0]
        assert {lv.price for lv in latest.get_strong_support_levels(2)} == {90.0, 90.3}
        assert latest.get_strong_support_levels(3) == []
        assert not ranging.is_near_strong_support(20.0)


class TestReactions:
    """Tests for bounces, rejections and breakouts."""

    def test_support_bounce(self, ranging) -> None:
        """Test the bounce window must reach back to the touching low."""
        assert ranging.is_support_bounce(4)
        assert not ranging.is_support_bounce(3)

    def test_resistance_rejection(self, ranging) -> None:
        assert ranging.is_resistance_rejection(6)
        assert not ranging.is_resistance_rejection(5)

    def test_no_breakout_inside_range(self, ranging) -> None:
        assert not ranging.is_resistance_breakout()
        assert not ranging.is_support_breakdown()

    def test_resistance_breakout(self, ranging) -> None:
        """Test a close above the previous nearest resistance."""
        ranging.next(Candle(BASE_TS + 13 * MINUTE_MS, 108.5, 112.0, 108.0, 111.0, 1000.0))
        assert ranging.is_resistance_breakout()
        assert not ranging.is_support_breakdown()

    def test_support_breakdown(self, ranging) -> None:
        ranging.next(Candle(BASE_TS + 13 * MINUTE_MS, 91.0, 91.5, 88.0, 89.0, 1000.0))
        assert ranging.is_support_breakdown()
        assert not ranging.is_resistance_breakout()

    def test_single_item(self, make_candles) -> None:
        analyzer = SupportResistanceAnalyzer(CandleStore(make_candles([100.0])))
        assert not analyzer.is_support_breakdown()
        assert not analyzer.is_support_bounce(1)
