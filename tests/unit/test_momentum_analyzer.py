"""
Unit tests for MomentumAnalyzer and its oscillator helpers.

Tests:
- Oscillator values on steady rising, falling and flat markets
- Direction, zone and state classification
- Divergence, persistence, stability and RSI extremes
- Window and breakthrough checks on the analyzer
"""

import pytest

from ta_engine.domain.analyzers import (
    MomentumAnalyzer,
    MomentumDirection,
    MomentumState,
    OverBoughtOverSold,
)
from ta_engine.domain.analyzers.momentum_analyzer import (
    DivergenceType,
    MomentumIndicators,
    analyze_divergence,
    momentum_direction,
    momentum_persistence,
    momentum_stability,
    momentum_state,
    overbought_oversold,
    rsi_extremes,
)
from ta_engine.domain.candle_store import CandleStore


@pytest.fixture
def rising(rising_candles) -> MomentumAnalyzer:
    return MomentumAnalyzer(CandleStore(rising_candles))


@pytest.fixture
def falling(falling_candles) -> MomentumAnalyzer:
    return MomentumAnalyzer(CandleStore(falling_candles))


class TestRisingMarket:
    """Tests on 80 steadily rising closes."""

    def test_indicators(self, rising) -> None:
        """Test each oscillator against its closed-form value."""
        ind = rising.items[0].indicators
        assert ind.rsi == pytest.approx(100.0)
        assert ind.stoch_k == pytest.approx(93.75)
        assert ind.stoch_d == pytest.approx(93.75)
        assert ind.williams_r == pytest.approx(-6.25)
        assert ind.roc == pytest.approx(9.0 / 170.0 * 100.0)
        assert ind.momentum == pytest.approx(9.0)
        assert ind.cci == pytest.approx(9.5 / (0.015 * 5.0))
        assert ind.ultimate_oscillator == pytest.approx(200.0 / 3.0)

    def test_analysis(self, rising) -> None:
        analysis = rising.items[0].analysis
        assert analysis.direction is MomentumDirection.STRONG_POSITIVE
        assert analysis.zone is OverBoughtOverSold.OVERBOUGHT
        assert analysis.state is MomentumState.STABLE
        assert analysis.strength == pytest.approx(0.7494, abs=1e-3)
        assert analysis.persistence == pytest.approx(1.0)
        assert analysis.stability == pytest.approx(1.0)
        assert analysis.divergence.divergence_type is DivergenceType.NONE

    def test_consistency(self, rising) -> None:
        """Test consistency needs as many previous directions as the lookback."""
        latest = rising.items[0]
        assert latest.calculate_momentum_consistency(10) == pytest.approx(1.0)
        assert latest.calculate_momentum_consistency(30) == 0.5
        assert latest.calculate_momentum_consistency(0) == 0.5

    def test_signals(self, rising) -> None:
        assert rising.is_strong_positive_momentum(5)
        assert not rising.is_strong_negative_momentum(1)
        assert rising.is_overbought(5)
        assert rising.is_strong_momentum_signal()
        assert rising.is_persistent_momentum_signal()
        assert not rising.is_momentum_divergence_signal()
        assert not rising.is_momentum_reversal_signal()

    def test_breakthrough_needs_history(self, rising) -> None:
        """Test a condition that held all along is not a breakthrough."""
        assert not rising.is_strong_positive_momentum_signal(1, 3)
        assert not rising.is_overbought_signal(1, 3, p=len(rising))


class TestFallingMarket:
    """Tests on 80 steadily falling closes."""

    def test_indicators(self, falling) -> None:
        ind = falling.items[0].indicators
        assert ind.rsi == pytest.approx(0.0)
        assert ind.stoch_k == pytest.approx(6.25)
        assert ind.williams_r == pytest.approx(-93.75)
        assert ind.ultimate_oscillator == pytest.approx(100.0 / 3.0)

    def test_analysis(self, falling) -> None:
        analysis = falling.items[0].analysis
        assert analysis.direction is MomentumDirection.STRONG_NEGATIVE
        assert analysis.zone is OverBoughtOverSold.OVERSOLD
        assert analysis.strength > 0.7
        assert falling.is_strong_negative_momentum(5)
        assert falling.is_oversold(3)


class TestFlatMarket:
    """Tests on 40 flat closes."""

    def test_neutral(self, make_candles) -> None:
        analyzer = MomentumAnalyzer(CandleStore(make_candles([100.0] * 40)))
        latest = analyzer.items[0]
        assert latest.indicators.stoch_k == pytest.approx(50.0)
        assert latest.indicators.williams_r == pytest.approx(-50.0)
        assert latest.indicators.cci == 0.0
        assert latest.indicators.ultimate_oscillator == pytest.approx(50.0)
        assert latest.analysis.direction is MomentumDirection.NEUTRAL
        assert latest.analysis.zone is OverBoughtOverSold.NEUTRAL

    def test_empty(self) -> None:
        """Test latest-item checks are False without history."""
        analyzer = MomentumAnalyzer(CandleStore([]))
        assert not analyzer.is_strong_momentum_signal()
        assert not analyzer.is_persistent_momentum_signal()
        assert not analyzer.is_overbought(1)


class TestClassification:
    """Tests for the module-level classifiers."""

    def test_direction_votes(self) -> None:
        """Test four agreeing oscillators give a plain direction."""
        ind = MomentumIndicators(rsi=65.0, stoch_k=65.0, williams_r=-30.0, momentum=1.0)
        assert momentum_direction(ind) is MomentumDirection.POSITIVE
        assert momentum_direction(MomentumIndicators()) is MomentumDirection.NEUTRAL

    def test_zone_votes(self) -> None:
        ind = MomentumIndicators(rsi=85.0, stoch_k=85.0, williams_r=-10.0, cci=250.0)
        assert overbought_oversold(ind) is OverBoughtOverSold.EXTREME_OVERBOUGHT
        assert overbought_oversold(MomentumIndicators(rsi=15.0, stoch_k=15.0)) is OverBoughtOverSold.OVERSOLD

    @pytest.mark.parametrize(
        "strength, previous, expected",
        [
            (0.6, 0.5, MomentumState.ACCELERATING),
            (0.4, 0.5, MomentumState.DECELERATING),
            (0.51, 0.5, MomentumState.STABLE),
            (0.54, 0.5, MomentumState.REVERTING),
        ],
    )
    def test_state(self, strength, previous, expected) -> None:
        assert momentum_state(strength, previous) is expected


class TestHistoryMeasures:
    """Tests for divergence, persistence, stability and extremes."""

    def test_bearish_divergence(self) -> None:
        """Test a higher close with a lower RSI over ten values."""
        closes = [110.0] + [105.0] * 8 + [100.0]
        rsis = [40.0] + [50.0] * 8 + [60.0]
        divergence = analyze_divergence(closes, rsis)
        assert divergence.divergence_type is DivergenceType.BEARISH
        assert divergence.rsi_divergence
        assert divergence.strength == 1.0
        assert divergence.confidence == 0.7

    def test_bullish_divergence(self) -> None:
        closes = [100.0] + [105.0] * 8 + [110.0]
        rsis = [60.0] + [50.0] * 8 + [40.0]
        assert analyze_divergence(closes, rsis).divergence_type is DivergenceType.BULLISH

    def test_divergence_needs_window(self) -> None:
        assert analyze_divergence([110.0, 100.0], [40.0, 60.0]).divergence_type is DivergenceType.NONE

    def test_persistence(self) -> None:
        same = [MomentumDirection.POSITIVE] * 5
        alternating = [MomentumDirection.POSITIVE, MomentumDirection.NEGATIVE] * 3
        assert momentum_persistence(same) == 1.0
        assert momentum_persistence(alternating) == 0.0
        assert momentum_persistence(same[:4]) == 0.5

    def test_stability(self) -> None:
        assert momentum_stability([50.0] * 5) == 1.0
        assert momentum_stability([50.0] * 4) == 0.5
        assert momentum_stability([0.0, 100.0] * 3) == 0.0

    def test_rsi_extremes(self) -> None:
        """Test local peaks above 70 and troughs below 30."""
        assert rsi_extremes([50.0, 60.0, 75.0, 65.0, 55.0, 25.0, 35.0, 40.0]) == ((2, 75.0), (5, 25.0))
