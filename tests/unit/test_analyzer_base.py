"""
Unit tests for the Analyzer base class.

Tests:
- History ordering and max_history cap
- Value access errors
- Window predicates (is_all, break-through, index variants)
- Signal and pattern detection
- Volume spike
"""

import pytest

from ta_engine.domain.analyzers.base import Analyzer, AnalyzerData
from ta_engine.domain.candle_store import CandleStore
from ta_engine.domain.exceptions import ConfigurationError, InsufficientDataError


class CloseAnalyzer(Analyzer[AnalyzerData]):
    """Analyzer whose items carry only the candle."""

    def next_data(self, candle):
        return AnalyzerData(candle)


def _close(d: AnalyzerData) -> float:
    return d.candle.close


@pytest.fixture
def analyzer(make_candles) -> CloseAnalyzer:
    """Closes 1..10, so items[i].close == 10 - i."""
    a = CloseAnalyzer()
    a.init(make_candles([float(c) for c in range(1, 11)]))
    return a


class TestHistory:
    """Tests for history maintenance."""

    def test_newest_first(self, analyzer) -> None:
        """Test index 0 is the latest candle."""
        assert len(analyzer) == 10
        assert analyzer.items[0].candle.close == 10.0
        assert analyzer.items[9].candle.close == 1.0
        assert [d.candle.close for d in analyzer][:2] == [10.0, 9.0]

    def test_init_from_storage(self, sample_store) -> None:
        """Test replay from a store in time order."""
        a = CloseAnalyzer()
        a.init_from_storage(sample_store)
        assert len(a) == len(sample_store)
        assert a.items[0].candle == sample_store.get(0)

    def test_max_history(self, make_candles) -> None:
        """Test the oldest items are dropped beyond max_history."""
        a = CloseAnalyzer(max_history=3)
        a.init(make_candles([float(c) for c in range(1, 11)]))
        assert len(a) == 3
        assert [d.candle.close for d in a] == [10.0, 9.0, 8.0]

    def test_invalid_max_history(self) -> None:
        """Test a non-positive cap is rejected."""
        with pytest.raises(ConfigurationError):
            CloseAnalyzer(max_history=0)

    def test_repr(self, analyzer) -> None:
        """Test repr for empty and filled analyzers."""
        assert repr(CloseAnalyzer()) == "CloseAnalyzer(empty)"
        assert "items=10" in repr(analyzer)


class TestValueAccess:
    """Tests for get, get_value and get_rate_of_return."""

    def test_get_out_of_range(self, analyzer) -> None:
        """Test get() returns None outside the history."""
        assert analyzer.get(10) is None
        assert analyzer.get(-1) is None

    def test_get_value(self, analyzer) -> None:
        """Test value selection at an index."""
        assert analyzer.get_value(2, _close) == 8.0

    def test_get_value_out_of_range(self, analyzer) -> None:
        """Test InsufficientDataError (an IndexError) past the history."""
        with pytest.raises(InsufficientDataError) as exc_info:
            analyzer.get_value(10, _close)
        assert exc_info.value.required == 11
        assert exc_info.value.available == 10
        with pytest.raises(IndexError):
            CloseAnalyzer().get_value(0, _close)

    def test_rate_of_return(self, analyzer) -> None:
        """Test (close - value) / value."""
        assert analyzer.get_rate_of_return(0, lambda d: 5.0) == pytest.approx(1.0)


class TestWindowPredicates:
    """Tests for is_all and break-through detection."""

    def test_is_all(self, analyzer) -> None:
        """Test window coverage and offsets."""
        assert analyzer.is_all(lambda d: d.candle.close > 5.0, 5)
        assert not analyzer.is_all(lambda d: d.candle.close > 5.0, 6)
        assert analyzer.is_all(lambda d: d.candle.close < 9.0, 3, p=2)

    def test_is_all_short_history(self, analyzer) -> None:
        """Test windows longer than the history are False."""
        assert not analyzer.is_all(lambda d: True, 11)
        assert not analyzer.is_all(lambda d: True, 5, p=6)

    def test_break_through(self, analyzer) -> None:
        """Test the condition holds for n items and failed for the m before."""
        above_seven = lambda d: d.candle.close > 7.0
        assert analyzer.is_break_through_by_satisfying(above_seven, 3, 2)
        assert not analyzer.is_break_through_by_satisfying(above_seven, 2, 2)
        assert not analyzer.is_break_through_by_satisfying(above_seven, 4, 2)
        assert not analyzer.is_break_through_by_satisfying(above_seven, 3, 8)

    def test_by_index(self, analyzer) -> None:
        """Test index predicates comparing neighbours."""
        items = analyzer.items
        rising = lambda i: items[i].candle.close > items[i + 1].candle.close
        assert analyzer.is_all_by_index(rising, 9)
        assert not analyzer.is_all_by_index(rising, 11)

        above_seven = lambda i: items[i].candle.close > 7.0
        assert analyzer.is_break_through_by_index(above_seven, 3, 2)
        assert not analyzer.is_break_through_by_index(above_seven, 2, 2)


class TestSignalDetection:
    """Tests for buy/sell detection, patterns and volume spikes."""

    def test_detect_buy_signal(self, analyzer) -> None:
        """Test the first index reaching the threshold is returned."""
        score = lambda d: d.candle.close / 10.0
        assert analyzer.detect_buy_signal(score, 5, threshold=0.8) == 0
        assert analyzer.detect_buy_signal(score, 5, p=1, threshold=0.85) == 1
        assert analyzer.detect_buy_signal(score, 3, p=3, threshold=0.8) is None

    def test_detect_sell_signal(self, analyzer) -> None:
        """Test sell detection on an inverted score."""
        score = lambda d: 1.0 - d.candle.close / 10.0
        assert analyzer.detect_sell_signal(score, 10, threshold=0.5) == 5
        assert analyzer.detect_sell_signal(score, 20, threshold=0.5) is None

    def test_detect_pattern(self, analyzer) -> None:
        """Test every condition must hold somewhere in the window."""
        conditions = [lambda d: d.candle.close == 9.0, lambda d: d.candle.close == 6.0]
        assert analyzer.detect_pattern(conditions, 5)
        assert not analyzer.detect_pattern(conditions, 3)

    def test_volume_spike(self, make_candles) -> None:
        """Test recent volume against the older average."""
        a = CloseAnalyzer()
        a.init(make_candles([1.0] * 10, volumes=[10.0] * 9 + [50.0]))
        assert a.is_volume_spike(1)
        assert not a.is_volume_spike(1, threshold=6.0)
        assert not a.is_volume_spike(10)

    def test_volume_spike_offset(self, make_candles) -> None:
        """Test the window can start in the past."""
        a = CloseAnalyzer()
        a.init(make_candles([1.0] * 10, volumes=[10.0] * 8 + [50.0, 10.0]))
        assert not a.is_volume_spike(1)
        assert a.is_volume_spike(1, p=1)


def test_store_replay_matches_init(sample_candles) -> None:
    """Analyzers replaying a store see the same items as direct init."""
    direct = CloseAnalyzer()
    direct.init(sample_candles)
    replayed = CloseAnalyzer()
    replayed.init_from_storage(CandleStore(sample_candles))
    assert list(direct) == list(replayed)
