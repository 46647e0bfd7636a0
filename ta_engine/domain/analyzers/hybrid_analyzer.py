"""
Hybrid analyzer: one moving average, MACD and RSI combined into scores.

Base scores are weighted sums of sub-signals clamped to [0, 1].

Buy strength (needs 3 items):
    close above MA            0.25 * 0.6, plus 0.25 * 0.4 if the MA is rising
    two rising closes         0.10
    MACD crossed above signal 0.30
    positive histogram        0.15 * min(hist / |close|, 0.05) * 20,
                              plus 0.15 * 0.5 if the histogram grew
    RSI below rsi_lower       0.20 * (1 - rsi / rsi_lower)
    else RSI < 45 and rising  0.20 * 0.5 * (45 - rsi) / 15

Sell strength mirrors it with MA 0.20, cross 0.25, RSI measured above
rsi_upper (or above 55 and falling), plus a profit term worth 0.10 (> 7%),
0.07 (> 3%) or 0.08 (< -5%).

Enhanced scores (need 5 items) multiply the base score by market
condition, momentum, volatility, volume and consensus factors.

Every score accepts an ``at`` history index so window predicates can
evaluate it at past points as well as on the latest item.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence

from ...utils.logging_setup import get_logger
from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.momentum.macd import MACD, MACDBuilder
from ..indicators.momentum.rsi import RSI, RSIBuilder
from ..indicators.trend.ma import MAType, MovingAverage
from ..indicators.trend.moving_averages import MAsBuilderFactory
from .base import Analyzer, AnalyzerData

if TYPE_CHECKING:
    from config.models import HybridConfig

logger = get_logger(__name__)

RSI_OVERSOLD_THRESHOLD = 30.0
RSI_OVERBOUGHT_THRESHOLD = 70.0
RSI_NEUTRAL_LOWER = 30.0
RSI_NEUTRAL_UPPER = 70.0
RSI_BUY_RECOVERY_LEVEL = 45.0
RSI_SELL_FADE_LEVEL = 55.0
RSI_RECOVERY_SPAN = 15.0

SIGNAL_STRENGTH_WEAK = 0.5
SIGNAL_STRENGTH_MODERATE = 0.6
SIGNAL_STRENGTH_STRONG = 0.7
SIGNAL_STRENGTH_HALF = 0.5
MA_SLOPE_SHARE = 0.4
HISTOGRAM_CAP = 0.05
HISTOGRAM_SCALE = 20.0

VOLUME_FACTOR_HIGH = 1.5
VOLUME_FACTOR_LOW = 0.8
SCORE_RANGE_MIN = 0.5

MARKET_WINDOW = 10
MOMENTUM_WINDOW = 5


class MarketCondition(str, Enum):
    """Overall market assessment from the combined factors."""

    VERY_GOOD = "very_good"
    GOOD = "good"
    NORMAL = "normal"
    CAUTION = "caution"
    DANGEROUS = "dangerous"
    INSUFFICIENT_DATA = "insufficient_data"


class SignalType(str, Enum):
    BUY = "buy"
    SELL = "sell"

    @classmethod
    def parse(cls, value: "SignalType | str") -> "SignalType":
        """Case-insensitive lookup; unknown names raise ValueError."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class HybridAnalyzerData(AnalyzerData):
    ma: MovingAverage
    macd: MACD
    rsi: RSI

    def __str__(self) -> str:
        return (
            f"candle={self.candle}, ma={self.ma.value:.2f}, "
            f"macd={self.macd}, rsi={self.rsi.value:.2f}"
        )


def clamp_unit(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def values_volatility(values: Sequence[float]) -> float:
    """Population std normalised by max(|mean|, 1); 0.0 for fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance) / max(abs(mean), 1.0)


def volatility_adjustment_factor(volatility: float) -> float:
    if volatility > 0.05:
        return SIGNAL_STRENGTH_STRONG
    if volatility > 0.03:
        return 0.85
    if volatility > 0.01:
        return 1.0
    return 1.2


def volume_adjustment_factor(volume_factor: float) -> float:
    if volume_factor > VOLUME_FACTOR_HIGH:
        return 1.2
    if volume_factor < VOLUME_FACTOR_LOW:
        return 0.8
    return 1.0


def _histogram_factor(histogram: float, close: float) -> float:
    if close == 0.0:
        return 0.0
    return min(min(abs(histogram) / abs(close), HISTOGRAM_CAP) * HISTOGRAM_SCALE, 1.0)


class HybridAnalyzer(Analyzer[HybridAnalyzerData]):
    """
    MA + MACD + RSI analyzer with composite signal scoring.

    Args:
        ma_type: Moving average kind.
        ma_period: Moving average period.
        macd_fast_period: MACD fast EMA period.
        macd_slow_period: MACD slow EMA period.
        macd_signal_period: MACD signal EMA period.
        rsi_period: RSI period.
        storage: Candles to replay on construction.
        max_history: Optional history cap.
        rsi_lower: Default oversold bound for buy scoring.
        rsi_upper: Default overbought bound for sell scoring.
    """

    def __init__(
        self,
        ma_type: "MAType | str",
        ma_period: int,
        macd_fast_period: int,
        macd_slow_period: int,
        macd_signal_period: int,
        rsi_period: int,
        storage: CandleStore,
        max_history: Optional[int] = None,
        rsi_lower: float = RSI_OVERSOLD_THRESHOLD,
        rsi_upper: float = RSI_OVERBOUGHT_THRESHOLD,
    ):
        super().__init__(max_history)
        self.ma_builder = MAsBuilderFactory.create_builder(ma_type, ma_period)
        self.macd_builder = MACDBuilder(macd_fast_period, macd_slow_period, macd_signal_period)
        self.rsi_builder = RSIBuilder(rsi_period)
        self.rsi_lower = rsi_lower
        self.rsi_upper = rsi_upper
        self.init_from_storage(storage)

    @classmethod
    def from_config(
        cls, config: "HybridConfig", storage: CandleStore, max_history: Optional[int] = None
    ) -> "HybridAnalyzer":
        """Create an analyzer from the ``hybrid`` configuration section."""
        logger.debug(f"Creating hybrid analyzer from config: {config}")
        return cls(
            config.ma_type,
            config.ma_period,
            config.macd_fast_period,
            config.macd_slow_period,
            config.macd_signal_period,
            config.rsi_period,
            storage,
            max_history=max_history,
            rsi_lower=config.rsi_lower,
            rsi_upper=config.rsi_upper,
        )

    def next_data(self, candle: Candle) -> HybridAnalyzerData:
        return HybridAnalyzerData(
            candle,
            ma=self.ma_builder.next(candle),
            macd=self.macd_builder.next(candle),
            rsi=self.rsi_builder.next(candle),
        )

    def __repr__(self) -> str:
        latest = self.get(0)
        if latest is None:
            return "HybridAnalyzer(empty)"
        return f"HybridAnalyzer({latest})"

    # -------------------------------------------------------------------------
    # Base scores
    # -------------------------------------------------------------------------

    def calculate_buy_signal_strength(self, rsi_lower: Optional[float] = None, at: int = 0) -> float:
        """Weighted buy score in [0, 1]; 0.0 with fewer than 3 items from ``at``."""
        if len(self) < at + 3:
            return 0.0
        rsi_lower = self.rsi_lower if rsi_lower is None else rsi_lower
        current, previous, before = self._window(at, 3)

        ma_weight = 0.25
        momentum_weight = 0.1
        cross_weight = 0.3
        histogram_weight = 0.15
        rsi_weight = 0.2

        strength = 0.0
        if current.candle.close > current.ma.value:
            strength += ma_weight * SIGNAL_STRENGTH_MODERATE
            if current.ma.value > previous.ma.value:
                strength += ma_weight * MA_SLOPE_SHARE

        if current.candle.close > previous.candle.close > before.candle.close:
            strength += momentum_weight

        if (
            current.macd.macd_line > current.macd.signal_line
            and previous.macd.macd_line <= previous.macd.signal_line
        ):
            strength += cross_weight

        if current.macd.histogram > 0.0:
            strength += histogram_weight * _histogram_factor(current.macd.histogram, current.candle.close)
            if current.macd.histogram > previous.macd.histogram:
                strength += histogram_weight * SIGNAL_STRENGTH_HALF

        rsi = current.rsi.value
        if rsi < rsi_lower:
            strength += rsi_weight * (1.0 - rsi / rsi_lower)
        elif rsi < RSI_BUY_RECOVERY_LEVEL and rsi > previous.rsi.value:
            strength += (
                rsi_weight * SIGNAL_STRENGTH_HALF * (RSI_BUY_RECOVERY_LEVEL - rsi) / RSI_RECOVERY_SPAN
            )

        return clamp_unit(strength)

    def calculate_sell_signal_strength(
        self,
        rsi_upper: Optional[float] = None,
        profit_percentage: float = 0.0,
        at: int = 0,
    ) -> float:
        """Weighted sell score in [0, 1]; 0.0 with fewer than 3 items from ``at``."""
        if len(self) < at + 3:
            return 0.0
        rsi_upper = self.rsi_upper if rsi_upper is None else rsi_upper
        current, previous, before = self._window(at, 3)

        ma_weight = 0.2
        momentum_weight = 0.1
        cross_weight = 0.25
        histogram_weight = 0.15
        rsi_weight = 0.2
        profit_weight = 0.1

        strength = 0.0
        if current.candle.close < current.ma.value:
            strength += ma_weight * SIGNAL_STRENGTH_MODERATE
            if current.ma.value < previous.ma.value:
                strength += ma_weight * MA_SLOPE_SHARE

        if current.candle.close < previous.candle.close < before.candle.close:
            strength += momentum_weight

        if (
            current.macd.macd_line < current.macd.signal_line
            and previous.macd.macd_line >= previous.macd.signal_line
        ):
            strength += cross_weight

        if current.macd.histogram < 0.0:
            strength += histogram_weight * _histogram_factor(current.macd.histogram, current.candle.close)
            if current.macd.histogram < previous.macd.histogram:
                strength += histogram_weight * SIGNAL_STRENGTH_HALF

        rsi = current.rsi.value
        if rsi > rsi_upper:
            if rsi_upper < 100.0:
                strength += rsi_weight * ((rsi - rsi_upper) / (100.0 - rsi_upper))
        elif rsi > RSI_SELL_FADE_LEVEL and rsi < previous.rsi.value:
            strength += (
                rsi_weight * SIGNAL_STRENGTH_HALF * (rsi - RSI_SELL_FADE_LEVEL) / RSI_RECOVERY_SPAN
            )

        if profit_percentage > 7.0:
            strength += profit_weight
        elif profit_percentage > 3.0:
            strength += profit_weight * SIGNAL_STRENGTH_STRONG
        elif profit_percentage < -5.0:
            strength += profit_weight * 0.8

        return clamp_unit(strength)

    # -------------------------------------------------------------------------
    # Enhanced scores
    # -------------------------------------------------------------------------

    def calculate_enhanced_buy_signal_strength(
        self,
        rsi_lower: Optional[float] = None,
        volatility: float = 0.02,
        volume_factor: float = 1.0,
        at: int = 0,
    ) -> float:
        if len(self) < at + MOMENTUM_WINDOW:
            return 0.0
        strength = (
            self.calculate_buy_signal_strength(rsi_lower, at)
            * self.calculate_market_condition_factor(at)
            * self.calculate_momentum_factor(at)
            * volatility_adjustment_factor(volatility)
            * volume_adjustment_factor(volume_factor)
            * self.calculate_indicators_consensus_factor(at)
        )
        return clamp_unit(strength)

    def calculate_enhanced_sell_signal_strength(
        self,
        rsi_upper: Optional[float] = None,
        profit_percentage: float = 0.0,
        volatility: float = 0.02,
        volume_factor: float = 1.0,
        at: int = 0,
    ) -> float:
        """Market, momentum and consensus factors apply inverted (2 - factor)."""
        if len(self) < at + MOMENTUM_WINDOW:
            return 0.0
        strength = (
            self.calculate_sell_signal_strength(rsi_upper, profit_percentage, at)
            * (2.0 - self.calculate_market_condition_factor(at))
            * (2.0 - self.calculate_momentum_factor(at))
            * volatility_adjustment_factor(volatility)
            * volume_adjustment_factor(volume_factor)
            * (2.0 - self.calculate_indicators_consensus_factor(at))
        )
        return clamp_unit(strength)

    # -------------------------------------------------------------------------
    # Factors
    # -------------------------------------------------------------------------

    def calculate_market_condition_factor(self, at: int = 0) -> float:
        """0.5 + mean(price trend, MA trend, stability); 1.0 with fewer than 10 items."""
        if len(self) < at + MARKET_WINDOW:
            return 1.0
        recent = self._window(at, MARKET_WINDOW)
        score = (
            self._price_trend_strength(recent)
            + self._ma_trend_strength(recent)
            + self._market_stability(recent)
        ) / 3.0
        return SCORE_RANGE_MIN + score

    @staticmethod
    def _price_trend_strength(items: Sequence[HybridAnalyzerData]) -> float:
        if len(items) < 5:
            return 0.0
        score = 0.0
        for newer, older in zip(items, items[1:]):
            if newer.candle.close > older.candle.close:
                score += 1.0
            elif newer.candle.close < older.candle.close:
                score -= 1.0
        return abs(score / (len(items) - 1))

    @staticmethod
    def _ma_trend_strength(items: Sequence[HybridAnalyzerData]) -> float:
        if len(items) < 3:
            return 0.0
        current, previous, before = (item.ma.value for item in items[:3])
        if (current > previous > before) or (current < previous < before):
            return 1.0
        if current > previous or previous > before:
            return SIGNAL_STRENGTH_WEAK
        return 0.0

    @staticmethod
    def _market_stability(items: Sequence[HybridAnalyzerData]) -> float:
        if len(items) < 5:
            return 0.0
        rsi_volatility = values_volatility([item.rsi.value for item in items])
        macd_volatility = values_volatility([item.macd.histogram for item in items])
        return 1.0 - (rsi_volatility + macd_volatility) / 2.0

    def calculate_momentum_factor(self, at: int = 0) -> float:
        """0.5 + mean(price, MACD, RSI momentum); 1.0 with fewer than 5 items."""
        if len(self) < at + MOMENTUM_WINDOW:
            return 1.0
        recent = self._window(at, MOMENTUM_WINDOW)
        score = (
            self._price_momentum(recent)
            + self._macd_momentum(recent)
            + self._rsi_momentum(recent)
        ) / 3.0
        return SCORE_RANGE_MIN + score

    @staticmethod
    def _price_momentum(items: Sequence[HybridAnalyzerData]) -> float:
        if len(items) < 3:
            return 0.0
        current, previous, before = (item.candle.close for item in items[:3])
        if previous == 0.0 or before == 0.0:
            return 0.0
        recent_change = (current - previous) / previous
        previous_change = (previous - before) / before
        if recent_change > previous_change:
            return min(abs(recent_change - previous_change), 1.0)
        return 0.0

    @staticmethod
    def _macd_momentum(items: Sequence[HybridAnalyzerData]) -> float:
        if len(items) < 3:
            return 0.0
        current, previous, before = (item.macd.histogram for item in items[:3])
        if current > previous > before:
            return 1.0
        if current > previous:
            return SIGNAL_STRENGTH_WEAK
        return 0.0

    @staticmethod
    def _rsi_momentum(items: Sequence[HybridAnalyzerData]) -> float:
        if len(items) < 3:
            return 0.0
        current, previous = items[0].rsi.value, items[1].rsi.value
        if previous < current < RSI_NEUTRAL_UPPER and current > RSI_NEUTRAL_LOWER:
            return min((current - previous) / 10.0, 1.0)
        return 0.0

    def calculate_indicators_consensus_factor(self, at: int = 0) -> float:
        """0.5 + share of agreeing indicators (close > MA, MACD > signal, rising neutral RSI)."""
        current = self.get(at)
        if current is None:
            return 1.0
        agreeing = 0
        if current.candle.close > current.ma.value:
            agreeing += 1
        if current.macd.macd_line > current.macd.signal_line:
            agreeing += 1
        previous = self.get(at + 1)
        rsi = current.rsi.value
        if previous is not None and RSI_NEUTRAL_LOWER < rsi < RSI_NEUTRAL_UPPER and rsi > previous.rsi.value:
            agreeing += 1
        return SCORE_RANGE_MIN + agreeing / 3.0

    def evaluate_market_condition(self) -> MarketCondition:
        if len(self) < MARKET_WINDOW:
            return MarketCondition.INSUFFICIENT_DATA
        overall = (
            self.calculate_market_condition_factor()
            + self.calculate_momentum_factor()
            + self.calculate_indicators_consensus_factor()
        ) / 3.0
        if overall > 1.3:
            return MarketCondition.VERY_GOOD
        if overall > 1.1:
            return MarketCondition.GOOD
        if overall > 0.9:
            return MarketCondition.NORMAL
        if overall > SIGNAL_STRENGTH_STRONG:
            return MarketCondition.CAUTION
        return MarketCondition.DANGEROUS

    def calculate_risk_adjusted_signal_strength(
        self,
        signal_type: "SignalType | str",
        base_strength: float,
        risk_factor: float,
        at: int = 0,
    ) -> float:
        """
        Scale ``base_strength`` by (1 - risk_factor / 2) and the market factor.

        Sell signals use the inverted market factor (2 - factor).
        """
        if base_strength == 0.0:
            return 0.0
        market = self.calculate_market_condition_factor(at)
        if SignalType.parse(signal_type) is SignalType.SELL:
            market = 2.0 - market
        return clamp_unit(base_strength * (1.0 - risk_factor * 0.5) * market)

    # -------------------------------------------------------------------------
    # Confirmation predicates
    # -------------------------------------------------------------------------

    def is_strong_buy_signal_confirmed(
        self, n: int, m: int, rsi_lower: Optional[float], threshold: float, p: int = 0
    ) -> bool:
        return self.is_break_through_by_index(
            lambda i: self.calculate_buy_signal_strength(rsi_lower, i) > threshold, n, m, p
        )

    def is_strong_sell_signal_confirmed(
        self,
        n: int,
        m: int,
        rsi_upper: Optional[float],
        profit_percentage: float,
        threshold: float,
        p: int = 0,
    ) -> bool:
        return self.is_break_through_by_index(
            lambda i: self.calculate_sell_signal_strength(rsi_upper, profit_percentage, i) > threshold,
            n,
            m,
            p,
        )

    def is_enhanced_buy_signal_confirmed(
        self,
        n: int,
        m: int,
        rsi_lower: Optional[float],
        volatility: float,
        volume_factor: float,
        threshold: float,
        p: int = 0,
    ) -> bool:
        return self.is_break_through_by_index(
            lambda i: self.calculate_enhanced_buy_signal_strength(rsi_lower, volatility, volume_factor, i)
            > threshold,
            n,
            m,
            p,
        )

    def is_enhanced_sell_signal_confirmed(
        self,
        n: int,
        m: int,
        rsi_upper: Optional[float],
        profit_percentage: float,
        volatility: float,
        volume_factor: float,
        threshold: float,
        p: int = 0,
    ) -> bool:
        return self.is_break_through_by_index(
            lambda i: self.calculate_enhanced_sell_signal_strength(
                rsi_upper, profit_percentage, volatility, volume_factor, i
            )
            > threshold,
            n,
            m,
            p,
        )

    def is_market_condition_improving_signal(self, n: int, m: int, threshold: float, p: int = 0) -> bool:
        return self.is_break_through_by_index(
            lambda i: self.calculate_market_condition_factor(i) > threshold, n, m, p
        )

    def is_momentum_strengthening_signal(self, n: int, m: int, threshold: float, p: int = 0) -> bool:
        return self.is_break_through_by_index(
            lambda i: self.calculate_momentum_factor(i) > threshold, n, m, p
        )

    def is_indicators_consensus_signal(self, n: int, m: int, threshold: float, p: int = 0) -> bool:
        return self.is_break_through_by_index(
            lambda i: self.calculate_indicators_consensus_factor(i) > threshold, n, m, p
        )

    def is_risk_adjusted_buy_signal(
        self, n: int, m: int, base_strength: float, risk_factor: float, threshold: float, p: int = 0
    ) -> bool:
        return self.is_break_through_by_index(
            lambda i: self.calculate_risk_adjusted_signal_strength(SignalType.BUY, base_strength, risk_factor, i)
            > threshold,
            n,
            m,
            p,
        )

    def is_risk_adjusted_sell_signal(
        self, n: int, m: int, base_strength: float, risk_factor: float, threshold: float, p: int = 0
    ) -> bool:
        return self.is_break_through_by_index(
            lambda i: self.calculate_risk_adjusted_signal_strength(SignalType.SELL, base_strength, risk_factor, i)
            > threshold,
            n,
            m,
            p,
        )

    def is_composite_signal_strength_breakthrough(
        self, n: int, m: int, signal_type: "SignalType | str", threshold: float, p: int = 0
    ) -> bool:
        """
        Share of agreeing MA, MACD and RSI signals exceeds ``threshold``
        for items[p:p+n] and not for the m items before.

        Buy agreement: close > MA, MACD above signal with a positive
        histogram, RSI oversold. Sell mirrors each condition.
        """
        buy = SignalType.parse(signal_type) is SignalType.BUY

        def agreement(d: HybridAnalyzerData) -> bool:
            if buy:
                signals = (
                    d.candle.close > d.ma.value,
                    d.macd.macd_line > d.macd.signal_line and d.macd.histogram > 0.0,
                    d.rsi.value < RSI_OVERSOLD_THRESHOLD,
                )
            else:
                signals = (
                    d.candle.close < d.ma.value,
                    d.macd.macd_line < d.macd.signal_line and d.macd.histogram < 0.0,
                    d.rsi.value > RSI_OVERBOUGHT_THRESHOLD,
                )
            return sum(signals) / 3.0 > threshold

        return self.is_break_through_by_satisfying(agreement, n, m, p)

    def is_strong_buy_signal(self, n: int, rsi_lower: Optional[float], threshold: float, p: int = 0) -> bool:
        return self.is_all_by_index(
            lambda i: self.calculate_buy_signal_strength(rsi_lower, i) > threshold, n, p
        )

    def is_strong_sell_signal(
        self, n: int, rsi_upper: Optional[float], profit_percentage: float, threshold: float, p: int = 0
    ) -> bool:
        return self.is_all_by_index(
            lambda i: self.calculate_sell_signal_strength(rsi_upper, profit_percentage, i) > threshold,
            n,
            p,
        )

    def is_good_market_condition(self, n: int, threshold: float, p: int = 0) -> bool:
        return self.is_all_by_index(lambda i: self.calculate_market_condition_factor(i) > threshold, n, p)

    def is_strong_momentum(self, n: int, threshold: float, p: int = 0) -> bool:
        return self.is_all_by_index(lambda i: self.calculate_momentum_factor(i) > threshold, n, p)
