"""
Momentum analyzer: oscillator consensus, momentum state and divergence.

Each candle produces a MomentumIndicators snapshot:
- rsi: Wilder RSI (``rsi_period``)
- stoch_k / stoch_d: stochastic %K over ``stoch_period`` and the mean of
  the last three %K values
- williams_r: Williams %R over ``williams_period`` (-100..0)
- roc: percent change across the last ``roc_period`` closes
- cci: Commodity Channel Index over ``cci_period`` typical prices
- momentum: close difference across the last ``momentum_period`` closes
- ultimate_oscillator: 7/14/28 buying-pressure blend

The indicators vote for a MomentumDirection (6 of 7 agreeing is strong,
4 is plain) and an OverBoughtOverSold zone (2 of 5 extremes, 4 for the
extreme zones). Strength averages seven normalised distances from each
oscillator's neutral value. State compares strength with the previous
candle's, and divergence compares the 10-candle close and RSI trends.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from itertools import islice
from typing import Deque, List, Optional, Sequence, Tuple

import numpy as np

from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.momentum.rsi import RSIBuilder
from .base import Analyzer, AnalyzerData

CANDLE_LOOKBACK = 50
DIVERGENCE_WINDOW = 10
STATE_CHANGE_THRESHOLD = 0.05
STRONG_MOMENTUM_STRENGTH = 0.7
DIVERGENCE_CONFIDENCE = 0.6
UO_WINDOWS = (7, 14, 28)


class MomentumDirection(str, Enum):
    STRONG_POSITIVE = "strong_positive"
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    STRONG_NEGATIVE = "strong_negative"


class MomentumState(str, Enum):
    ACCELERATING = "accelerating"
    STABLE = "stable"
    DECELERATING = "decelerating"
    REVERTING = "reverting"


class OverBoughtOverSold(str, Enum):
    EXTREME_OVERBOUGHT = "extreme_overbought"
    OVERBOUGHT = "overbought"
    NEUTRAL = "neutral"
    OVERSOLD = "oversold"
    EXTREME_OVERSOLD = "extreme_oversold"


class DivergenceType(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    HIDDEN_BULLISH = "hidden_bullish"
    HIDDEN_BEARISH = "hidden_bearish"
    NONE = "none"


@dataclass(frozen=True)
class MomentumIndicators:
    rsi: float = 50.0
    stoch_k: float = 50.0
    stoch_d: float = 50.0
    williams_r: float = -50.0
    roc: float = 0.0
    cci: float = 0.0
    momentum: float = 0.0
    ultimate_oscillator: float = 50.0


@dataclass(frozen=True)
class MomentumDivergence:
    divergence_type: DivergenceType = DivergenceType.NONE
    rsi_divergence: bool = False
    strength: float = 0.0
    confidence: float = 0.0


@dataclass(frozen=True)
class MomentumAnalysis:
    direction: MomentumDirection
    state: MomentumState
    strength: float
    persistence: float
    zone: OverBoughtOverSold
    divergence: MomentumDivergence
    change_rate: float
    stability: float


# =============================================================================
# OSCILLATORS (candles newest first)
# =============================================================================

def _window(candles: Sequence[Candle], period: int) -> Optional[Sequence[Candle]]:
    if len(candles) < period:
        return None
    return candles[:period]


def stochastic_k(candles: Sequence[Candle], period: int) -> float:
    window = _window(candles, period)
    if window is None:
        return 50.0
    highest = max(c.high for c in window)
    lowest = min(c.low for c in window)
    if highest == lowest:
        return 50.0
    return (candles[0].close - lowest) / (highest - lowest) * 100.0


def williams_r(candles: Sequence[Candle], period: int) -> float:
    window = _window(candles, period)
    if window is None:
        return -50.0
    highest = max(c.high for c in window)
    lowest = min(c.low for c in window)
    if highest == lowest:
        return -50.0
    return -(highest - candles[0].close) / (highest - lowest) * 100.0


def rate_of_change(candles: Sequence[Candle], period: int) -> float:
    """Percent change from the oldest to the newest close of the window."""
    window = _window(candles, period)
    if window is None:
        return 0.0
    past = window[-1].close
    if past == 0.0:
        return 0.0
    return (candles[0].close - past) / past * 100.0


def price_momentum(candles: Sequence[Candle], period: int) -> float:
    window = _window(candles, period)
    if window is None:
        return 0.0
    return candles[0].close - window[-1].close


def commodity_channel_index(candles: Sequence[Candle], period: int) -> float:
    window = _window(candles, period)
    if window is None:
        return 0.0
    typical = np.array([c.typical_price for c in window])
    mean = typical.mean()
    mad = np.abs(typical - mean).mean()
    if mad == 0.0:
        return 0.0
    return float((typical[0] - mean) / (0.015 * mad))


def ultimate_oscillator(candles: Sequence[Candle]) -> float:
    longest = UO_WINDOWS[-1]
    if len(candles) < longest:
        return 50.0

    bp_sums = [0.0] * len(UO_WINDOWS)
    tr_sums = [0.0] * len(UO_WINDOWS)
    for i in range(min(longest, len(candles) - 1)):
        current, previous = candles[i], candles[i + 1]
        true_low = min(current.low, previous.close)
        bp = current.close - true_low
        tr = max(current.high, previous.close) - true_low
        for w, size in enumerate(UO_WINDOWS):
            if i < size:
                bp_sums[w] += bp
                tr_sums[w] += tr

    short, mid, long_ = (bp / tr if tr != 0.0 else 0.0 for bp, tr in zip(bp_sums, tr_sums))
    return (4.0 * short + 2.0 * mid + long_) / 7.0 * 100.0


# =============================================================================
# CLASSIFICATION
# =============================================================================

def momentum_direction(ind: MomentumIndicators) -> MomentumDirection:
    positive = sum((
        ind.rsi > 60.0,
        ind.stoch_k > 60.0,
        ind.williams_r > -40.0,
        ind.roc > 2.0,
        ind.cci > 100.0,
        ind.momentum > 0.0,
        ind.ultimate_oscillator > 60.0,
    ))
    negative = sum((
        ind.rsi < 40.0,
        ind.stoch_k < 40.0,
        ind.williams_r < -60.0,
        ind.roc < -2.0,
        ind.cci < -100.0,
        ind.momentum < 0.0,
        ind.ultimate_oscillator < 40.0,
    ))
    if positive >= 6:
        return MomentumDirection.STRONG_POSITIVE
    if positive >= 4:
        return MomentumDirection.POSITIVE
    if negative >= 6:
        return MomentumDirection.STRONG_NEGATIVE
    if negative >= 4:
        return MomentumDirection.NEGATIVE
    return MomentumDirection.NEUTRAL


def momentum_strength(ind: MomentumIndicators) -> float:
    """Mean of seven 0..1 distances from neutral."""
    return (
        abs(ind.rsi - 50.0) / 50.0
        + (abs(ind.stoch_k - 50.0) + abs(ind.stoch_d - 50.0)) / 100.0
        + abs(ind.williams_r + 50.0) / 50.0
        + min(abs(ind.roc) / 10.0, 1.0)
        + min(abs(ind.cci) / 200.0, 1.0)
        + min(abs(ind.momentum) / 5.0, 1.0)
        + abs(ind.ultimate_oscillator - 50.0) / 50.0
    ) / 7.0


def momentum_state(strength: float, previous_strength: float) -> MomentumState:
    change = strength - previous_strength
    if change > STATE_CHANGE_THRESHOLD:
        return MomentumState.ACCELERATING
    if change < -STATE_CHANGE_THRESHOLD:
        return MomentumState.DECELERATING
    if abs(change) < STATE_CHANGE_THRESHOLD / 2.0:
        return MomentumState.STABLE
    return MomentumState.REVERTING


def overbought_oversold(ind: MomentumIndicators) -> OverBoughtOverSold:
    overbought = sum((
        ind.rsi > 80.0,
        ind.stoch_k > 80.0,
        ind.williams_r > -20.0,
        ind.cci > 200.0,
        ind.ultimate_oscillator > 80.0,
    ))
    oversold = sum((
        ind.rsi < 20.0,
        ind.stoch_k < 20.0,
        ind.williams_r < -80.0,
        ind.cci < -200.0,
        ind.ultimate_oscillator < 20.0,
    ))
    if overbought >= 4:
        return OverBoughtOverSold.EXTREME_OVERBOUGHT
    if overbought >= 2:
        return OverBoughtOverSold.OVERBOUGHT
    if oversold >= 4:
        return OverBoughtOverSold.EXTREME_OVERSOLD
    if oversold >= 2:
        return OverBoughtOverSold.OVERSOLD
    return OverBoughtOverSold.NEUTRAL


def analyze_divergence(closes: Sequence[float], rsis: Sequence[float]) -> MomentumDivergence:
    """Close trend against RSI trend over the newest DIVERGENCE_WINDOW values."""
    n = DIVERGENCE_WINDOW
    if len(closes) < n or len(rsis) < n:
        return MomentumDivergence()
    price_trend = closes[0] - closes[n - 1]
    rsi_trend = rsis[0] - rsis[n - 1]

    if price_trend > 0.0 and rsi_trend < 0.0:
        kind = DivergenceType.BEARISH
    elif price_trend < 0.0 and rsi_trend > 0.0:
        kind = DivergenceType.BULLISH
    else:
        kind = DivergenceType.NONE

    raw = (abs(price_trend) + abs(rsi_trend)) / 2.0 if kind is not DivergenceType.NONE else 0.0
    return MomentumDivergence(
        divergence_type=kind,
        rsi_divergence=price_trend * rsi_trend < 0.0,
        strength=min(raw, 1.0),
        confidence=0.7 if raw > 0.5 else 0.3,
    )


def momentum_persistence(directions: Sequence[MomentumDirection]) -> float:
    """Share of consecutive equal directions; 0.5 with fewer than 5."""
    if len(directions) < 5:
        return 0.5
    same = sum(a == b for a, b in zip(directions, directions[1:]))
    return same / (len(directions) - 1)


def momentum_stability(rsis: Sequence[float]) -> float:
    """1 - std(RSI) / 50, floored at 0; 0.5 with fewer than 5 values."""
    if len(rsis) < 5:
        return 0.5
    return max(1.0 - min(float(np.std(rsis)) / 50.0, 1.0), 0.0)


def rsi_extremes(rsis: Sequence[float]) -> Tuple[Tuple[int, float], ...]:
    """(index, rsi) of local RSI peaks above 70 and troughs below 30."""
    found: List[Tuple[int, float]] = []
    for i in range(2, len(rsis) - 2):
        rsi, newer, older = rsis[i], rsis[i - 1], rsis[i + 1]
        if (rsi > newer and rsi > older and rsi > 70.0) or (rsi < newer and rsi < older and rsi < 30.0):
            found.append((i, rsi))
    return tuple(found)


# =============================================================================
# ANALYZER
# =============================================================================

@dataclass(frozen=True)
class MomentumAnalyzerData(AnalyzerData):
    indicators: MomentumIndicators
    analysis: MomentumAnalysis
    previous_directions: Tuple[MomentumDirection, ...] = ()
    extremes: Tuple[Tuple[int, float], ...] = ()

    def is_strong_positive_momentum(self) -> bool:
        return (
            self.analysis.direction is MomentumDirection.STRONG_POSITIVE
            and self.analysis.strength > STRONG_MOMENTUM_STRENGTH
        )

    def is_strong_negative_momentum(self) -> bool:
        return (
            self.analysis.direction is MomentumDirection.STRONG_NEGATIVE
            and self.analysis.strength > STRONG_MOMENTUM_STRENGTH
        )

    def is_accelerating_momentum(self) -> bool:
        return self.analysis.state is MomentumState.ACCELERATING

    def is_decelerating_momentum(self) -> bool:
        return self.analysis.state is MomentumState.DECELERATING

    def is_overbought(self) -> bool:
        return self.analysis.zone in (OverBoughtOverSold.OVERBOUGHT, OverBoughtOverSold.EXTREME_OVERBOUGHT)

    def is_oversold(self) -> bool:
        return self.analysis.zone in (OverBoughtOverSold.OVERSOLD, OverBoughtOverSold.EXTREME_OVERSOLD)

    def has_momentum_divergence(self) -> bool:
        return self.analysis.divergence.divergence_type is not DivergenceType.NONE

    def is_bullish_divergence(self) -> bool:
        return (
            self.analysis.divergence.divergence_type in (DivergenceType.BULLISH, DivergenceType.HIDDEN_BULLISH)
            and self.analysis.divergence.confidence > DIVERGENCE_CONFIDENCE
        )

    def is_bearish_divergence(self) -> bool:
        return (
            self.analysis.divergence.divergence_type in (DivergenceType.BEARISH, DivergenceType.HIDDEN_BEARISH)
            and self.analysis.divergence.confidence > DIVERGENCE_CONFIDENCE
        )

    def is_persistent_momentum(self) -> bool:
        return self.analysis.persistence > 0.7

    def is_stable_momentum(self) -> bool:
        return self.analysis.stability > 0.6

    def is_momentum_reversal_signal(self) -> bool:
        return self.analysis.state is MomentumState.REVERTING and (self.is_overbought() or self.is_oversold())

    def is_near_momentum_extreme(self, threshold: float) -> bool:
        """Current RSI within ``threshold`` points of a recent RSI extreme."""
        return any(abs(self.indicators.rsi - value) < threshold for _, value in self.extremes)

    def calculate_momentum_consistency(self, lookback: int) -> float:
        """Share of the previous ``lookback`` directions equal to the current one."""
        if lookback <= 0 or len(self.previous_directions) < lookback:
            return 0.5
        recent = self.previous_directions[:lookback]
        return sum(d is self.analysis.direction for d in recent) / lookback

    def __str__(self) -> str:
        return (
            f"candle={self.candle}, momentum={self.analysis.direction.value}, "
            f"strength={self.analysis.strength:.2f}, rsi={self.indicators.rsi:.2f}"
        )


class MomentumAnalyzer(Analyzer[MomentumAnalyzerData]):
    """
    Multi-oscillator momentum analyzer.

    Args:
        storage: Candles to replay on construction.
        rsi_period, stoch_period, williams_period, roc_period,
        cci_period, momentum_period: Oscillator lookbacks.
        history_length: Indicator/direction history used for divergence,
            persistence, stability and extremes.
        max_history: Optional cap on retained analyzer items.
    """

    def __init__(
        self,
        storage: CandleStore,
        rsi_period: int = 14,
        stoch_period: int = 14,
        williams_period: int = 14,
        roc_period: int = 10,
        cci_period: int = 20,
        momentum_period: int = 10,
        history_length: int = 20,
        max_history: Optional[int] = None,
    ):
        super().__init__(max_history)
        self.rsi_period = rsi_period
        self.stoch_period = stoch_period
        self.williams_period = williams_period
        self.roc_period = roc_period
        self.cci_period = cci_period
        self.momentum_period = momentum_period
        self.history_length = history_length

        self.rsi_builder = RSIBuilder(rsi_period)
        lookback = max(CANDLE_LOOKBACK, stoch_period, williams_period, roc_period, cci_period, momentum_period)
        self._candles: Deque[Candle] = deque(maxlen=lookback)
        self._stoch_k: Deque[float] = deque(maxlen=3)
        self._indicators: Deque[MomentumIndicators] = deque(maxlen=max(history_length, DIVERGENCE_WINDOW))
        self._directions: Deque[MomentumDirection] = deque(maxlen=history_length)
        self._last_strength: Optional[float] = None
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> MomentumAnalyzerData:
        self._candles.appendleft(candle)
        candles = list(self._candles)

        k = stochastic_k(candles, self.stoch_period)
        self._stoch_k.appendleft(k)
        d = sum(self._stoch_k) / 3.0 if len(self._stoch_k) == 3 else k

        indicators = MomentumIndicators(
            rsi=self.rsi_builder.next(candle).value,
            stoch_k=k,
            stoch_d=d,
            williams_r=williams_r(candles, self.williams_period),
            roc=rate_of_change(candles, self.roc_period),
            cci=commodity_channel_index(candles, self.cci_period),
            momentum=price_momentum(candles, self.momentum_period),
            ultimate_oscillator=ultimate_oscillator(candles),
        )
        self._indicators.appendleft(indicators)
        rsis = [ind.rsi for ind in islice(self._indicators, self.history_length)]

        direction = momentum_direction(indicators)
        strength = momentum_strength(indicators)
        if self._last_strength is None:
            state, change = MomentumState.STABLE, 0.0
        else:
            state, change = momentum_state(strength, self._last_strength), strength - self._last_strength
        previous_directions = tuple(self._directions)

        analysis = MomentumAnalysis(
            direction=direction,
            state=state,
            strength=strength,
            persistence=momentum_persistence(previous_directions),
            zone=overbought_oversold(indicators),
            divergence=analyze_divergence(
                [c.close for c in candles],
                [ind.rsi for ind in self._indicators],
            ),
            change_rate=change,
            stability=momentum_stability(rsis),
        )

        self._directions.appendleft(direction)
        self._last_strength = strength
        return MomentumAnalyzerData(candle, indicators, analysis, previous_directions, rsi_extremes(rsis))

    # -------------------------------------------------------------------------
    # Latest item
    # -------------------------------------------------------------------------

    def _latest(self, predicate) -> bool:
        latest = self.get(0)
        return latest is not None and predicate(latest)

    def is_strong_momentum_signal(self) -> bool:
        return self._latest(lambda d: d.is_strong_positive_momentum() or d.is_strong_negative_momentum())

    def is_momentum_divergence_signal(self) -> bool:
        return self._latest(lambda d: d.has_momentum_divergence() and d.analysis.divergence.confidence > 0.7)

    def is_momentum_reversal_signal(self) -> bool:
        return self._latest(lambda d: d.is_momentum_reversal_signal())

    def is_persistent_momentum_signal(self) -> bool:
        return self._latest(lambda d: d.is_persistent_momentum() and d.is_stable_momentum())

    # -------------------------------------------------------------------------
    # Windows
    # -------------------------------------------------------------------------

    def is_strong_positive_momentum(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_strong_positive_momentum(), n, p)

    def is_strong_negative_momentum(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_strong_negative_momentum(), n, p)

    def is_accelerating_momentum(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_accelerating_momentum(), n, p)

    def is_decelerating_momentum(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_decelerating_momentum(), n, p)

    def is_overbought(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_overbought(), n, p)

    def is_oversold(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_oversold(), n, p)

    def is_momentum_divergence(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.has_momentum_divergence(), n, p)

    # -------------------------------------------------------------------------
    # Breakthrough signals: n items satisfy, the m before them do not
    # -------------------------------------------------------------------------

    def is_strong_positive_momentum_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_strong_positive_momentum(), n, m, p)

    def is_strong_negative_momentum_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_strong_negative_momentum(), n, m, p)

    def is_accelerating_momentum_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_accelerating_momentum(), n, m, p)

    def is_decelerating_momentum_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_decelerating_momentum(), n, m, p)

    def is_overbought_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_overbought(), n, m, p)

    def is_oversold_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_oversold(), n, m, p)

    def is_momentum_divergence_breakthrough(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.has_momentum_divergence(), n, m, p)

    def is_bullish_divergence_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_bullish_divergence(), n, m, p)

    def is_bearish_divergence_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_bearish_divergence(), n, m, p)

    def is_persistent_momentum_breakthrough(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_persistent_momentum(), n, m, p)

    def is_stable_momentum_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_stable_momentum(), n, m, p)

    def is_momentum_reversal_breakthrough(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_momentum_reversal_signal(), n, m, p)

    def is_near_momentum_extreme_signal(self, n: int, m: int, threshold: float, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_near_momentum_extreme(threshold), n, m, p)
