"""
Support / resistance analyzer based on swing pivots.

For every candle the last ``lookback_period`` candles (newest first) are
scanned for pivots: a high above the two highs on each side is a
resistance candidate, a low below the two lows on each side a support
candidate. A candidate becomes a level when at least ``min_touch_count``
candles (the pivot included) reach within ``touch_threshold`` of it.

Confidence = min((touches - 1) * 0.2 + 0.5 * recency, 1.0), where
recency is 1 for a level touched on the newest candle and falls
linearly with the age of its most recent touch.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional, Sequence, Tuple

from ..candle import Candle
from ..candle_store import CandleStore
from .base import Analyzer, AnalyzerData

PIVOT_WING = 2
STRONG_TOUCH_COUNT = 3
NEAR_LEVEL_RATIO = 0.002


class LevelType(str, Enum):
    SUPPORT = "support"
    RESISTANCE = "resistance"
    BOTH = "both"


@dataclass(frozen=True)
class SupportResistanceLevel:
    """A price level with its touch statistics; ``last_touch`` is in bars ago."""

    price: float
    touch_count: int
    level_type: LevelType
    last_touch: int
    confidence: float

    @property
    def is_support(self) -> bool:
        return self.level_type in (LevelType.SUPPORT, LevelType.BOTH)

    @property
    def is_resistance(self) -> bool:
        return self.level_type in (LevelType.RESISTANCE, LevelType.BOTH)


def _is_pivot_high(candles: Sequence[Candle], i: int) -> bool:
    high = candles[i].high
    return all(high > candles[j].high for j in range(i - PIVOT_WING, i + PIVOT_WING + 1) if j != i)


def _is_pivot_low(candles: Sequence[Candle], i: int) -> bool:
    low = candles[i].low
    return all(low < candles[j].low for j in range(i - PIVOT_WING, i + PIVOT_WING + 1) if j != i)


def _touches(candle: Candle, price: float, level_type: LevelType, threshold: float) -> bool:
    near_low = abs(candle.low - price) <= threshold
    near_high = abs(candle.high - price) <= threshold
    if level_type is LevelType.SUPPORT:
        return near_low
    if level_type is LevelType.RESISTANCE:
        return near_high
    return near_low or near_high


def level_confidence(touch_count: int, last_touch: int, total: int) -> float:
    recency = 1.0 - last_touch / total
    return min((touch_count - 1) * 0.2 + recency * 0.5, 1.0)


def identify_levels(
    candles: Sequence[Candle], touch_threshold: float, min_touch_count: int
) -> List[SupportResistanceLevel]:
    """Pivot levels of ``candles`` (newest first) with enough touches."""
    if len(candles) < 2 * PIVOT_WING + 1:
        return []

    candidates: List[Tuple[float, LevelType, int]] = []
    for i in range(PIVOT_WING, len(candles) - PIVOT_WING):
        if _is_pivot_high(candles, i):
            candidates.append((candles[i].high, LevelType.RESISTANCE, i))
        if _is_pivot_low(candles, i):
            candidates.append((candles[i].low, LevelType.SUPPORT, i))

    levels = []
    for price, level_type, index in candidates:
        touched = [
            j for j, candle in enumerate(candles)
            if j != index and _touches(candle, price, level_type, touch_threshold)
        ]
        touch_count = 1 + len(touched)
        if touch_count < min_touch_count:
            continue
        last_touch = min(touched + [index])
        levels.append(
            SupportResistanceLevel(
                price=price,
                touch_count=touch_count,
                level_type=level_type,
                last_touch=last_touch,
                confidence=level_confidence(touch_count, last_touch, len(candles)),
            )
        )
    return levels


def nearest_levels(
    price: float, levels: Sequence[SupportResistanceLevel]
) -> Tuple[Optional[SupportResistanceLevel], Optional[SupportResistanceLevel]]:
    """Closest support strictly below and resistance strictly above ``price``."""
    supports = [lv for lv in levels if lv.is_support and lv.price < price]
    resistances = [lv for lv in levels if lv.is_resistance and lv.price > price]
    support = min(supports, key=lambda lv: price - lv.price, default=None)
    resistance = min(resistances, key=lambda lv: lv.price - price, default=None)
    return support, resistance


@dataclass(frozen=True)
class SupportResistanceAnalyzerData(AnalyzerData):
    levels: Tuple[SupportResistanceLevel, ...] = ()
    nearest_support: Optional[SupportResistanceLevel] = None
    nearest_resistance: Optional[SupportResistanceLevel] = None

    def is_near_support(self, threshold: float) -> bool:
        distance = self.distance_to_nearest_support()
        return distance is not None and distance <= threshold

    def is_near_resistance(self, threshold: float) -> bool:
        distance = self.distance_to_nearest_resistance()
        return distance is not None and distance <= threshold

    def is_above_support(self) -> bool:
        return self.nearest_support is not None and self.candle.close > self.nearest_support.price

    def is_below_resistance(self) -> bool:
        return self.nearest_resistance is not None and self.candle.close < self.nearest_resistance.price

    def get_strong_support_levels(self, min_touch_count: int) -> List[SupportResistanceLevel]:
        return [lv for lv in self.levels if lv.is_support and lv.touch_count >= min_touch_count]

    def get_strong_resistance_levels(self, min_touch_count: int) -> List[SupportResistanceLevel]:
        return [lv for lv in self.levels if lv.is_resistance and lv.touch_count >= min_touch_count]

    def distance_to_nearest_support(self) -> Optional[float]:
        if self.nearest_support is None:
            return None
        return abs(self.candle.close - self.nearest_support.price)

    def distance_to_nearest_resistance(self) -> Optional[float]:
        if self.nearest_resistance is None:
            return None
        return abs(self.candle.close - self.nearest_resistance.price)

    def __str__(self) -> str:
        support = self.nearest_support.price if self.nearest_support else None
        resistance = self.nearest_resistance.price if self.nearest_resistance else None
        return f"candle={self.candle}, levels={len(self.levels)}, support={support}, resistance={resistance}"


class SupportResistanceAnalyzer(Analyzer[SupportResistanceAnalyzerData]):
    """
    Args:
        storage: Candles to replay on construction.
        lookback_period: Candles scanned for pivots (current included).
        touch_threshold: Absolute price distance counted as a touch.
        min_touch_count: Touches (pivot included) required for a level.
        max_history: Optional cap on retained analyzer items.
    """

    def __init__(
        self,
        storage: CandleStore,
        lookback_period: int = 50,
        touch_threshold: float = 0.5,
        min_touch_count: int = 2,
        max_history: Optional[int] = None,
    ):
        super().__init__(max_history)
        self.lookback_period = lookback_period
        self.touch_threshold = touch_threshold
        self.min_touch_count = min_touch_count
        self._candles: Deque[Candle] = deque(maxlen=lookback_period)
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> SupportResistanceAnalyzerData:
        self._candles.appendleft(candle)
        levels = identify_levels(list(self._candles), self.touch_threshold, self.min_touch_count)
        support, resistance = nearest_levels(candle.close, levels)
        return SupportResistanceAnalyzerData(candle, tuple(levels), support, resistance)

    # -------------------------------------------------------------------------
    # Latest items
    # -------------------------------------------------------------------------

    def is_support_breakdown(self) -> bool:
        """Close fell below the support that was nearest on the previous candle."""
        if len(self) < 2:
            return False
        current, previous = self.items[0], self.items[1]
        support = previous.nearest_support
        return support is not None and previous.candle.close >= support.price > current.candle.close

    def is_resistance_breakout(self) -> bool:
        """Close rose above the resistance that was nearest on the previous candle."""
        if len(self) < 2:
            return False
        current, previous = self.items[0], self.items[1]
        resistance = previous.nearest_resistance
        return resistance is not None and previous.candle.close <= resistance.price < current.candle.close

    def is_support_bounce(self, n: int) -> bool:
        """Lowest low of the last n items touched the support and the close is above it."""
        if n <= 0 or len(self) < n + 1:
            return False
        support = self.items[0].nearest_support
        if support is None:
            return False
        recent_low = min(d.candle.low for d in self._window(0, n))
        return abs(recent_low - support.price) <= self.touch_threshold and self.items[0].candle.close > support.price

    def is_resistance_rejection(self, n: int) -> bool:
        """Highest high of the last n items touched the resistance and the close is below it."""
        if n <= 0 or len(self) < n + 1:
            return False
        resistance = self.items[0].nearest_resistance
        if resistance is None:
            return False
        recent_high = max(d.candle.high for d in self._window(0, n))
        return (
            abs(recent_high - resistance.price) <= self.touch_threshold
            and self.items[0].candle.close < resistance.price
        )

    def is_near_strong_support(self, threshold: float) -> bool:
        latest = self.get(0)
        return latest is not None and any(
            abs(latest.candle.close - lv.price) <= threshold
            for lv in latest.get_strong_support_levels(STRONG_TOUCH_COUNT)
        )

    def is_near_strong_resistance(self, threshold: float) -> bool:
        latest = self.get(0)
        return latest is not None and any(
            abs(latest.candle.close - lv.price) <= threshold
            for lv in latest.get_strong_resistance_levels(STRONG_TOUCH_COUNT)
        )

    # -------------------------------------------------------------------------
    # Windows
    # -------------------------------------------------------------------------

    def is_above_support(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_above_support(), n, p)

    def is_below_resistance(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_below_resistance(), n, p)

    def is_near_support(self, n: int, threshold: float, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_near_support(threshold), n, p)

    def is_near_resistance(self, n: int, threshold: float, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_near_resistance(threshold), n, p)

    # -------------------------------------------------------------------------
    # Breakthrough signals: n items satisfy, the m before them do not
    # -------------------------------------------------------------------------

    def is_support_breakdown_signal(self, n: int, m: int, p: int = 0) -> bool:
        def broken(d: SupportResistanceAnalyzerData) -> bool:
            return d.nearest_support is not None and d.candle.low < d.nearest_support.price

        return self.is_break_through_by_satisfying(broken, n, m, p)

    def is_resistance_breakout_signal(self, n: int, m: int, p: int = 0) -> bool:
        def broken(d: SupportResistanceAnalyzerData) -> bool:
            return d.nearest_resistance is not None and d.candle.high > d.nearest_resistance.price

        return self.is_break_through_by_satisfying(broken, n, m, p)

    def is_support_bounce_signal(self, n: int, m: int, p: int = 0) -> bool:
        """Low within 0.2% of the nearest support."""
        def touching(d: SupportResistanceAnalyzerData) -> bool:
            s = d.nearest_support
            return s is not None and abs(d.candle.low - s.price) <= s.price * NEAR_LEVEL_RATIO

        return self.is_break_through_by_satisfying(touching, n, m, p)

    def is_resistance_rejection_signal(self, n: int, m: int, p: int = 0) -> bool:
        """High within 0.2% of the nearest resistance."""
        def touching(d: SupportResistanceAnalyzerData) -> bool:
            r = d.nearest_resistance
            return r is not None and abs(d.candle.high - r.price) <= r.price * NEAR_LEVEL_RATIO

        return self.is_break_through_by_satisfying(touching, n, m, p)

    def is_near_strong_support_signal(self, n: int, m: int, threshold: float, p: int = 0) -> bool:
        def near(d: SupportResistanceAnalyzerData) -> bool:
            s = d.nearest_support
            return s is not None and abs(d.candle.low - s.price) <= threshold and s.touch_count >= STRONG_TOUCH_COUNT

        return self.is_break_through_by_satisfying(near, n, m, p)

    def is_near_strong_resistance_signal(self, n: int, m: int, threshold: float, p: int = 0) -> bool:
        def near(d: SupportResistanceAnalyzerData) -> bool:
            r = d.nearest_resistance
            return r is not None and abs(d.candle.high - r.price) <= threshold and r.touch_count >= STRONG_TOUCH_COUNT

        return self.is_break_through_by_satisfying(near, n, m, p)

    def is_above_support_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_above_support(), n, m, p)

    def is_below_resistance_signal(self, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_below_resistance(), n, m, p)

    def is_near_support_signal(self, n: int, m: int, threshold: float, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_near_support(threshold), n, m, p)

    def is_near_resistance_signal(self, n: int, m: int, threshold: float, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_near_resistance(threshold), n, m, p)
