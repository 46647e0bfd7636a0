"""
VWAP analyzer: close position relative to one or more VWAP lines.

Settings are VWAPParams keys; a plain int period is accepted wherever a
key is expected (0 is the cumulative VWAP).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.base import TAs
from ..indicators.volume.vwap import VWAP, VWAPParams, VWAPsBuilderFactory
from .base import Analyzer, AnalyzerData


def _key(param: Any) -> VWAPParams:
    return VWAPsBuilderFactory.parse_key(param)


@dataclass(frozen=True)
class VWAPAnalyzerData(AnalyzerData):
    vwaps: TAs[VWAPParams, VWAP]

    def get_vwap(self, param: Any) -> VWAP:
        return self.vwaps.get(_key(param))

    def is_price_above_vwap(self, param: Any) -> bool:
        return self.get_vwap(param).is_price_above(self.candle.close)

    def is_price_below_vwap(self, param: Any) -> bool:
        return self.get_vwap(param).is_price_below(self.candle.close)

    def price_to_vwap_percent(self, param: Any) -> float:
        return self.get_vwap(param).price_to_vwap_percent(self.candle.close)

    def is_price_above_all_vwaps(self) -> bool:
        return self.vwaps.is_all(lambda v: v.is_price_above(self.candle.close))

    def is_price_below_all_vwaps(self) -> bool:
        return self.vwaps.is_all(lambda v: v.is_price_below(self.candle.close))

    def is_price_near_vwap(self, param: Any, threshold: float) -> bool:
        """Close within ``threshold`` percent of the VWAP."""
        return abs(self.price_to_vwap_percent(param)) < threshold

    def is_price_far_from_vwap(self, param: Any, threshold: float) -> bool:
        return abs(self.price_to_vwap_percent(param)) > threshold

    def __str__(self) -> str:
        return f"candle={self.candle}, vwaps={self.vwaps}"


class VWAPAnalyzer(Analyzer[VWAPAnalyzerData]):
    """
    Args:
        params: VWAP keys (VWAPParams or int periods); defaults to the
            cumulative VWAP only.
        storage: Candles to replay on construction.
        max_history: Optional history cap.
    """

    def __init__(
        self,
        params: Optional[Sequence[Any]],
        storage: CandleStore,
        max_history: Optional[int] = None,
    ):
        super().__init__(max_history)
        if params is None:
            self.vwaps_builder = VWAPsBuilderFactory.build_default()
        else:
            self.vwaps_builder = VWAPsBuilderFactory.build(params)
        self.params = self.vwaps_builder.keys
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> VWAPAnalyzerData:
        return VWAPAnalyzerData(candle, self.vwaps_builder.next(candle))

    def get_vwap(self, param: Any, index: int = 0) -> float:
        return self.get_value(index, lambda d: d.get_vwap(param).value)

    # -------------------------------------------------------------------------
    # Windows
    # -------------------------------------------------------------------------

    def is_price_above_vwap(self, param: Any, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_price_above_vwap(param), n, p)

    def is_price_below_vwap(self, param: Any, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_price_below_vwap(param), n, p)

    def is_price_above_all_vwaps(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_price_above_all_vwaps(), n, p)

    def is_price_below_all_vwaps(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.is_price_below_all_vwaps(), n, p)

    def is_price_above_vwap_signal(self, param: Any, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_price_above_vwap(param), n, m, p)

    def is_price_below_vwap_signal(self, param: Any, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_satisfying(lambda d: d.is_price_below_vwap(param), n, m, p)

    # -------------------------------------------------------------------------
    # Crossings and distance trends
    # -------------------------------------------------------------------------

    def _breakout_up_at(self, index: int, param: Any) -> bool:
        if len(self) < index + 2:
            return False
        return self.items[index].is_price_above_vwap(param) and not self.items[index + 1].is_price_above_vwap(param)

    def _breakdown_at(self, index: int, param: Any) -> bool:
        if len(self) < index + 2:
            return False
        return self.items[index].is_price_below_vwap(param) and not self.items[index + 1].is_price_below_vwap(param)

    def is_vwap_breakout_up(self, param: Any, p: int = 0) -> bool:
        """Close moved above the VWAP on item p."""
        return self._breakout_up_at(p, param)

    def is_vwap_breakdown(self, param: Any, p: int = 0) -> bool:
        """Close moved below the VWAP on item p."""
        return self._breakdown_at(p, param)

    def is_vwap_breakout_up_signal(self, param: Any, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_index(lambda i: self._breakout_up_at(i, param), n, m, p)

    def is_vwap_breakdown_signal(self, param: Any, n: int, m: int, p: int = 0) -> bool:
        return self.is_break_through_by_index(lambda i: self._breakdown_at(i, param), n, m, p)

    def is_vwap_rebound(self, param: Any, threshold: float, p: int = 0) -> bool:
        """
        Price touched the VWAP on item p+1 (within ``threshold`` percent)
        and moved away from it again on item p, in either direction.
        """
        if len(self) < p + 3:
            return False
        current, previous, earlier = (self.items[p + i].price_to_vwap_percent(param) for i in range(3))
        if abs(previous) >= threshold:
            return False
        up = current > previous and earlier < previous
        down = current < previous and earlier > previous
        return up or down

    def _distances(self, param: Any, n: int) -> Optional[Sequence[float]]:
        if n < 2 or len(self) < n + 1:
            return None
        return [abs(self.items[i].price_to_vwap_percent(param)) for i in range(n)]

    def is_diverging_from_vwap(self, param: Any, n: int) -> bool:
        """Distance from the VWAP grew on each of the last n items."""
        distances = self._distances(param, n)
        return distances is not None and all(a > b for a, b in zip(distances, distances[1:]))

    def is_converging_to_vwap(self, param: Any, n: int) -> bool:
        """Distance from the VWAP shrank on each of the last n items."""
        distances = self._distances(param, n)
        return distances is not None and all(a < b for a, b in zip(distances, distances[1:]))
