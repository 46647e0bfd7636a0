"""Ichimoku cloud analyzer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..candle import Candle
from ..candle_store import CandleStore
from ..indicators.base import TAs
from ..indicators.trend.ichimoku import Ichimoku, IchimokuParams, IchimokusBuilderFactory
from .base import Analyzer, AnalyzerData


@dataclass(frozen=True)
class IchimokuAnalyzerData(AnalyzerData):
    ichimokus: TAs[IchimokuParams, Ichimoku]

    def is_price_above_cloud(self, params: IchimokuParams) -> bool:
        return self.ichimokus.get(params).is_price_above_cloud(self.candle.close)

    def is_price_below_cloud(self, params: IchimokuParams) -> bool:
        return self.ichimokus.get(params).is_price_below_cloud(self.candle.close)

    def is_price_in_cloud(self, params: IchimokuParams) -> bool:
        return self.ichimokus.get(params).is_price_in_cloud(self.candle.close)

    def is_tenkan_above_kijun(self, params: IchimokuParams) -> bool:
        return self.ichimokus.get(params).is_tenkan_above_kijun()

    def is_tenkan_below_kijun(self, params: IchimokuParams) -> bool:
        return self.ichimokus.get(params).is_tenkan_below_kijun()

    def cloud_thickness(self, params: IchimokuParams) -> float:
        return self.ichimokus.get(params).cloud_thickness()

    def is_buy_signal(self, params: IchimokuParams) -> bool:
        """Close above a bullish cloud with tenkan above kijun."""
        ichimoku = self.ichimokus.get(params)
        return (
            ichimoku.is_price_above_cloud(self.candle.close)
            and ichimoku.is_bullish_cloud()
            and ichimoku.is_tenkan_above_kijun()
        )

    def is_sell_signal(self, params: IchimokuParams) -> bool:
        """Close below a bearish cloud with tenkan below kijun."""
        ichimoku = self.ichimokus.get(params)
        return (
            ichimoku.is_price_below_cloud(self.candle.close)
            and ichimoku.is_bearish_cloud()
            and ichimoku.is_tenkan_below_kijun()
        )


class IchimokuAnalyzer(Analyzer[IchimokuAnalyzerData]):
    """
    Args:
        params: IchimokuParams (or (tenkan, kijun, senkou) tuples);
            defaults to (9, 26, 52).
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
            self.ichimokus_builder = IchimokusBuilderFactory.build_default()
        else:
            self.ichimokus_builder = IchimokusBuilderFactory.build(params)
        self.params = self.ichimokus_builder.keys
        self.init_from_storage(storage)

    def next_data(self, candle: Candle) -> IchimokuAnalyzerData:
        return IchimokuAnalyzerData(candle, self.ichimokus_builder.next(candle))

    def is_price_above_cloud(self, params: IchimokuParams, n: int) -> bool:
        return self.is_all(lambda d: d.is_price_above_cloud(params), n)

    def is_price_below_cloud(self, params: IchimokuParams, n: int) -> bool:
        return self.is_all(lambda d: d.is_price_below_cloud(params), n)

    def is_tenkan_above_kijun(self, params: IchimokuParams, n: int) -> bool:
        return self.is_all(lambda d: d.is_tenkan_above_kijun(params), n)

    def _changed_to(self, predicate) -> bool:
        if len(self) < 2:
            return False
        return predicate(self.items[0]) and not predicate(self.items[1])

    def is_golden_cross(self, params: IchimokuParams) -> bool:
        """Tenkan moved above kijun on the latest candle."""
        return self._changed_to(lambda d: d.is_tenkan_above_kijun(params))

    def is_dead_cross(self, params: IchimokuParams) -> bool:
        """Tenkan moved below kijun on the latest candle."""
        return self._changed_to(lambda d: d.is_tenkan_below_kijun(params))

    def is_cloud_breakout_up(self, params: IchimokuParams) -> bool:
        return self._changed_to(lambda d: d.is_price_above_cloud(params))

    def is_cloud_breakdown(self, params: IchimokuParams) -> bool:
        return self._changed_to(lambda d: d.is_price_below_cloud(params))

    def is_buy_signal(self, params: IchimokuParams, n: int) -> bool:
        return self.is_all(lambda d: d.is_buy_signal(params), n)

    def is_sell_signal(self, params: IchimokuParams, n: int) -> bool:
        return self.is_all(lambda d: d.is_sell_signal(params), n)

    def is_cloud_thickening(self, params: IchimokuParams, n: int) -> bool:
        """Absolute cloud thickness grew on each of the last n steps."""
        if len(self) < n + 1:
            return False
        return all(
            abs(self.items[i].cloud_thickness(params)) > abs(self.items[i + 1].cloud_thickness(params))
            for i in range(n)
        )
