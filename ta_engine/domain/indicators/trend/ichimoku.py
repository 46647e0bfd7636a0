"""
Ichimoku Cloud Indicator.

Multi-component trend system built from Donchian midpoints
``(highest high + lowest low) / 2`` over three lookbacks:

- tenkan: midpoint over ``tenkan_period`` (default 9)
- kijun: midpoint over ``kijun_period`` (default 26)
- senkou_span_a: (tenkan + kijun) / 2
- senkou_span_b: midpoint over ``senkou_period`` (default 52)
- chikou: current close; ``chikou_reference`` is the close
  ``kijun_period`` bars back, the price the lagging span is compared with

The candle buffer is kept newest first and capped at
``2 * senkou_period``. Every component equals the current close until
``senkou_period`` candles are available.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from itertools import islice
from typing import Any, Deque, Sequence

from ...candle import Candle
from ...exceptions import IndicatorConfigError
from ..base import (
    IndicatorBuilder,
    IndicatorCategory,
    TAsBuilderFactory,
    require_positive_period,
)


@dataclass(frozen=True)
class IchimokuParams:
    """Hashable Ichimoku key; requires tenkan < kijun < senkou."""

    tenkan_period: int = 9
    kijun_period: int = 26
    senkou_period: int = 52

    def __post_init__(self) -> None:
        require_positive_period("ichimoku", self.tenkan_period, "tenkan_period")
        require_positive_period("ichimoku", self.kijun_period, "kijun_period")
        require_positive_period("ichimoku", self.senkou_period, "senkou_period")
        if not self.tenkan_period < self.kijun_period < self.senkou_period:
            raise IndicatorConfigError(
                "ichimoku",
                "periods must satisfy tenkan < kijun < senkou",
                tenkan_period=self.tenkan_period,
                kijun_period=self.kijun_period,
                senkou_period=self.senkou_period,
            )

    def __str__(self) -> str:
        return f"Ichimoku({self.tenkan_period},{self.kijun_period},{self.senkou_period})"


@dataclass(frozen=True)
class Ichimoku:
    """Ichimoku components at one point in time."""

    params: IchimokuParams
    tenkan: float = 0.0
    kijun: float = 0.0
    senkou_span_a: float = 0.0
    senkou_span_b: float = 0.0
    chikou: float = 0.0
    chikou_reference: float = 0.0

    @property
    def cloud_top(self) -> float:
        return max(self.senkou_span_a, self.senkou_span_b)

    @property
    def cloud_bottom(self) -> float:
        return min(self.senkou_span_a, self.senkou_span_b)

    def cloud_thickness(self) -> float:
        """Signed span A - span B (positive for a bullish cloud)."""
        return self.senkou_span_a - self.senkou_span_b

    def is_price_above_cloud(self, price: float) -> bool:
        return price > self.senkou_span_a and price > self.senkou_span_b

    def is_price_below_cloud(self, price: float) -> bool:
        return price < self.senkou_span_a and price < self.senkou_span_b

    def is_price_in_cloud(self, price: float) -> bool:
        return not self.is_price_above_cloud(price) and not self.is_price_below_cloud(price)

    def is_tenkan_above_kijun(self) -> bool:
        return self.tenkan > self.kijun

    def is_tenkan_below_kijun(self) -> bool:
        return self.tenkan < self.kijun

    def is_bullish_cloud(self) -> bool:
        return self.senkou_span_a > self.senkou_span_b

    def is_bearish_cloud(self) -> bool:
        return self.senkou_span_a < self.senkou_span_b

    def __str__(self) -> str:
        p = self.params
        return (
            f"Ichimoku({p.tenkan_period},{p.kijun_period},{p.senkou_period}: "
            f"T:{self.tenkan:.2f}, K:{self.kijun:.2f}, SpA:{self.senkou_span_a:.2f}, "
            f"SpB:{self.senkou_span_b:.2f}, C:{self.chikou:.2f})"
        )


def donchian_midpoint(candles: Sequence[Candle], period: int) -> float:
    """Midpoint of the highest high and lowest low of the first ``period`` candles."""
    window = list(islice(candles, period))
    if not window:
        return 0.0
    return (max(c.high for c in window) + min(c.low for c in window)) / 2.0


class IchimokuBuilder(IndicatorBuilder[Ichimoku]):
    """Incremental Ichimoku over a newest-first buffer."""

    name = "ichimoku"

    def __init__(self, tenkan_period: int = 9, kijun_period: int = 26, senkou_period: int = 52):
        self.params = IchimokuParams(tenkan_period, kijun_period, senkou_period)
        self._candles: Deque[Candle] = deque(maxlen=2 * senkou_period)

    @classmethod
    def from_params(cls, params: IchimokuParams) -> "IchimokuBuilder":
        return cls(params.tenkan_period, params.kijun_period, params.senkou_period)

    def reset(self) -> None:
        self._candles.clear()

    def _empty_snapshot(self) -> Ichimoku:
        return Ichimoku(self.params)

    def next(self, candle: Candle) -> Ichimoku:
        self._candles.appendleft(candle)
        p = self.params
        price = candle.close
        if len(self._candles) < p.senkou_period:
            return Ichimoku(p, price, price, price, price, price, price)

        tenkan = donchian_midpoint(self._candles, p.tenkan_period)
        kijun = donchian_midpoint(self._candles, p.kijun_period)
        span_b = donchian_midpoint(self._candles, p.senkou_period)
        reference = (
            self._candles[p.kijun_period].close
            if len(self._candles) > p.kijun_period
            else price
        )
        return Ichimoku(
            p,
            tenkan=tenkan,
            kijun=kijun,
            senkou_span_a=(tenkan + kijun) / 2.0,
            senkou_span_b=span_b,
            chikou=price,
            chikou_reference=reference,
        )


class IchimokusBuilderFactory(TAsBuilderFactory[IchimokuParams, Ichimoku]):
    family = "ichimoku"
    category = IndicatorCategory.TREND
    default_keys = (IchimokuParams(9, 26, 52),)

    @classmethod
    def parse_key(cls, raw: Any) -> IchimokuParams:
        """Accept IchimokuParams, a (tenkan, kijun, senkou) sequence or a mapping."""
        if isinstance(raw, IchimokuParams):
            return raw
        if isinstance(raw, dict):
            return IchimokuParams(
                raw.get("tenkan_period", raw.get("tenkan", 9)),
                raw.get("kijun_period", raw.get("kijun", 26)),
                raw.get("senkou_period", raw.get("senkou", 52)),
            )
        if isinstance(raw, Sequence) and len(raw) == 3:
            return IchimokuParams(*raw)
        raise IndicatorConfigError(cls.family, "key must be (tenkan, kijun, senkou)", key=raw)

    @classmethod
    def create_builder(cls, key: IchimokuParams) -> IchimokuBuilder:
        return IchimokuBuilder.from_params(key)
