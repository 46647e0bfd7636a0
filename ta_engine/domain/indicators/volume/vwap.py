"""
Volume Weighted Average Price (VWAP) Indicator.

Average typical price ``(high + low + close) / 3`` weighted by volume:

    VWAP = sum(typical_price * volume) / sum(volume)

Period semantics:
- period = 0: cumulative since the last reset (session VWAP)
- period > 0: rolling over the last ``period`` candles; while fewer
  candles have been seen the current typical price is reported

VWAP is 0.0 when the weighted window carries no volume.

Signals:
- Close above VWAP: buyers in control
- Close below VWAP: sellers in control
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Tuple

from ...candle import Candle
from ...exceptions import IndicatorConfigError
from ..base import IndicatorBuilder, IndicatorCategory, TAsBuilderFactory

MIN_VOLUME = 1e-12


@dataclass(frozen=True)
class VWAPParams:
    """Hashable VWAP key; period 0 means cumulative."""

    period: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.period, bool) or not isinstance(self.period, int) or self.period < 0:
            raise IndicatorConfigError("vwap", "period must be a non-negative integer", period=self.period)

    def __str__(self) -> str:
        return f"VWAP({self.period})"


@dataclass(frozen=True)
class VWAP:
    params: VWAPParams
    value: float = 0.0

    def get(self) -> float:
        return self.value

    def is_price_above(self, price: float) -> bool:
        return price > self.value

    def is_price_below(self, price: float) -> bool:
        return price < self.value

    def price_to_vwap_percent(self, price: float) -> float:
        """Distance of ``price`` from VWAP in percent; 0.0 when VWAP is 0."""
        if self.value == 0.0:
            return 0.0
        return (price - self.value) / self.value * 100.0

    def __str__(self) -> str:
        return f"VWAP({self.params.period}: {self.value:.2f})"


class VWAPBuilder(IndicatorBuilder[VWAP]):
    """Running price-volume and volume sums over a rolling or cumulative window."""

    name = "vwap"

    def __init__(self, period: int = 0):
        self.params = VWAPParams(period)
        self._window: Deque[Tuple[float, float]] = deque()
        self._pv_sum = 0.0
        self._volume_sum = 0.0
        self._count = 0

    @classmethod
    def from_params(cls, params: VWAPParams) -> "VWAPBuilder":
        return cls(params.period)

    @property
    def period(self) -> int:
        return self.params.period

    def reset(self) -> None:
        """Clear the window; call at session boundaries for a daily VWAP."""
        self._window.clear()
        self._pv_sum = 0.0
        self._volume_sum = 0.0
        self._count = 0

    def _empty_snapshot(self) -> VWAP:
        return VWAP(self.params)

    def next(self, candle: Candle) -> VWAP:
        price = candle.typical_price
        volume = candle.volume
        self._count += 1

        if self.period > 0:
            if len(self._window) == self.period:
                old_price, old_volume = self._window.popleft()
                self._pv_sum -= old_price * old_volume
                self._volume_sum -= old_volume
            self._window.append((price, volume))
        self._pv_sum += price * volume
        self._volume_sum += volume

        if self.period > 0 and self._count < self.period:
            return VWAP(self.params, price)
        if self._volume_sum < MIN_VOLUME:
            return VWAP(self.params, 0.0)
        return VWAP(self.params, self._pv_sum / self._volume_sum)


class VWAPsBuilderFactory(TAsBuilderFactory[VWAPParams, VWAP]):
    family = "vwap"
    category = IndicatorCategory.VOLUME
    default_keys = (VWAPParams(0),)
    common_keys = (VWAPParams(0), VWAPParams(20), VWAPParams(50))

    @classmethod
    def parse_key(cls, raw: Any) -> VWAPParams:
        """Accept VWAPParams, an int period or a mapping with ``period``."""
        if isinstance(raw, VWAPParams):
            return raw
        if isinstance(raw, dict):
            return VWAPParams(raw.get("period", 0))
        if isinstance(raw, int):
            return VWAPParams(raw)
        raise IndicatorConfigError(cls.family, "key must be a period or VWAPParams", key=raw)

    @classmethod
    def create_builder(cls, key: VWAPParams) -> VWAPBuilder:
        return VWAPBuilder.from_params(key)
