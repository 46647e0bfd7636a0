"""
ADX (Average Directional Index) Indicator.

Measures trend strength regardless of direction. Recomputed on every
candle over a rolling window of ``2 * period`` candles:

- True Range, +DM and -DM per candle
- Wilder-smoothed sums seeded with the first ``period`` values
- +DI / -DI from the smoothed sums, DX = |+DI - -DI| / (+DI + -DI) * 100
- ADX = mean of the ``period`` DX values in the window

Interpretation:
- ADX < 25: Weak or no trend
- ADX 25-50: Strong trend
- ADX > 50: Very strong trend

All components are 0 until the window is full.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Tuple

import numpy as np

from ...candle import Candle
from ..base import (
    IndicatorBuilder,
    IndicatorCategory,
    TAsBuilderFactory,
    finite_or,
    require_positive_period,
)


@dataclass(frozen=True)
class ADX:
    """ADX with its directional indicators, all within [0, 100]."""

    period: int
    adx: float
    plus_di: float = 0.0
    minus_di: float = 0.0

    def get(self) -> float:
        return self.adx

    def __str__(self) -> str:
        return f"ADX({self.period}: {self.adx:.2f})"


def adx_value(adx: ADX) -> float:
    return adx.adx


def _bounded(value: float) -> float:
    return min(max(finite_or(value, 0.0), 0.0), 100.0)


def calculate_adx(
    high: np.ndarray, low: np.ndarray, close: np.ndarray, period: int
) -> Tuple[float, float, float]:
    """
    ADX, +DI and -DI at the last bar of the given arrays.

    Requires ``len(close) >= 2 * period``; returns zeros otherwise.
    """
    n = len(close)
    if n < 2 * period:
        return 0.0, 0.0, 0.0

    prev_close = close[:-1]
    tr = np.maximum.reduce([
        high[1:] - low[1:],
        np.abs(high[1:] - prev_close),
        np.abs(low[1:] - prev_close),
    ])

    up_move = high[1:] - high[:-1]
    down_move = low[:-1] - low[1:]
    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)

    smoothed_tr = float(np.sum(tr[:period]))
    smoothed_plus = float(np.sum(plus_dm[:period]))
    smoothed_minus = float(np.sum(minus_dm[:period]))

    dx_values = []
    plus_di = minus_di = 0.0
    for i in range(period - 1, len(tr)):
        if i >= period:
            smoothed_tr = smoothed_tr - smoothed_tr / period + tr[i]
            smoothed_plus = smoothed_plus - smoothed_plus / period + plus_dm[i]
            smoothed_minus = smoothed_minus - smoothed_minus / period + minus_dm[i]

        if smoothed_tr != 0:
            plus_di = 100.0 * smoothed_plus / smoothed_tr
            minus_di = 100.0 * smoothed_minus / smoothed_tr
        else:
            plus_di = minus_di = 0.0

        di_sum = plus_di + minus_di
        dx_values.append(100.0 * abs(plus_di - minus_di) / di_sum if di_sum != 0 else 0.0)

    adx = float(np.mean(dx_values[-period:]))
    return _bounded(adx), _bounded(plus_di), _bounded(minus_di)


class ADXBuilder(IndicatorBuilder[ADX]):
    """ADX over a rolling ``2 * period`` candle window."""

    name = "adx"

    def __init__(self, period: int = 14):
        self.period = require_positive_period(self.name, period)
        size = 2 * period
        self._high: Deque[float] = deque(maxlen=size)
        self._low: Deque[float] = deque(maxlen=size)
        self._close: Deque[float] = deque(maxlen=size)

    def reset(self) -> None:
        self._high.clear()
        self._low.clear()
        self._close.clear()

    def _empty_snapshot(self) -> ADX:
        return ADX(self.period, 0.0)

    def next(self, candle: Candle) -> ADX:
        self._high.append(candle.high)
        self._low.append(candle.low)
        self._close.append(candle.close)
        if len(self._close) < 2 * self.period:
            return ADX(self.period, 0.0)

        adx, plus_di, minus_di = calculate_adx(
            np.fromiter(self._high, dtype=np.float64),
            np.fromiter(self._low, dtype=np.float64),
            np.fromiter(self._close, dtype=np.float64),
            self.period,
        )
        return ADX(self.period, adx, plus_di, minus_di)


class ADXsBuilderFactory(TAsBuilderFactory[int, ADX]):
    family = "adx"
    category = IndicatorCategory.TREND
    default_keys = (14,)

    @classmethod
    def parse_key(cls, raw: object) -> int:
        return require_positive_period(cls.family, raw)

    @classmethod
    def create_builder(cls, key: int) -> ADXBuilder:
        return ADXBuilder(key)
