"""
Candle value type and pandas conversion helpers.

A Candle is one OHLCV bar. Timestamps are integer epoch milliseconds so
ordering and deduplication compare exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

import numpy as np
import pandas as pd

OHLCV_COLUMNS = ["open", "high", "low", "close", "volume"]


@dataclass(frozen=True)
class Candle:
    """One OHLCV bar, immutable once created."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3.0

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def range(self) -> float:
        return self.high - self.low

    def is_bullish(self) -> bool:
        return self.close > self.open

    def is_bearish(self) -> bool:
        return self.close < self.open


def _index_to_millis(index: pd.Index) -> np.ndarray:
    if isinstance(index, pd.DatetimeIndex):
        if index.tz is not None:
            index = index.tz_convert("UTC").tz_localize(None)
        return index.to_numpy(dtype="datetime64[ms]").astype(np.int64)
    return index.to_numpy(dtype=np.int64)


def candles_from_dataframe(df: pd.DataFrame) -> List[Candle]:
    """
    Convert an OHLCV DataFrame into candles (row order preserved).

    Timestamps come from a ``timestamp`` column when present, otherwise
    from the index. Datetime values are converted to epoch milliseconds.

    Raises:
        ValueError: If a required OHLC column is missing.
    """
    missing = [col for col in OHLCV_COLUMNS[:4] if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    if "timestamp" in df.columns:
        ts_col = df["timestamp"]
        if pd.api.types.is_datetime64_any_dtype(ts_col):
            timestamps = _index_to_millis(pd.DatetimeIndex(ts_col))
        else:
            timestamps = ts_col.to_numpy(dtype=np.int64)
    else:
        timestamps = _index_to_millis(df.index)

    volume = (
        df["volume"].to_numpy(dtype=np.float64)
        if "volume" in df.columns
        else np.zeros(len(df), dtype=np.float64)
    )

    return [
        Candle(int(ts), float(o), float(h), float(l), float(c), float(v))
        for ts, o, h, l, c, v in zip(
            timestamps,
            df["open"].to_numpy(dtype=np.float64),
            df["high"].to_numpy(dtype=np.float64),
            df["low"].to_numpy(dtype=np.float64),
            df["close"].to_numpy(dtype=np.float64),
            volume,
        )
    ]


def candles_to_dataframe(candles: Iterable[Candle]) -> pd.DataFrame:
    """Convert candles to a DataFrame indexed by ``timestamp`` (input order kept)."""
    rows = [
        (c.timestamp, c.open, c.high, c.low, c.close, c.volume) for c in candles
    ]
    df = pd.DataFrame(rows, columns=["timestamp", *OHLCV_COLUMNS])
    return df.set_index("timestamp")
