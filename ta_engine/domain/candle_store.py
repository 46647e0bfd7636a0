"""
Bounded, newest-first candle buffer.

CandleStore keeps candles ordered by timestamp descending (index 0 is the
newest), caps its length at ``max_size`` by dropping the oldest entries
and optionally ignores a candle whose timestamp equals the newest one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Tuple

import pandas as pd

from ..utils.logging_setup import get_logger
from .candle import Candle, candles_from_dataframe, candles_to_dataframe
from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from config.models import CandleStoreConfig

logger = get_logger(__name__)


class CandleStore:
    """
    Ordered candle storage, newest first.

    Invariants:
        - len(store) <= max_size
        - timestamps are non-increasing from index 0 onwards
          (strictly decreasing when dedup is enabled and candles arrive in order)
    """

    def __init__(
        self,
        items: Iterable[Candle] = (),
        max_size: int = 1000,
        dedup: bool = True,
    ):
        if max_size <= 0:
            raise ConfigurationError(
                f"max_size must be positive, got {max_size}",
                context={"max_size": max_size},
            )
        self.max_size = max_size
        self.dedup = dedup
        # Stable sort keeps insertion order among equal timestamps
        self._items: List[Candle] = sorted(
            items, key=lambda c: c.timestamp, reverse=True
        )
        if len(self._items) > max_size:
            logger.debug(
                f"CandleStore truncating initial batch {len(self._items)} -> {max_size}"
            )
            del self._items[max_size:]

    @classmethod
    def from_config(
        cls, config: "CandleStoreConfig", items: Iterable[Candle] = ()
    ) -> "CandleStore":
        return cls(items, max_size=config.max_size, dedup=config.dedup)

    @classmethod
    def from_dataframe(
        cls, df: pd.DataFrame, max_size: int = 1000, dedup: bool = True
    ) -> "CandleStore":
        """Create a store from an OHLCV DataFrame (any row order)."""
        return cls(candles_from_dataframe(df), max_size=max_size, dedup=dedup)

    def to_dataframe(self) -> pd.DataFrame:
        """Oldest-first DataFrame of the stored candles."""
        return candles_to_dataframe(self.get_time_ordered_items())

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add(self, candle: Candle) -> None:
        """
        Insert a candle at its descending-order position.

        With dedup enabled, a candle whose timestamp equals the newest
        stored timestamp is ignored and the existing entry is kept.
        """
        if self.dedup and self._items and self._items[0].timestamp == candle.timestamp:
            logger.debug(f"CandleStore dropped duplicate timestamp {candle.timestamp}")
            return

        self._items.insert(self._insertion_index(candle.timestamp), candle)

        if len(self._items) > self.max_size:
            del self._items[self.max_size:]

    def _insertion_index(self, timestamp: int) -> int:
        # First position whose timestamp is strictly older than the new one,
        # so equal timestamps keep insertion order.
        lo, hi = 0, len(self._items)
        while lo < hi:
            mid = (lo + hi) // 2
            if self._items[mid].timestamp >= timestamp:
                lo = mid + 1
            else:
                hi = mid
        return lo

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Candle]:
        return iter(self._items)

    def is_empty(self) -> bool:
        return not self._items

    @property
    def items(self) -> Tuple[Candle, ...]:
        """Snapshot of stored candles, newest first."""
        return tuple(self._items)

    def first(self) -> Optional[Candle]:
        """Newest candle."""
        return self._items[0] if self._items else None

    def last(self) -> Optional[Candle]:
        """Oldest candle."""
        return self._items[-1] if self._items else None

    def get(self, index: int) -> Optional[Candle]:
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def get_time_ordered_items(self) -> List[Candle]:
        """New list of candles, oldest first."""
        return self._items[::-1]

    get_ascending_items = get_time_ordered_items
    get_reversed_items = get_time_ordered_items

    def is_rise(self, n: int) -> bool:
        """True if the closes of the n newest candles strictly rise towards the newest."""
        count = min(len(self._items), n)
        if count < 2:
            return False
        return all(
            self._items[i].close > self._items[i + 1].close for i in range(count - 1)
        )

    def is_fall(self, n: int) -> bool:
        """True if the closes of the n newest candles strictly fall towards the newest."""
        count = min(len(self._items), n)
        if count < 2:
            return False
        return all(
            self._items[i].close < self._items[i + 1].close for i in range(count - 1)
        )

    def __repr__(self) -> str:
        return f"CandleStore(len={len(self._items)}, max_size={self.max_size}, dedup={self.dedup})"
