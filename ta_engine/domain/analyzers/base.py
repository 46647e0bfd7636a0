"""
Analyzer base: newest-first history of indicator snapshots.

Every analyzer owns its indicator builders and a history of
AnalyzerData items (index 0 is the most recent candle). Predicates
inspect windows of that history:

- is_all(pred, n, p): items[p:p+n] all satisfy pred
- is_break_through_by_satisfying(pred, n, m, p): items[p:p+n] satisfy
  pred and the m items before them (items[p+n:p+n+m]) do not
- detect_buy_signal / detect_sell_signal: first index whose score
  reaches a threshold
- detect_pattern: every condition holds somewhere in the window
- is_volume_spike: recent volume against the older average
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Callable,
    Deque,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    TypeVar,
)

from ...utils.logging_setup import get_logger
from ..candle import Candle
from ..exceptions import ConfigurationError, InsufficientDataError
from ..indicators.base import TAs, TAsBuilder
from ..indicators.trend.ma import MovingAverage, ma_value

if TYPE_CHECKING:
    from ..candle_store import CandleStore

logger = get_logger(__name__)

D = TypeVar("D", bound="AnalyzerData")
T = TypeVar("T")


@dataclass(frozen=True)
class AnalyzerData:
    """One history entry: the candle plus the snapshots computed for it."""

    candle: Candle

    def get_rate_of_return(self, get_value: Callable[["AnalyzerData"], float]) -> float:
        """(close - value) / value for the value selected by ``get_value``."""
        value = get_value(self)
        return (self.candle.close - value) / value

    def is_candle_greater_than(
        self, candle_fn: Callable[[Candle], float], value_fn: Callable[["AnalyzerData"], float]
    ) -> bool:
        """True if ``candle_fn(candle)`` is above ``value_fn(self)``, e.g. low above an MA."""
        return candle_fn(self.candle) > value_fn(self)

    def is_candle_less_than(
        self, candle_fn: Callable[[Candle], float], value_fn: Callable[["AnalyzerData"], float]
    ) -> bool:
        return candle_fn(self.candle) < value_fn(self)

    def is_regular_arrangement(
        self, get: Callable[["AnalyzerData"], TAs], value_fn: Callable[[T], float]
    ) -> bool:
        return get(self).is_regular_arrangement(value_fn)

    def is_reverse_arrangement(
        self, get: Callable[["AnalyzerData"], TAs], value_fn: Callable[[T], float]
    ) -> bool:
        return get(self).is_reverse_arrangement(value_fn)


class Analyzer(ABC, Generic[D]):
    """
    Base class for stateful analyzers.

    Subclasses create their builders in ``__init__`` then call
    ``init_from_storage(store)``, and implement ``next_data``.

    Args:
        max_history: Optional cap on the number of retained items; the
            oldest item is dropped when exceeded. None keeps everything.
    """

    def __init__(self, max_history: Optional[int] = None):
        if max_history is not None and max_history <= 0:
            raise ConfigurationError(
                f"max_history must be positive, got {max_history}",
                context={"max_history": max_history},
            )
        self.max_history = max_history
        self._items: Deque[D] = deque(maxlen=max_history)

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    @abstractmethod
    def next_data(self, candle: Candle) -> D:
        """Advance the builders by one candle and bundle the snapshots."""
        pass

    def next(self, candle: Candle) -> D:
        """Compute the snapshot bundle for ``candle`` and make it item 0."""
        data = self.next_data(candle)
        self._items.appendleft(data)
        return data

    def init(self, candles: Iterable[Candle]) -> None:
        """Replay ``candles`` (oldest first) through ``next``."""
        for candle in candles:
            self.next(candle)

    def init_from_storage(self, store: "CandleStore") -> None:
        self.init(store.get_time_ordered_items())
        logger.debug(f"{type(self).__name__} initialised with {len(self._items)} items")

    @property
    def items(self) -> Sequence[D]:
        return self._items

    def get(self, index: int) -> Optional[D]:
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[D]:
        return iter(self._items)

    def _window(self, start: int, count: int) -> List[D]:
        return [self._items[i] for i in range(start, min(start + count, len(self._items)))]

    # -------------------------------------------------------------------------
    # Value access
    # -------------------------------------------------------------------------

    def get_value(self, index: int, get_value: Callable[[D], float]) -> float:
        """
        Value selected by ``get_value`` at history ``index``.

        Raises:
            InsufficientDataError: If the index is outside the history
                (also an IndexError).
        """
        return get_value(self._item_at(index))

    def get_rate_of_return(self, index: int, get_value: Callable[[D], float]) -> float:
        return self._item_at(index).get_rate_of_return(get_value)

    def _item_at(self, index: int) -> D:
        if not 0 <= index < len(self._items):
            raise InsufficientDataError(
                f"{type(self).__name__} has {len(self._items)} items, index {index} requested",
                required=index + 1,
                available=len(self._items),
            )
        return self._items[index]

    # -------------------------------------------------------------------------
    # Window predicates
    # -------------------------------------------------------------------------

    def is_all(self, predicate: Callable[[D], bool], n: int, p: int = 0) -> bool:
        """True if items[p:p+n] all satisfy ``predicate``; False if history is shorter."""
        if len(self._items) < n + p:
            return False
        return all(predicate(item) for item in self._window(p, n))

    def is_break_through_by_satisfying(
        self, predicate: Callable[[D], bool], n: int, m: int, p: int = 0
    ) -> bool:
        """
        True if items[p:p+n] satisfy ``predicate`` and items[p+n:p+n+m] do not.

        Detects a condition that started holding within the last ``n``
        items after failing for the ``m`` items before them.
        """
        if len(self._items) < n + m + p:
            return False
        if not all(predicate(item) for item in self._window(p, n)):
            return False
        return not any(predicate(item) for item in self._window(p + n, m))

    def is_all_by_index(self, predicate: Callable[[int], bool], n: int, p: int = 0) -> bool:
        """
        Like ``is_all`` but ``predicate`` receives the history index.

        Used for checks that compare an item with its neighbours.
        """
        if len(self._items) < n + p:
            return False
        return all(predicate(i) for i in range(p, p + n))

    def is_break_through_by_index(
        self, predicate: Callable[[int], bool], n: int, m: int, p: int = 0
    ) -> bool:
        """Like ``is_break_through_by_satisfying`` but over history indices."""
        if len(self._items) < n + m + p:
            return False
        if not all(predicate(i) for i in range(p, p + n)):
            return False
        return not any(predicate(i) for i in range(p + n, p + n + m))

    def is_regular_arrangement(
        self,
        get: Callable[[D], TAs],
        value_fn: Callable[[T], float],
        n: int,
        p: int = 0,
    ) -> bool:
        return self.is_all(lambda d: d.is_regular_arrangement(get, value_fn), n, p)

    def is_reverse_arrangement(
        self,
        get: Callable[[D], TAs],
        value_fn: Callable[[T], float],
        n: int,
        p: int = 0,
    ) -> bool:
        return self.is_all(lambda d: d.is_reverse_arrangement(get, value_fn), n, p)

    # -------------------------------------------------------------------------
    # Signal detection
    # -------------------------------------------------------------------------

    def _first_reaching(
        self, signal_fn: Callable[[D], float], n: int, p: int, threshold: float
    ) -> Optional[int]:
        if len(self._items) < n + p:
            return None
        for i in range(p, min(p + n, len(self._items))):
            if signal_fn(self._items[i]) >= threshold:
                return i
        return None

    def detect_buy_signal(
        self, signal_fn: Callable[[D], float], n: int, p: int = 0, threshold: float = 0.5
    ) -> Optional[int]:
        """Index of the first item in [p, p+n) whose buy score reaches ``threshold``."""
        return self._first_reaching(signal_fn, n, p, threshold)

    def detect_sell_signal(
        self, signal_fn: Callable[[D], float], n: int, p: int = 0, threshold: float = 0.5
    ) -> Optional[int]:
        """Index of the first item in [p, p+n) whose sell score reaches ``threshold``."""
        return self._first_reaching(signal_fn, n, p, threshold)

    def detect_pattern(
        self, conditions: Sequence[Callable[[D], bool]], n: int, p: int = 0
    ) -> bool:
        """True if every condition holds for at least one item in [p, p+n)."""
        if len(self._items) < n + p:
            return False
        window = self._window(p, n)
        return all(any(cond(item) for item in window) for cond in conditions)

    def is_volume_spike(self, n: int, p: int = 0, threshold: float = 2.0) -> bool:
        """
        True if any volume in items[p:p+n] exceeds ``threshold`` times the
        average volume of all older items.
        """
        total = len(self._items)
        if total <= n + p:
            return False
        older = self._window(n + p, total - n - p)
        avg_volume = sum(d.candle.volume for d in older) / len(older)
        return any(d.candle.volume > avg_volume * threshold for d in self._window(p, n))

    def __repr__(self) -> str:
        latest = self.get(0)
        if latest is None:
            return f"{type(self).__name__}(empty)"
        return f"{type(self).__name__}(items={len(self._items)}, latest={latest.candle})"


# =============================================================================
# MOVING AVERAGE PREDICATES
# =============================================================================

class MovingAverageMixin:
    """
    Predicates over an ``mas`` TAs of moving averages.

    Mixed into analyzers whose data items expose ``mas``.
    """

    mas_builder: TAsBuilder[int, MovingAverage]

    def is_ma_regular_arrangement(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.mas.is_regular_arrangement(ma_value), n, p)

    def is_ma_reverse_arrangement(self, n: int, p: int = 0) -> bool:
        return self.is_all(lambda d: d.mas.is_reverse_arrangement(ma_value), n, p)

    def is_ma_regular_arrangement_golden_cross(self, n: int, m: int) -> bool:
        return self.is_break_through_by_satisfying(
            lambda d: d.mas.is_regular_arrangement(ma_value), n, m
        )

    def is_ma_reverse_arrangement_dead_cross(self, n: int, m: int) -> bool:
        return self.is_break_through_by_satisfying(
            lambda d: d.mas.is_reverse_arrangement(ma_value), n, m
        )

    def get_ma(self, index: int) -> float:
        """Latest value of the MA at key position ``index``."""
        return self.get_value(0, lambda d: d.mas.get_from_index(index).value)

    def is_ma_crossed(self, short_index: int, long_index: int) -> bool:
        """True if the short/long MA ordering changed between the last two items."""
        if len(self) < 2:
            return False
        current, previous = self.items[0], self.items[1]
        now = current.mas.get_from_index(short_index).value > current.mas.get_from_index(long_index).value
        before = previous.mas.get_from_index(short_index).value > previous.mas.get_from_index(long_index).value
        return now != before

    def is_ma_less_than_rate_of_return(self, index: int, rate_of_return: float, n: int) -> bool:
        """Close-vs-MA return stays below ``rate_of_return`` for n items."""
        return self.is_all(
            lambda d: d.get_rate_of_return(lambda x: x.mas.get_from_index(index).value) < rate_of_return,
            n,
        )

    def is_ma_greater_than_rate_of_return(self, index: int, rate_of_return: float, n: int) -> bool:
        """Close-vs-MA return stays above ``rate_of_return`` for n items."""
        return self.is_all(
            lambda d: d.get_rate_of_return(lambda x: x.mas.get_from_index(index).value) > rate_of_return,
            n,
        )

