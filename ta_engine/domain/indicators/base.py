"""
Incremental indicator builder base and multi-series container.

Defines the unified interface for every streaming indicator:

- IndicatorBuilder: stateful builder producing immutable snapshots via
  ``next(candle)`` (one observation) or ``build(candles)`` (reset + replay)
- TAs / TAsBuilder: keyed, order-preserving collection of snapshots /
  builders (e.g. three RSIs with periods 9, 14 and 25)
- TAsBuilderFactory: per-family factory that turns a key list into a
  TAsBuilder; concrete factories are auto-discovered by the registry

Consistency law: for every builder ``b`` and candle sequence ``cs``,
``b.build(cs)`` equals the last value of ``[b2.next(c) for c in cs]``.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    ClassVar,
    Dict,
    Generic,
    Hashable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

from ...utils.logging_setup import get_logger
from ..candle import Candle
from ..exceptions import IndicatorConfigError

if TYPE_CHECKING:
    from ..candle_store import CandleStore

logger = get_logger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


class IndicatorCategory(Enum):
    """Category of an indicator family, mirrors the package it lives in."""

    MOMENTUM = "momentum"
    TREND = "trend"
    VOLATILITY = "volatility"
    VOLUME = "volume"


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def require_positive_period(indicator: str, period: int, name: str = "period") -> int:
    """Raise IndicatorConfigError unless ``period`` is a positive integer."""
    if isinstance(period, bool) or not isinstance(period, int) or period <= 0:
        logger.error(f"{indicator}: invalid {name}={period!r}")
        raise IndicatorConfigError(indicator, f"{name} must be a positive integer", **{name: period})
    return period


def require_positive_multiplier(indicator: str, multiplier: float, name: str = "multiplier") -> float:
    """Raise IndicatorConfigError unless ``multiplier`` is finite and > 0."""
    try:
        value = float(multiplier)
    except (TypeError, ValueError):
        raise IndicatorConfigError(indicator, f"{name} must be a number", **{name: multiplier})
    if not math.isfinite(value) or value <= 0.0:
        logger.error(f"{indicator}: invalid {name}={multiplier!r}")
        raise IndicatorConfigError(indicator, f"{name} must be finite and positive", **{name: multiplier})
    return value


def finite_or(value: float, default: float) -> float:
    """Return ``value`` unless it is NaN or infinite."""
    return value if math.isfinite(value) else default


def is_strictly_decreasing(values: Sequence[float]) -> bool:
    """True if each value is strictly less than the previous one (empty is True)."""
    return all(a > b for a, b in zip(values, values[1:]))


def is_strictly_increasing(values: Sequence[float]) -> bool:
    """True if each value is strictly greater than the previous one (empty is True)."""
    return all(a < b for a, b in zip(values, values[1:]))


class WilderSmoother:
    """
    Wilder's smoothing ``avg = (prev * (n - 1) + x) / n``.

    Seeded with the simple mean of the first ``period`` samples; ``value``
    is None before that. ``partial_mean`` exposes the running mean of the
    seed samples seen so far.
    """

    def __init__(self, period: int):
        self.period = period
        self.reset()

    def reset(self) -> None:
        self.value: Optional[float] = None
        self._seed_sum = 0.0
        self._count = 0

    @property
    def ready(self) -> bool:
        return self.value is not None

    @property
    def partial_mean(self) -> float:
        return self._seed_sum / self._count if self._count else 0.0

    def update(self, x: float) -> Optional[float]:
        if self.value is None:
            self._seed_sum += x
            self._count += 1
            if self._count == self.period:
                self.value = self._seed_sum / self.period
            return self.value
        self.value = (self.value * (self.period - 1) + x) / self.period
        return self.value


# =============================================================================
# BUILDER BASE
# =============================================================================

class IndicatorBuilder(ABC, Generic[T]):
    """
    Base class for incremental indicator builders.

    Subclasses hold only a bounded rolling window plus recurrence state
    and implement:
    - next(): consume one candle, return the updated snapshot
    - reset(): clear all internal state
    - _empty_snapshot(): value returned by ``build([])``
    """

    name: str = ""

    def build(self, candles: Sequence[Candle]) -> T:
        """
        Reset state, replay ``candles`` oldest-to-newest, return the final snapshot.

        Args:
            candles: Candles ordered oldest first.

        Returns:
            Snapshot after the last candle, or the empty snapshot if none.
        """
        self.reset()
        result = self._empty_snapshot()
        for candle in candles:
            result = self.next(candle)
        return result

    def from_storage(self, store: "CandleStore") -> T:
        """Build from every candle held by a CandleStore."""
        return self.build(store.get_time_ordered_items())

    @abstractmethod
    def next(self, candle: Candle) -> T:
        """Consume one candle and return the updated snapshot."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Clear all internal state."""
        pass

    @abstractmethod
    def _empty_snapshot(self) -> T:
        pass


# =============================================================================
# MULTI-SERIES CONTAINER
# =============================================================================

class TAs(Generic[K, T]):
    """
    Keyed, order-preserving collection of indicator snapshots.

    Key order is fixed at construction; index 0 is conventionally the
    shortest period. Arrangement queries read values in key order.
    """

    __slots__ = ("name", "_keys", "_values")

    def __init__(self, name: str, keys: Sequence[K], values: Dict[K, T]):
        self.name = name
        self._keys: Tuple[K, ...] = tuple(keys)
        self._values: Dict[K, T] = dict(values)

    @property
    def keys(self) -> Tuple[K, ...]:
        return self._keys

    def get(self, key: K) -> T:
        """
        Snapshot for ``key``.

        Raises:
            KeyError: If ``key`` was not configured.
        """
        try:
            return self._values[key]
        except KeyError:
            raise KeyError(f"{self.name}: unknown key {key!r}") from None

    def get_by_key_index(self, index: int) -> T:
        """Snapshot at key position ``index`` (IndexError when out of range)."""
        return self._values[self._keys[index]]

    get_from_index = get_by_key_index

    def values(self) -> List[T]:
        """Snapshots in key order."""
        return [self._values[k] for k in self._keys]

    def items(self) -> List[Tuple[K, T]]:
        return [(k, self._values[k]) for k in self._keys]

    def is_regular_arrangement(self, value_fn: Callable[[T], float]) -> bool:
        """True if values are strictly decreasing in key order."""
        return is_strictly_decreasing([value_fn(v) for v in self.values()])

    def is_reverse_arrangement(self, value_fn: Callable[[T], float]) -> bool:
        """True if values are strictly increasing in key order."""
        return is_strictly_increasing([value_fn(v) for v in self.values()])

    def is_all(self, predicate: Callable[[T], bool]) -> bool:
        return all(predicate(v) for v in self.values())

    def is_any(self, predicate: Callable[[T], bool]) -> bool:
        return any(predicate(v) for v in self.values())

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[T]:
        return iter(self.values())

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TAs):
            return NotImplemented
        return self._keys == other._keys and self._values == other._values

    def __repr__(self) -> str:
        inner = ", ".join(str(v) for v in self.values())
        return f"{self.name}[{inner}]"


class TAsBuilder(IndicatorBuilder[TAs[K, T]]):
    """
    Owns one child builder per key and fans every call out to all of them.

    Children never fail after construction (they return warm-up
    placeholders), so the aggregate snapshot always contains every key.
    """

    def __init__(
        self,
        name: str,
        keys: Sequence[K],
        factory: Callable[[K], IndicatorBuilder[T]],
    ):
        keys = list(keys)
        if not keys:
            raise IndicatorConfigError(name, "at least one key is required")
        if len(set(keys)) != len(keys):
            raise IndicatorConfigError(name, "keys must be unique", keys=keys)

        self.name = name
        self._keys: Tuple[K, ...] = tuple(keys)
        self._builders: Dict[K, IndicatorBuilder[T]] = {k: factory(k) for k in keys}
        logger.debug(f"Created {name} builder for keys {keys}")

    @property
    def keys(self) -> Tuple[K, ...]:
        return self._keys

    def builder(self, key: K) -> IndicatorBuilder[T]:
        return self._builders[key]

    def build(self, candles: Sequence[Candle]) -> TAs[K, T]:
        return TAs(
            self.name,
            self._keys,
            {k: b.build(candles) for k, b in self._builders.items()},
        )

    def next(self, candle: Candle) -> TAs[K, T]:
        return TAs(
            self.name,
            self._keys,
            {k: b.next(candle) for k, b in self._builders.items()},
        )

    def reset(self) -> None:
        for b in self._builders.values():
            b.reset()

    def _empty_snapshot(self) -> TAs[K, T]:
        return TAs(
            self.name,
            self._keys,
            {k: b._empty_snapshot() for k, b in self._builders.items()},
        )


# =============================================================================
# FAMILY FACTORY
# =============================================================================

class TAsBuilderFactory(ABC, Generic[K, T]):
    """
    Factory turning a list of keys into a TAsBuilder for one indicator family.

    Class attributes:
    - family: registry name (e.g., "rsi"); empty for abstract factories
    - category: IndicatorCategory of the family
    - default_keys / common_keys: presets for build_default / build_common
    """

    family: ClassVar[str] = ""
    category: ClassVar[IndicatorCategory]
    default_keys: ClassVar[Tuple[Any, ...]] = ()
    common_keys: ClassVar[Tuple[Any, ...]] = ()

    @classmethod
    @abstractmethod
    def create_builder(cls, key: K) -> IndicatorBuilder[T]:
        """Create the child builder for one key."""
        pass

    @classmethod
    def parse_key(cls, raw: Any) -> K:
        """Convert a configuration value (int, list or mapping) into a key."""
        return raw

    @classmethod
    def validate_keys(cls, keys: Sequence[K]) -> None:
        """Hook for family-specific key list checks."""
        pass

    @classmethod
    def build(cls, keys: Sequence[Any]) -> TAsBuilder[K, T]:
        parsed = [cls.parse_key(k) for k in keys]
        cls.validate_keys(parsed)
        return TAsBuilder(f"{cls.family}s", parsed, cls.create_builder)

    @classmethod
    def build_default(cls) -> TAsBuilder[K, T]:
        return cls.build(cls.default_keys)

    @classmethod
    def build_common(cls) -> TAsBuilder[K, T]:
        return cls.build(cls.common_keys or cls.default_keys)
