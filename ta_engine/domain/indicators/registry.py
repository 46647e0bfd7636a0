"""
Indicator Registry - Auto-discovery and management of indicator families.

Provides:
- Auto-discovery of TAsBuilderFactory classes from category packages
- Registration and lookup by family name ("rsi", "sma", "supertrend", ...)
- Filtering by category
- Creation of multi-series builders from configuration key lists
"""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Type

from ...utils.logging_setup import get_logger
from ..exceptions import IndicatorConfigError
from .base import IndicatorCategory, TAsBuilder, TAsBuilderFactory

logger = get_logger(__name__)

FactoryType = Type[TAsBuilderFactory]


class IndicatorRegistry:
    """
    Registry for indicator family discovery and management.

    Auto-discovers concrete factories from category packages (momentum/,
    trend/, volatility/, volume/) and provides lookup by family or category.
    """

    def __init__(self) -> None:
        self._factories: Dict[str, FactoryType] = {}
        self._by_category: Dict[IndicatorCategory, Set[str]] = {
            cat: set() for cat in IndicatorCategory
        }

    def clear(self) -> None:
        """Clear all registered factories."""
        self._factories.clear()
        for cat in self._by_category:
            self._by_category[cat].clear()

    def discover(self) -> int:
        """
        Auto-discover factories from category packages.

        Returns:
            Number of families discovered
        """
        discovered = 0
        for category in IndicatorCategory:
            discovered += self._discover_package(category.value)

        logger.info(f"Discovered {discovered} indicator families across {len(IndicatorCategory)} categories")
        return discovered

    def _discover_package(self, category: str) -> int:
        package_name = f"{__package__}.{category}"
        package = importlib.import_module(package_name)
        package_path = Path(package.__file__).parent

        discovered = 0
        for module_info in pkgutil.iter_modules([str(package_path)]):
            if module_info.name.startswith("_"):
                continue

            module = importlib.import_module(f"{package_name}.{module_info.name}")
            for attr_name in dir(module):
                if attr_name.startswith("_"):
                    continue
                attr = getattr(module, attr_name)
                # Factories imported from sibling modules are seen more than once
                if self._is_factory_class(attr) and self._factories.get(attr.family) is not attr:
                    self.register(attr)
                    discovered += 1
        return discovered

    def _is_factory_class(self, obj: object) -> bool:
        """Concrete TAsBuilderFactory subclasses with a family name."""
        return (
            isinstance(obj, type)
            and issubclass(obj, TAsBuilderFactory)
            and bool(getattr(obj, "family", ""))
        )

    def register(self, factory: FactoryType) -> None:
        """
        Register a factory class under its family name.

        An existing family with the same name is replaced.
        """
        family = factory.family
        if family in self._factories:
            old = self._factories[family]
            self._by_category[old.category].discard(family)
            logger.warning(f"Indicator family {family} already registered, overwriting")

        self._factories[family] = factory
        self._by_category[factory.category].add(family)
        logger.debug(f"Registered indicator family: {family} ({factory.category.value})")

    def get(self, family: str) -> Optional[FactoryType]:
        return self._factories.get(family.lower())

    def get_by_category(self, category: IndicatorCategory) -> List[FactoryType]:
        names = sorted(self._by_category.get(category, set()))
        return [self._factories[n] for n in names]

    def get_names(self) -> List[str]:
        return sorted(self._factories)

    def create(self, family: str, keys: Optional[Sequence[Any]] = None) -> TAsBuilder:
        """
        Create a multi-series builder for ``family``.

        Args:
            family: Registered family name.
            keys: Periods or parameter tuples; the family defaults when None.

        Raises:
            IndicatorConfigError: Unknown family or invalid keys.
        """
        factory = self.get(family)
        if factory is None:
            logger.error(f"Unknown indicator family: {family}")
            raise IndicatorConfigError(family, "unknown indicator family", known=self.get_names())
        if keys is None:
            return factory.build_default()
        return factory.build(keys)

    def __len__(self) -> int:
        return len(self._factories)

    def __contains__(self, family: str) -> bool:
        return family in self._factories


# Global registry instance
_global_registry: Optional[IndicatorRegistry] = None


def get_indicator_registry() -> IndicatorRegistry:
    """
    Get the global indicator registry.

    Creates and initializes the registry on first call.
    """
    global _global_registry
    if _global_registry is None:
        _global_registry = IndicatorRegistry()
        _global_registry.discover()
    return _global_registry
