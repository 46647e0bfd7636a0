"""
Engine configuration loader.

An EngineConfig is assembled from up to three YAML layers in the config
directory, each deep-merged over the previous one:

    base.yaml        required, ships with the package
    {env}.yaml       optional per-environment overrides (dev.yaml, ...)
    secrets.yaml     optional, never committed

Sections (candle_store, indicators, hybrid, logging) map one-to-one onto
the dataclasses in config.models; keys absent from every layer keep the
dataclass defaults.
"""

from __future__ import annotations
from dataclasses import fields
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Tuple
import yaml
import logging

from .models import (
    CandleStoreConfig,
    EngineConfig,
    HybridConfig,
    IndicatorConfig,
    LoggingConfig,
)


logger = logging.getLogger(__name__)

SECRETS_FILE = "secrets.yaml"


def _as_rows(value: Any) -> List[list]:
    """Parameter tuples such as [[20, 2.0], [10, 1.5]]."""
    return [list(row) for row in value]


# Per-field coercion; fields not listed are taken as-is.
_COERCE: Dict[str, Callable[[Any], Any]] = {
    "max_size": int,
    "dedup": bool,
    "ma_periods": list,
    "rsi_periods": list,
    "adx_periods": list,
    "max_min_periods": list,
    "volume_periods": list,
    "vwap_periods": list,
    "bband_params": _as_rows,
    "macd_params": _as_rows,
    "ichimoku_params": _as_rows,
    "ma_type": str,
    "ma_period": int,
    "macd_fast_period": int,
    "macd_slow_period": int,
    "macd_signal_period": int,
    "rsi_period": int,
    "rsi_lower": float,
    "rsi_upper": float,
    "max_bytes": int,
    "backup_count": int,
}

_SECTIONS = (
    ("candle_store", CandleStoreConfig),
    ("indicators", IndicatorConfig),
    ("hybrid", HybridConfig),
    ("logging", LoggingConfig),
)


class ConfigManager:
    """
    Loads the engine configuration for one environment.

    Example:
        cfg = ConfigManager("config", env="dev").load()
        builder = TechnicalAnalysisBuilder.from_config(cfg.indicators)
    """

    def __init__(self, config_dir: str | Path = "config", env: str = "dev"):
        self.config_dir = Path(config_dir)
        self.env = env
        self.config: Dict[str, Any] = {}

    def load(self) -> EngineConfig:
        """
        Merge the YAML layers and build the EngineConfig.

        Raises:
            FileNotFoundError: If base.yaml is missing.
            ValueError: If a value cannot be converted to its field type.
        """
        merged: Dict[str, Any] = {}
        for label, path in self._layers():
            merged = self._merge_dicts(merged, self._load_yaml(path))
            logger.info(f"Applied {label} config layer from {path}")
        self.config = merged
        return self._parse_config()

    def _layers(self) -> Iterator[Tuple[str, Path]]:
        base_path = self.config_dir / "base.yaml"
        if not base_path.exists():
            raise FileNotFoundError(f"Base config not found: {base_path}")
        yield "base", base_path

        for label, path in ((self.env, self.config_dir / f"{self.env}.yaml"),
                            ("secrets", self.config_dir / SECRETS_FILE)):
            if path.exists():
                yield label, path

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}

    def _merge_dicts(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts (override wins)."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result

    def _parse_config(self) -> EngineConfig:
        try:
            sections = {
                name: self._parse_section(cls, self.config.get(name) or {})
                for name, cls in _SECTIONS
            }
        except (TypeError, ValueError) as e:
            raise ValueError(f"Failed to parse config: {e}") from e
        return EngineConfig(**sections)

    @staticmethod
    def _parse_section(cls: type, raw: Dict[str, Any]) -> Any:
        """Build one section dataclass, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(raw) - known
        if unknown:
            logger.warning(f"Ignoring unknown {cls.__name__} keys: {sorted(unknown)}")
        values = {}
        for name in known & set(raw):
            value = raw[name]
            coerce = _COERCE.get(name)
            values[name] = coerce(value) if coerce is not None and value is not None else value
        return cls(**values)
