"""
Domain exceptions for the technical-analysis engine.

Implements a hierarchy distinguishing between fatal errors raised while
wiring the engine up (invalid indicator parameters, bad configuration)
and the rare runtime conditions a caller may choose to handle.

Insufficient data is never an error for ``build``/``next``: every
indicator returns a neutral placeholder during warm-up.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TAEngineError(Exception):
    """Base class for all engine exceptions."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class RecoverableError(TAEngineError):
    """Errors a caller can handle and continue from."""
    pass


class FatalError(TAEngineError):
    """
    Errors requiring the caller to fix its setup before running.

    Examples:
    - Invalid indicator periods or multipliers
    - Malformed configuration
    """
    pass


class ConfigurationError(FatalError):
    """Invalid engine configuration."""
    pass


class IndicatorConfigError(ConfigurationError):
    """
    Invalid parameters for an indicator builder, factory or analyzer.

    Raised at construction time so configuration can be validated before
    any candle is processed.
    """

    def __init__(self, indicator: str, message: str, **params: Any):
        super().__init__(f"{indicator}: {message}", context=dict(params))
        self.indicator = indicator
        self.params = dict(params)


class InsufficientDataError(RecoverableError, IndexError):
    """An accessor needed more history than is available."""

    def __init__(self, message: str, required: int, available: int):
        super().__init__(message, context={"required": required, "available": available})
        self.required = required
        self.available = available
