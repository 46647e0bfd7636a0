"""Utility modules."""

from .logging_setup import (
    get_category_for_module,
    get_category_loggers,
    get_logger,
    set_log_timezone,
    setup_logging,
    setup_logging_from_config,
    shutdown_logging,
)

__all__ = [
    "get_category_for_module",
    "get_category_loggers",
    "get_logger",
    "set_log_timezone",
    "setup_logging",
    "setup_logging_from_config",
    "shutdown_logging",
]
