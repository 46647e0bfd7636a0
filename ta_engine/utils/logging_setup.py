"""
Logging setup with categories and optional file rotation.

Provides:
- 4 log categories: indicator, analyzer, data, system
- Automatic module -> category routing
- File logging with size-based rotation (one file per category)
- Console output
- JSON or plain text formatting
- Configurable timezone for log timestamps

Categories:
- indicator: Builder construction, factories, registry discovery
- analyzer: Analyzer construction, history replay
- data: Candle store, dataframe conversion
- system: Configuration and everything else
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from config.models import LoggingConfig

# =============================================================================
# GLOBAL STATE
# =============================================================================

# Timezone for log timestamps (None = local time)
_log_timezone: Optional[ZoneInfo] = None

# Configured category loggers
_category_loggers: Dict[str, logging.Logger] = {}

# =============================================================================
# LOG CATEGORIES AND ROUTING
# =============================================================================

LOGGER_PREFIX = "ta"

CATEGORIES = ["indicator", "analyzer", "data", "system"]

# Module path -> category routing
# More specific paths should come first
MODULE_ROUTING: List[tuple[str, str]] = [
    ("ta_engine.domain.indicators", "indicator"),
    ("ta_engine.domain.analyzers", "analyzer"),
    ("ta_engine.domain.candle", "data"),
    ("config", "system"),
    ("ta_engine", "system"),
]


def get_category_for_module(module_name: str) -> str:
    """
    Determine the log category for a given module name.

    Args:
        module_name: Full module path (e.g., "ta_engine.domain.indicators.momentum.rsi").

    Returns:
        Category name (indicator, analyzer, data, or system).
    """
    for prefix, category in MODULE_ROUTING:
        if module_name.startswith(prefix):
            return category
    return "system"


# =============================================================================
# TIMEZONE SUPPORT
# =============================================================================

def set_log_timezone(tz: Optional[str] = None) -> None:
    """
    Set the timezone for log timestamps.

    Args:
        tz: Timezone name (e.g., "UTC", "Asia/Seoul"). None or "local"
            uses local system time.
    """
    global _log_timezone
    if tz is None or tz == "local":
        _log_timezone = None
    else:
        _log_timezone = ZoneInfo(tz)


def get_current_timestamp() -> str:
    """ISO timestamp in the configured log timezone."""
    if _log_timezone is not None:
        return datetime.now(_log_timezone).isoformat()
    return datetime.now().isoformat()


# =============================================================================
# FORMATTERS
# =============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Formats log records as single-line JSON with timestamp, level,
    category (derived from logger name), message and optional extra data.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": get_current_timestamp(),
            "level": record.levelname,
            "cat": self._get_category(record.name),
            "msg": record.getMessage(),
        }

        if hasattr(record, "data") and record.data:
            log_entry["data"] = record.data

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)

    def _get_category(self, logger_name: str) -> str:
        parts = logger_name.split(".")
        if len(parts) >= 2 and parts[0] == LOGGER_PREFIX and parts[1] in CATEGORIES:
            return parts[1]
        return "system"


class ConsoleFormatter(logging.Formatter):
    """
    Console formatter with color support.

    Format: [LEVEL] [category] message
    """

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        category = record.name.split(".")[-1]
        if self.use_colors:
            color = self.COLORS.get(level, "")
            return f"{color}[{level:7}]{self.RESET} [{category}] {record.getMessage()}"
        return f"[{level:7}] [{category}] {record.getMessage()}"


# =============================================================================
# LOGGER FACTORY
# =============================================================================

def get_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for the given module, routed to its category logger.

    Args:
        module_name: Module name (typically __name__).

    Returns:
        Logger instance for the module's category.

    Example:
        from ta_engine.utils.logging_setup import get_logger
        logger = get_logger(__name__)
        logger.debug("Building RSI set")
    """
    category = get_category_for_module(module_name)
    return logging.getLogger(f"{LOGGER_PREFIX}.{category}")


# =============================================================================
# SETUP
# =============================================================================

def setup_logging(
    level: str = "INFO",
    console: bool = True,
    log_dir: Optional[str] = None,
    json_format: bool = False,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> Dict[str, logging.Logger]:
    """
    Configure the category loggers.

    Creates, for each category, an optional rotating file
    ``{log_dir}/ta_{category}.log`` and an optional console handler.
    Calling it again replaces previously installed handlers.

    Args:
        level: Logging level name.
        console: Attach a stderr handler.
        log_dir: Directory for per-category log files (None disables files).
        json_format: Use JSON lines for the file handlers.
        max_bytes: Size threshold for file rotation.
        backup_count: Number of rotated files to keep.

    Returns:
        Dict mapping category name to logger.
    """
    effective_level = getattr(logging, level.upper(), logging.INFO)

    log_path: Optional[Path] = None
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

    for category in CATEGORIES:
        logger = logging.getLogger(f"{LOGGER_PREFIX}.{category}")
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

        logger.setLevel(effective_level)
        logger.propagate = False

        if log_path is not None:
            file_handler = logging.handlers.RotatingFileHandler(
                filename=str(log_path / f"ta_{category}.log"),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            if json_format:
                file_handler.setFormatter(JSONFormatter())
            else:
                file_handler.setFormatter(logging.Formatter(
                    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                ))
            logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(ConsoleFormatter(use_colors=sys.stderr.isatty()))
            logger.addHandler(console_handler)

        _category_loggers[category] = logger

    return _category_loggers


def setup_logging_from_config(config: LoggingConfig) -> Dict[str, logging.Logger]:
    """Configure logging from a LoggingConfig section."""
    set_log_timezone(config.timezone)
    return setup_logging(
        level=config.level,
        console=config.console,
        log_dir=config.log_dir,
        json_format=config.json,
        max_bytes=config.max_bytes,
        backup_count=config.backup_count,
    )


def get_category_loggers() -> Dict[str, logging.Logger]:
    """Get all configured category loggers."""
    return _category_loggers


def shutdown_logging() -> None:
    """Flush and close every category handler."""
    for category in CATEGORIES:
        logger = logging.getLogger(f"{LOGGER_PREFIX}.{category}")
        for handler in logger.handlers[:]:
            handler.flush()
            handler.close()
            logger.removeHandler(handler)
    _category_loggers.clear()
