"""
Unit tests for logging setup.

Tests:
- Module to category routing
- get_logger names
- File handlers per category
- JSON formatting
- Configuration-driven setup and shutdown
"""

import json
import logging
import logging.handlers
from pathlib import Path

import pytest

from config.models import LoggingConfig
from ta_engine.utils.logging_setup import (
    CATEGORIES,
    ConsoleFormatter,
    JSONFormatter,
    get_category_for_module,
    get_logger,
    setup_logging,
    setup_logging_from_config,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    shutdown_logging()


class TestRouting:
    """Tests for category routing."""

    @pytest.mark.parametrize(
        "module, category",
        [
            ("ta_engine.domain.indicators.momentum.rsi", "indicator"),
            ("ta_engine.domain.indicators.registry", "indicator"),
            ("ta_engine.domain.analyzers.hybrid_analyzer", "analyzer"),
            ("ta_engine.domain.candle_store", "data"),
            ("config.config_manager", "system"),
            ("ta_engine.utils.logging_setup", "system"),
            ("somewhere.else", "system"),
        ],
    )
    def test_get_category_for_module(self, module: str, category: str) -> None:
        """Test module prefixes map to categories."""
        assert get_category_for_module(module) == category

    def test_get_logger_name(self) -> None:
        """Test loggers are shared per category."""
        assert get_logger("ta_engine.domain.indicators.trend.sma").name == "ta.indicator"
        assert get_logger("ta_engine.domain.analyzers.base") is logging.getLogger("ta.analyzer")


class TestSetup:
    """Tests for setup_logging."""

    def test_file_per_category(self, tmp_path: Path) -> None:
        """Test one rotating log file per category."""
        loggers = setup_logging(level="DEBUG", console=False, log_dir=str(tmp_path))

        assert set(loggers) == set(CATEGORIES)
        get_logger("ta_engine.domain.indicators.momentum.rsi").info("rsi ready")
        shutdown_logging()

        for category in CATEGORIES:
            assert (tmp_path / f"ta_{category}.log").exists()
        assert "rsi ready" in (tmp_path / "ta_indicator.log").read_text()

    def test_json_files(self, tmp_path: Path) -> None:
        """Test JSON lines carry the category."""
        setup_logging(console=False, log_dir=str(tmp_path), json_format=True)
        get_logger("ta_engine.domain.analyzers.base").warning("history short")
        shutdown_logging()

        line = (tmp_path / "ta_analyzer.log").read_text().strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["level"] == "WARNING"
        assert entry["cat"] == "analyzer"
        assert entry["msg"] == "history short"

    def test_level_and_no_propagation(self) -> None:
        """Test level is applied and records stay off the root logger."""
        setup_logging(level="WARNING", console=False)
        logger = logging.getLogger("ta.system")
        assert logger.level == logging.WARNING
        assert logger.propagate is False

    def test_repeat_setup_replaces_handlers(self) -> None:
        """Test calling setup twice does not stack handlers."""
        setup_logging(console=True)
        setup_logging(console=True)
        assert len(logging.getLogger("ta.data").handlers) == 1

    def test_from_config(self, tmp_path: Path) -> None:
        """Test setup from a LoggingConfig section."""
        config = LoggingConfig(
            level="DEBUG",
            console=False,
            log_dir=str(tmp_path / "logs"),
            json=False,
            max_bytes=1024,
            backup_count=1,
            timezone="UTC",
        )
        setup_logging_from_config(config)
        handler = logging.getLogger("ta.indicator").handlers[0]
        assert isinstance(handler, logging.handlers.RotatingFileHandler)
        assert handler.maxBytes == 1024


class TestFormatters:
    """Tests for the formatters."""

    def _record(self, name: str, msg: str) -> logging.LogRecord:
        return logging.LogRecord(name, logging.INFO, __file__, 1, msg, None, None)

    def test_json_formatter_unknown_logger(self) -> None:
        """Test non-category loggers are reported as system."""
        entry = json.loads(JSONFormatter().format(self._record("other", "hello")))
        assert entry["cat"] == "system"
        assert entry["msg"] == "hello"

    def test_json_formatter_extra_data(self) -> None:
        """Test the optional data attribute is included."""
        record = self._record("ta.data", "stored")
        record.data = {"size": 3}
        entry = json.loads(JSONFormatter().format(record))
        assert entry["data"] == {"size": 3}

    def test_console_formatter_plain(self) -> None:
        """Test the uncoloured console format."""
        text = ConsoleFormatter(use_colors=False).format(self._record("ta.analyzer", "ok"))
        assert text == "[INFO   ] [analyzer] ok"
