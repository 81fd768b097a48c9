"""Tests for structured logging."""

import json
import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from kvindex.config.models import LoggingConfig, LogOutputConfig
from kvindex.core.logging import (
    clear_correlation_id,
    configure_logging,
    get_correlation_id,
    get_log_file_path,
    get_logger,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    structlog.reset_defaults()
    yield
    root = logging.getLogger()
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    structlog.reset_defaults()


class TestCorrelationId:
    """Correlation ID context variable tests."""

    def setup_method(self) -> None:
        clear_correlation_id()

    def test_given_id_when_set_then_can_retrieve(self) -> None:
        assert set_correlation_id("op-123") == "op-123"
        assert get_correlation_id() == "op-123"

    def test_given_no_id_when_set_then_generates_one(self) -> None:
        cid = set_correlation_id()

        assert len(cid) == 12  # uuid4().hex[:12]

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        set_correlation_id("to-clear")

        clear_correlation_id()

        assert get_correlation_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def test_given_config_object_when_configure_then_takes_precedence(self, tmp_path: Path) -> None:
        """LoggingConfig object takes precedence over simple params."""
        # Given
        log_file = tmp_path / "test.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )

        # When
        configure_logging(config=config, json_format=False, level="ERROR")
        get_logger().debug("debug msg")

        # Then
        assert "debug msg" in log_file.read_text()
        assert get_log_file_path() == log_file

    def test_given_multi_output_config_when_configure_then_levels_respected(self, tmp_path: Path) -> None:
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="json", destination=str(debug_file)),
            ],
        )

        configure_logging(config=config)
        logger = get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content
        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content

    def test_given_correlation_id_when_log_then_included(self, tmp_path: Path) -> None:
        log_file = tmp_path / "cid.log"
        configure_logging(
            config=LoggingConfig(outputs=[LogOutputConfig(format="json", destination=str(log_file))])
        )
        set_correlation_id("abc123")

        get_logger("kvindex.test").info("index_entry_written", hash_value="a@x.com")

        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "index_entry_written"
        assert data["correlation_id"] == "abc123"
        assert data["logger"] == "kvindex.test"
        assert data["level"] == "info"
        assert "timestamp" in data

    def test_given_simple_params_when_configure_then_console_handler(self) -> None:
        configure_logging(json_format=True, level="WARNING")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert get_log_file_path() is None
