"""Tests for logging configuration."""

import logging
import logging.handlers

import pytest
import structlog

from entityservice.config.logging import (
    LoggerMixin,
    _parse_file_size,
    get_logger,
    setup_logging,
)


@pytest.fixture
def restore_logging():
    """Undo handler and structlog changes made by setup_logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level

    yield

    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestParseFileSize:
    @pytest.mark.parametrize(
        "size,expected",
        [
            ("512", 512),
            ("10KB", 10 * 1024),
            ("10MB", 10 * 1024 * 1024),
            (" 2gb ", 2 * 1024 * 1024 * 1024),
        ],
    )
    def test_parse_file_size(self, size, expected):
        assert _parse_file_size(size) == expected

    def test_parse_invalid_size(self):
        with pytest.raises(ValueError):
            _parse_file_size("lots")


class TestSetupLogging:
    def test_file_logging_adds_rotating_handler(self, tmp_path, restore_logging):
        log_file = tmp_path / "logs" / "service.log"

        setup_logging(
            level="DEBUG",
            file_enabled=True,
            file_path=str(log_file),
            max_file_size="1KB",
            backup_count=2,
        )

        handlers = [
            h
            for h in logging.getLogger().handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert log_file.parent.is_dir()
        assert handlers
        assert handlers[-1].maxBytes == 1024
        assert handlers[-1].backupCount == 2

    def test_plain_format_without_file(self, restore_logging):
        setup_logging(level="WARNING", format_type="plain", file_enabled=False)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_structured_format_renders_json(self, restore_logging):
        setup_logging(format_type="structured", file_enabled=False)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)


class TestLoggerMixin:
    def test_logger_is_bound_logger(self):
        class Repository(LoggerMixin):
            pass

        logger = Repository().log_with_context(entity="Widget")

        assert logger is not None
        assert get_logger(__name__) is not None
