"""
Tests for logging setup
"""

import json
import logging
import logging.handlers
import sys

import pytest

from ssri.observability import JSONFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJSONFormatter:
    """Tests for structured log formatting."""

    def test_basic_fields(self):
        """Test the standard fields are emitted."""
        record = logging.LogRecord("ssri.stream", logging.WARNING, __file__, 10, "size %s", (3,), None)

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "WARNING"
        assert data["logger"] == "ssri.stream"
        assert data["message"] == "size 3"
        assert data["line"] == 10
        assert "timestamp" in data

    def test_extra_fields(self):
        """Test integrity context passed via extra is included."""
        logger = logging.getLogger("ssri.test.extra")
        record = logger.makeRecord(
            logger.name, logging.INFO, __file__, 1, "msg", (), None,
            extra={"algorithm": "sha512", "size": 5, "sri": "sha512-foo"},
        )

        data = json.loads(JSONFormatter().format(record))

        assert data["algorithm"] == "sha512"
        assert data["size"] == 5
        assert data["sri"] == "sha512-foo"

    def test_exception_info(self):
        """Test exceptions are formatted."""
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "oops", (), sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError: bad" in data["exception"]


class TestSetupLogging:
    """Tests for logging configuration."""

    def test_plain(self, restore_root_logger):
        """Test a single console handler at the given level."""
        setup_logging("DEBUG")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert not isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)

    def test_json(self, restore_root_logger):
        """Test JSON formatting is applied."""
        setup_logging("warning", json_format=True)

        assert restore_root_logger.level == logging.WARNING
        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)

    def test_log_file(self, restore_root_logger, tmp_path):
        """Test a rotating file handler is added."""
        setup_logging("INFO", log_file=str(tmp_path / "ssri.log"))

        file_handlers = [
            h for h in restore_root_logger.handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        file_handlers[0].close()
