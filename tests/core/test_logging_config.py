"""Tests for logging configuration."""

import json
import logging
import sys

import pytest

from flowtalk.core import logging_config
from flowtalk.core.logging_config import JsonFormatter, configure_logging, get_logger, set_level


@pytest.fixture(autouse=True)
def restore_root_logger(monkeypatch):
    """Keep each test's handlers off the real root logger."""
    for name in ("FLOWTALK_LOG_LEVEL", "FLOWTALK_LOG_FORMAT", "FLOWTALK_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    level = root.level
    monkeypatch.setattr(logging_config, "_configured", False)
    yield
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def _record(msg="conversation_continue: step=%s", args=("next",), **extra):
    record = logging.LogRecord("flowtalk.test", logging.DEBUG, __file__, 1, msg, args, None)
    record.__dict__.update(extra)
    return record


class TestJsonFormatter:
    """Tests for structured log output."""

    def test_basic_fields(self):
        data = json.loads(JsonFormatter().format(_record()))

        assert data["level"] == "DEBUG"
        assert data["logger"] == "flowtalk.test"
        assert data["message"] == "conversation_continue: step=next"
        assert "extra" not in data

    def test_extra_fields(self):
        data = json.loads(JsonFormatter().format(_record(step_id="next")))
        assert data["extra"] == {"step_id": "next"}

    def test_exception(self):
        try:
            raise ValueError("bad flow")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(record))
        assert "ValueError: bad flow" in data["exception"]


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_text_default(self):
        """Defaults to INFO text output on stderr."""
        configure_logging()

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_json_from_environment(self, monkeypatch):
        """Environment variables select level and format."""
        monkeypatch.setenv("FLOWTALK_LOG_LEVEL", "debug")
        monkeypatch.setenv("FLOWTALK_LOG_FORMAT", "json")

        configure_logging()

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_file_handler(self, tmp_path):
        """A log file gets its own handler."""
        path = tmp_path / "flowtalk.log"

        configure_logging(level="WARNING", file_path=str(path))
        get_logger("flowtalk.test").warning("flow_load_failed: src=%s", "x.json")

        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "flow_load_failed: src=x.json" in path.read_text()

    def test_configured_once(self):
        """Later calls are ignored unless forced."""
        configure_logging(level="ERROR")
        configure_logging(level="DEBUG")
        assert logging.getLogger().level == logging.ERROR

        configure_logging(level="DEBUG", force=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(level="CHATTY")

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown log format"):
            configure_logging(format="xml")  # type: ignore[arg-type]


def test_set_level():
    logger = get_logger("flowtalk.test.level")
    set_level("warning", "flowtalk.test.level")
    assert logger.level == logging.WARNING
