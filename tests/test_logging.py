"""
Logging Tests
-------------
Tests cover:
- call_id context scoping
- JSON formatter fields
- File output through configure_logging()
"""

import json
import logging

import pytest

from infra.config import FunctionSettings
from infra.logging import (
    CallContext, CallIdConsoleFormatter, CallIdFilter, JSONFormatter,
    configure_logging, configure_logging_from_settings, get_call_id, get_logger,
    reset_logging
)


def _record(message="hello", **extra):
    record = logging.LogRecord("sidekick.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestCallContext:
    """Tests for call_id propagation."""

    def test_sets_and_resets(self):
        assert get_call_id() is None
        with CallContext("abc") as call_id:
            assert call_id == "abc"
            assert get_call_id() == "abc"
        assert get_call_id() is None

    def test_generates_id(self):
        with CallContext() as call_id:
            assert call_id
            assert get_call_id() == call_id

    def test_nested(self):
        with CallContext("outer"):
            with CallContext("inner"):
                assert get_call_id() == "inner"
            assert get_call_id() == "outer"


class TestFormatters:
    """Tests for filter and formatters."""

    def test_filter_fills_call_id(self):
        record = _record()
        with CallContext("abc"):
            CallIdFilter().filter(record)
        assert record.call_id == "abc"

    def test_filter_default(self):
        record = _record()
        CallIdFilter().filter(record)
        assert record.call_id == "-"

    def test_json_fields(self):
        record = _record(call_id="abc", tool_name="add_numbers", duration_ms=1.5)
        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["call_id"] == "abc"
        assert entry["tool_name"] == "add_numbers"
        assert entry["duration_ms"] == 1.5
        assert "clearance" not in entry

    def test_console_prefix(self):
        formatter = CallIdConsoleFormatter("%(message)s")

        assert formatter.format(_record(call_id="12345678-aaaa")) == "[12345678] hello"
        assert formatter.format(_record(call_id="-")) == "hello"


@pytest.fixture
def fresh_logging():
    reset_logging()
    yield
    reset_logging()


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_file_output(self, tmp_path, fresh_logging):
        configure_logging(level=logging.DEBUG, log_dir=str(tmp_path), console=False, file=True)
        logger = get_logger("test")

        with CallContext("abc"):
            logger.info("Dispatching add_numbers", extra={"tool_name": "add_numbers"})
        reset_logging()

        lines = (tmp_path / "functions.log").read_text().splitlines()
        entry = json.loads(lines[-1])
        assert entry["logger"] == "sidekick.test"
        assert entry["call_id"] == "abc"
        assert entry["tool_name"] == "add_numbers"

    def test_idempotent(self, tmp_path, fresh_logging):
        configure_logging(log_dir=str(tmp_path), console=False, file=True)
        configure_logging(log_dir=str(tmp_path), console=False, file=True)

        assert len(logging.getLogger("sidekick").handlers) == 1

    def test_get_logger_prefix(self):
        assert get_logger("functions.registry").name == "sidekick.functions.registry"
        assert get_logger("sidekick.x").name == "sidekick.x"

    def test_from_settings_file_and_level(self, tmp_path, fresh_logging):
        settings = FunctionSettings(log_level="warning", log_dir=str(tmp_path))
        configure_logging_from_settings(settings, console=False)
        logger = get_logger("test")

        logger.info("below threshold")
        logger.warning("Call to add_numbers failed")
        reset_logging()

        messages = [
            json.loads(line)["message"]
            for line in (tmp_path / "functions.log").read_text().splitlines()
        ]
        assert messages == ["Call to add_numbers failed"]

    def test_from_settings_without_log_dir(self, fresh_logging):
        configure_logging_from_settings(FunctionSettings(log_level="DEBUG"), console=False)

        root = logging.getLogger("sidekick")
        assert root.level == logging.DEBUG
        assert root.handlers == []

    def test_from_settings_unknown_level(self, fresh_logging):
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging_from_settings(FunctionSettings(log_level="LOUD"), console=False)
