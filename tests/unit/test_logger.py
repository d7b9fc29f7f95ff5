"""Unit tests for logging infrastructure."""

import json
import logging
import sys

from smart_recipes.utils.logger import (
    JSONFormatter,
    RichTextFormatter,
    generation_context,
    get_logger,
    logger,
    quiet_library_loggers,
)


def make_record(msg="Test message", level=logging.INFO, name="test_logger", exc_info=None):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


def fresh_logger_name(name: str) -> str:
    """Clear handlers left by a previous test so get_logger reconfigures."""
    if name in logging.Logger.manager.loggerDict:
        logging.getLogger(name).handlers.clear()
    return name


class TestJSONFormatter:
    """Test JSONFormatter produces valid JSON output."""

    def test_json_formatter_outputs_valid_json(self):
        """Test that JSONFormatter produces valid JSON."""
        output = JSONFormatter().format(make_record())
        parsed = json.loads(output)

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test_logger"
        assert parsed["message"] == "Test message"
        assert "timestamp" in parsed

    def test_json_formatter_includes_exception_traceback(self):
        """Test that JSONFormatter includes exception traceback when present."""
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record("Error occurred", level=logging.ERROR, exc_info=sys.exc_info())

        parsed = json.loads(JSONFormatter().format(record))

        assert "exception" in parsed
        assert "ValueError" in parsed["exception"]

    def test_json_formatter_includes_generation_context(self):
        """Test that user_id, attempt and temperature extras are copied into the payload."""
        record = make_record()
        record.user_id = 42
        record.attempt = 2
        record.temperature = 0.8

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["user_id"] == 42
        assert parsed["attempt"] == 2
        assert parsed["temperature"] == 0.8

    def test_json_formatter_omits_missing_context(self):
        """Extras that were not passed, or passed as None, are not emitted."""
        record = make_record()
        record.user_id = None
        parsed = json.loads(JSONFormatter().format(record))

        assert "attempt" not in parsed
        assert "user_id" not in parsed


class TestGenerationContext:
    """Test extraction of generation context from records."""

    def test_context_in_display_order(self):
        record = make_record()
        record.temperature = 0.9
        record.user_id = 5
        record.attempt = 3

        assert list(generation_context(record).items()) == [("user_id", 5), ("attempt", 3), ("temperature", 0.9)]

    def test_no_context(self):
        assert generation_context(make_record()) == {}


class TestRichTextFormatter:
    """Test RichTextFormatter produces colored text output."""

    def test_rich_text_formatter_includes_emoji_icon(self):
        """Test that RichTextFormatter includes emoji icons for each level."""
        formatter = RichTextFormatter()

        for level_name, icon in RichTextFormatter.ICONS.items():
            output = formatter.format(make_record("Test", level=getattr(logging, level_name)))
            assert icon in output

    def test_rich_text_formatter_includes_level_logger_and_message(self):
        """Test that RichTextFormatter includes level name, logger name and message."""
        output = RichTextFormatter().format(make_record("Custom message", name="my_logger"))

        assert "INFO" in output
        assert "my_logger" in output
        assert "Custom message" in output

    def test_rich_text_formatter_appends_context(self):
        """Test that attempt context is appended as key=value pairs."""
        record = make_record("Attempt failed")
        record.user_id = 3
        record.attempt = 2
        record.temperature = 0.8

        output = RichTextFormatter().format(record)

        assert "Attempt failed [user_id=3 attempt=2 temperature=0.8]" in output

    def test_rich_text_formatter_without_context_has_no_brackets(self):
        output = RichTextFormatter().format(make_record("Plain message"))
        assert "[" not in output.replace("\033[", "")

    def test_rich_text_formatter_includes_exception_traceback(self):
        """Test that RichTextFormatter includes exception traceback."""
        try:
            raise RuntimeError("Test error")
        except RuntimeError:
            record = make_record("Error occurred", level=logging.ERROR, exc_info=sys.exc_info())

        output = RichTextFormatter().format(record)

        assert "RuntimeError" in output
        assert "Test error" in output


class TestGetLogger:
    """Test get_logger function."""

    def test_get_logger_returns_logger_instance(self):
        """Test that get_logger returns a logging.Logger instance."""
        assert isinstance(get_logger("test_module"), logging.Logger)

    def test_get_logger_does_not_duplicate_handlers(self):
        """Calling get_logger twice keeps a single handler."""
        name = fresh_logger_name("test_module_2")
        get_logger(name)
        second = get_logger(name)

        assert len(second.handlers) == 1

    def test_get_logger_respects_log_level_env(self, monkeypatch):
        """Test that get_logger respects LOG_LEVEL environment variable."""
        name = fresh_logger_name("test_level_logger")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        assert get_logger(name).level == logging.DEBUG

    def test_invalid_log_level_defaults_to_info(self, monkeypatch):
        """Test that invalid LOG_LEVEL defaults to INFO."""
        name = fresh_logger_name("test_invalid_level")
        monkeypatch.setenv("LOG_LEVEL", "INVALID")

        assert get_logger(name).level == logging.INFO

    def test_get_logger_uses_json_formatter(self, monkeypatch):
        """Test that get_logger uses JSONFormatter with LOG_TYPE=json."""
        name = fresh_logger_name("test_json_logger")
        monkeypatch.setenv("LOG_TYPE", "json")

        test_logger = get_logger(name)
        assert isinstance(test_logger.handlers[0].formatter, JSONFormatter)

    def test_get_logger_defaults_to_text_formatter(self, monkeypatch):
        """Test that LOG_TYPE defaults to text."""
        name = fresh_logger_name("test_default_type")
        monkeypatch.delenv("LOG_TYPE", raising=False)

        test_logger = get_logger(name)
        assert isinstance(test_logger.handlers[0].formatter, RichTextFormatter)


class TestModuleLevelLogger:
    """Test module-level logger instance."""

    def test_logger_name_and_handlers(self):
        """Test that the shared logger is configured under the package name."""
        assert logger.name == "smart_recipes"
        assert len(logger.handlers) > 0

    def test_logger_can_log_with_extras(self):
        """Logging with generation extras should not raise."""
        logger.info("Test message", extra={"user_id": 1, "attempt": 1, "temperature": 0.7})

    def test_library_loggers_quieted(self):
        quiet_library_loggers()
        assert logging.getLogger("google_genai").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
