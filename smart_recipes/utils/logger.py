"""Logging for Smart Recipes.

One stdout handler per logger, configured from the environment:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
- LOG_TYPE: text (coloured, one line per record) or json (default: text)

Generation code passes the request context through `extra=`:

    logger.warning("Attempt failed", extra={"user_id": 3, "attempt": 2, "temperature": 0.8})

JSON output carries those keys as top-level fields; text output appends them
as `key=value` pairs so retries of one request can be followed in a terminal.
"""

import json
import logging
import os
import sys
from typing import Any


# Record attributes set via `extra=` by the generator, in display order
CONTEXT_FIELDS = ("user_id", "attempt", "temperature")

# Third-party loggers that log every HTTP request at INFO
NOISY_LOGGERS = ("google_genai", "httpx")


def generation_context(record: logging.LogRecord) -> dict[str, Any]:
    """Context fields present on a record (None values are skipped)."""
    context = {}
    for field in CONTEXT_FIELDS:
        value = getattr(record, field, None)
        if value is not None:
            context[field] = value
    return context


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **generation_context(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RichTextFormatter(logging.Formatter):
    """Coloured single-line output with a level icon.

    Example:
        ⚠️ 2024-05-01 12:00:00 WARNING  smart_recipes        Attempt 2/3 failed [user_id=3 attempt=2 temperature=0.8]
    """

    RESET = "\033[0m"

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }

    ICONS = {
        "DEBUG": "🔍",
        "INFO": "ℹ️",
        "WARNING": "⚠️",
        "ERROR": "❌",
        "CRITICAL": "🔥",
    }

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        color = self.COLORS.get(level, self.RESET)
        icon = self.ICONS.get(level, "")
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")

        line = f"{icon} {timestamp} {level:<8} {record.name:<20} {record.getMessage()}"

        context = generation_context(record)
        if context:
            line += " [" + " ".join(f"{key}={value}" for key, value in context.items()) + "]"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"

        return f"{color}{line}{self.RESET}"


def get_logger(name: str) -> logging.Logger:
    """Return a logger with the environment-selected level and formatter.

    Configures the logger only the first time it is requested, so repeated
    calls never stack handlers.

    Args:
        name: Logger name.

    Returns:
        Configured logger instance.
    """
    logger_instance = logging.getLogger(name)
    if logger_instance.handlers:
        return logger_instance

    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logger_instance.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if os.getenv("LOG_TYPE", "text").lower() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(RichTextFormatter())
    logger_instance.addHandler(handler)

    return logger_instance


def quiet_library_loggers(level: int = logging.WARNING) -> None:
    """Raise the threshold of chatty SDK loggers."""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)


logger = get_logger("smart_recipes")
quiet_library_loggers()
