"""Structured console logging for the dashboard process."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from weather_dashboard.core.redaction import sanitize_for_logging, sanitize_text

ROOT_LOGGER_NAME = "weather_dashboard"

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "taskName"}


def _record_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class JsonConsoleFormatter(logging.Formatter):
    """One JSON object per line, with ``extra`` fields merged in."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        event.update(sanitize_for_logging(_record_fields(record)))
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str)


class PlainConsoleFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = sanitize_text(super().format(record))
        fields = _record_fields(record)
        if fields:
            rendered = " ".join(
                f"{k}={v}" for k, v in sanitize_for_logging(fields).items()
            )
            line = f"{line} [{rendered}]"
        return line


def setup_logging(level: str | int = logging.INFO, *, json_output: bool = True) -> logging.Logger:
    """Configure the package logger once; repeated calls only adjust the level."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(JsonConsoleFormatter() if json_output else PlainConsoleFormatter())
    logger.addHandler(handler)
    return logger
