"""Logging helpers."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}


class JsonFormatter(logging.Formatter):
    """Render log records as compact JSON, one object per line.

    Fields passed through ``extra=`` (``event``, ``item``, ``reason`` ...) are
    merged into the top-level object so failures can be grepped by item.
    """

    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.default_time_format),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                data[key] = value
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


def configure_logging(*, level: int | str = logging.INFO, structured: bool = True) -> None:
    """Install a single stderr handler on the root logger.

    Calling it again replaces the formatter and level rather than stacking
    handlers.
    """

    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)
    formatter: logging.Formatter = JsonFormatter() if structured else logging.Formatter(_PLAIN_FORMAT)

    if root.handlers:
        for handler in root.handlers:
            handler.setFormatter(formatter)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter"]
