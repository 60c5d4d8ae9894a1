"""Logging setup for the CLI: plain or JSON-lines records on stderr."""

from __future__ import annotations

import datetime
import json
import logging
import os
import sys
from typing import Any

LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

ENV_LOG_LEVEL = "FFKIT_LOG_LEVEL"


def resolve_level(level: Any) -> int:
    """Turn a level name or number into a logging level (WARNING if unknown)."""
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        return LEVEL_MAP.get(level.upper(), logging.WARNING)
    return logging.WARNING


class ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"[{ts}] {record.levelname:<7} {record.name}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log collectors."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: Any = None, json_lines: bool = False) -> logging.Logger:
    """Attach a single stderr handler to the ``ffkit`` logger.

    stdout is reserved for command results, so records always go to stderr.
    ``level`` falls back to $FFKIT_LOG_LEVEL, then WARNING.
    """
    if level is None:
        level = os.environ.get(ENV_LOG_LEVEL, "WARNING")

    logger = logging.getLogger("ffkit")
    logger.handlers.clear()
    logger.setLevel(resolve_level(level))
    logger.propagate = False

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_lines else ConsoleFormatter())
    logger.addHandler(handler)
    return logger
