# src/logging/logger.py — v2
"""Logging setup for the `inkrecipe` logger tree.

Library modules only call logging.getLogger(__name__). setup_logging() is
for applications (the CLI) and installs handlers on the `inkrecipe` logger
alone, leaving the root logger untouched.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from inkrecipe.logging.handlers import console_handler, create_rotating_handler

ROOT_LOGGER = "inkrecipe"

# Third-party loggers that are chatty at INFO during a Gemini call
_NOISY_LOGGERS = ("httpx", "httpcore", "grpc", "urllib3", "google.auth")


class JsonFormatter(logging.Formatter):
    """One JSON object per line; context fields nested under "context"."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = {
            key: getattr(record, key)
            for key in ("batch_id", "color_key")
            if getattr(record, key, None) is not None
        }
        if context:
            entry["context"] = context
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """`2026-01-01 12:00:00 [INFO    ] inkrecipe.x [ab12cd34] - message`"""

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        batch_id = getattr(record, "batch_id", None)
        line = (
            f"{self.formatTime(record, self.datefmt)} [{record.levelname:8s}] {record.name}"
            f"{f' [{batch_id}]' if batch_id else ''} - {record.getMessage()}"
        )
        if record.exc_info and record.exc_info[1] is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 5,
) -> logging.Logger:
    """(Re)configure the `inkrecipe` logger and return it.

    Calling it again replaces the previously installed handlers.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()
    logger.addHandler(console_handler(formatter))
    if log_file:
        logger.addHandler(
            create_rotating_handler(log_file, formatter, rotation=rotation, retention=retention)
        )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logger
