# src/logging/handlers.py — v2
"""Handler builders: stderr console and size-rotated log file."""

from __future__ import annotations

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from inkrecipe.logging.context import ContextFilter

_SIZE_RE = re.compile(r"(\d+)\s*(B|KB|MB|GB)?", re.IGNORECASE)
_UNITS = {"B": 1, "KB": 1024, "MB": 1024**2, "GB": 1024**3}


def parse_size(size_str: str) -> int:
    """'10MB' → bytes. A bare number is taken as bytes."""
    match = _SIZE_RE.fullmatch(size_str.strip())
    if match is None:
        raise ValueError(f"Invalid size format: {size_str!r}. Use e.g. '10MB'.")
    number, unit = match.groups()
    return int(number) * _UNITS[(unit or "B").upper()]


def console_handler(formatter: logging.Formatter) -> logging.Handler:
    """stderr handler; stdout is reserved for command output."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())
    return handler


def create_rotating_handler(
    log_file: str | Path,
    formatter: logging.Formatter,
    rotation: str = "10MB",
    retention: int = 5,
) -> RotatingFileHandler:
    """File handler rotating at `rotation` bytes, keeping `retention` backups."""
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())
    return handler
