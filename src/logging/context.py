# src/logging/context.py — v2
"""Per-task log context: which batch fetch and which color set a record belongs to.

Values live in context variables, so each asyncio task (one refresh, one
batch fetch) carries its own. ContextFilter copies them onto every record
as `batch_id` and `color_key` attributes for the formatters.
"""

from __future__ import annotations

import contextvars
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass

_batch_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "batch_id", default=None
)
_color_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "color_key", default=None
)


@dataclass(frozen=True)
class LogContext:
    batch_id: str | None = None
    color_key: str | None = None

    def as_dict(self) -> dict[str, str]:
        """Set fields only."""
        return {k: v for k, v in asdict(self).items() if v is not None}


def get_context() -> LogContext:
    return LogContext(batch_id=_batch_id.get(), color_key=_color_key.get())


def set_batch_context(batch_id: str) -> None:
    """Tag the current task with a batch fetch id."""
    _batch_id.set(batch_id)


def set_color_key_context(color_key: str) -> None:
    """Tag the current task with the color-set key of its refresh."""
    _color_key.set(color_key)


def clear_context() -> None:
    _batch_id.set(None)
    _color_key.set(None)


@contextmanager
def bound_context(
    batch_id: str | None = None, color_key: str | None = None
) -> Iterator[LogContext]:
    """Bind context values for the duration of a block, then restore them."""
    tokens = []
    if batch_id is not None:
        tokens.append((_batch_id, _batch_id.set(batch_id)))
    if color_key is not None:
        tokens.append((_color_key, _color_key.set(color_key)))
    try:
        yield get_context()
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


class ContextFilter(logging.Filter):
    """Attach the current LogContext fields to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_context()
        record.batch_id = ctx.batch_id
        record.color_key = ctx.color_key
        return True
