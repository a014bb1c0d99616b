# src/llm/retry.py — v3
"""Opt-in retry for the single remote batch call.

Errors are classified first by exception type (including the
google.api_core exception names the Gemini SDK raises), then by message.
Each class has its own retry budget; unclassified errors are never retried.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

# google.api_core.exceptions class name → error type
_SDK_ERROR_TYPES: dict[str, str] = {
    "ResourceExhausted": "rate_limit",
    "TooManyRequests": "rate_limit",
    "DeadlineExceeded": "timeout",
    "ServiceUnavailable": "server_error",
    "InternalServerError": "server_error",
    "BadGateway": "server_error",
    "GatewayTimeout": "server_error",
}


class LLMRetryExhausted(Exception):
    """The remote call kept failing; carries the last underlying error."""

    def __init__(self, operation: str, error_type: str, attempts: int, last_error: Exception):
        self.operation = operation
        self.error_type = error_type
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"'{operation}' failed after {attempts} attempt(s) ({error_type}): {last_error}"
        )


@dataclass(frozen=True)
class RetryConfig:
    """Budget and backoff shape for one error type."""

    max_retries: int
    base_delay_s: float
    backoff_factor: float = 2.0
    jitter: bool = True

    def delay_for(self, retry_index: int) -> float:
        """Seconds to wait before retry number retry_index (0-based)."""
        delay = self.base_delay_s * (self.backoff_factor ** retry_index)
        if self.jitter:
            delay *= 0.5 + random.random()  # noqa: S311
        return delay


DEFAULT_RETRY_CONFIGS: dict[str, RetryConfig] = {
    "rate_limit": RetryConfig(max_retries=2, base_delay_s=2.0),
    "timeout": RetryConfig(max_retries=1, base_delay_s=1.0, backoff_factor=1.0),
    "server_error": RetryConfig(max_retries=2, base_delay_s=2.0),
    "parse_error": RetryConfig(max_retries=1, base_delay_s=0.5, backoff_factor=1.0),
}


def classify_error(error: Exception) -> str:
    """Map an exception to a key of DEFAULT_RETRY_CONFIGS, or 'unknown'."""
    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return "timeout"
    if isinstance(error, json.JSONDecodeError):
        return "parse_error"
    sdk_type = _SDK_ERROR_TYPES.get(type(error).__name__)
    if sdk_type is not None:
        return sdk_type

    msg = str(error).lower()
    if "429" in msg or "rate" in msg or "quota" in msg:
        return "rate_limit"
    if "timeout" in msg or "timed out" in msg:
        return "timeout"
    if any(code in msg for code in ("500", "502", "503", "504", "server")):
        return "server_error"
    if "json" in msg or "parse" in msg or "decode" in msg:
        return "parse_error"
    return "unknown"


async def with_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    operation: str = "remote_call",
    retry_configs: dict[str, RetryConfig] | None = None,
    **kwargs: Any,
) -> Any:
    """Await fn(*args, **kwargs), retrying classified failures.

    Raises:
        LLMRetryExhausted: On an unclassified error or once the error
            type's budget is spent.
    """
    configs = DEFAULT_RETRY_CONFIGS if retry_configs is None else retry_configs
    attempts = 0

    while True:
        attempts += 1
        try:
            return await fn(*args, **kwargs)
        except Exception as e:
            error_type = classify_error(e)
            config = configs.get(error_type)
            if config is None or attempts > config.max_retries:
                raise LLMRetryExhausted(operation, error_type, attempts, e) from e

            delay = config.delay_for(attempts - 1)
            logger.warning(
                "'%s' hit %s (attempt %d, %d retr%s allowed), retrying in %.1fs",
                operation, error_type, attempts, config.max_retries,
                "y" if config.max_retries == 1 else "ies", delay,
            )
            await asyncio.sleep(delay)
