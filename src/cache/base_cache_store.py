# src/cache/base_cache_store.py — v1
"""Abstract durable key-value store backing the recipe cache snapshot.

Stores are plain get/set-by-string-key collaborators with no transactions.
All calls are synchronous; callers are responsible for tolerating failures.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseCacheStore(ABC):
    """Unified interface for durable snapshot backends."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored string for key, or None when absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Backend identifier (memory, json, sqlite, redis)."""

    def close(self) -> None:
        """Release backend resources. No-op by default."""
