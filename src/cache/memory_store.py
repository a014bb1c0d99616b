# src/cache/memory_store.py — v1
"""In-process store (CACHE_BACKEND=memory).

Nothing survives the process; useful for tests and embedding.
"""

from __future__ import annotations

from inkrecipe.cache.base_cache_store import BaseCacheStore


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed store."""

    def __init__(self, capacity_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._capacity_bytes = capacity_bytes

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        # Mirrors browser-style storage quotas.
        if self._capacity_bytes is not None and len(value.encode("utf-8")) > self._capacity_bytes:
            raise OSError(f"Store quota exceeded writing {key!r}")
        self._data[key] = value

    @property
    def backend_name(self) -> str:
        return "memory"
