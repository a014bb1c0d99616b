# src/cache/redis_store.py — v2
"""Redis-based store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install inkrecipe[redis].
Lets several processes share one recipe snapshot.
"""

from __future__ import annotations

from inkrecipe.cache.base_cache_store import BaseCacheStore

_KEY_PREFIX = "inkrecipe:"


class RedisCacheStore(BaseCacheStore):
    """Redis-backed key-value store."""

    def __init__(self, redis_url: str) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install inkrecipe[redis]"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)

    def get(self, key: str) -> str | None:
        return self._client.get(f"{_KEY_PREFIX}{key}")

    def set(self, key: str, value: str) -> None:
        self._client.set(f"{_KEY_PREFIX}{key}", value)

    @property
    def backend_name(self) -> str:
        return "redis"

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
