# src/cache/cache_factory.py — v4
"""Factory for durable store and recipe cache instantiation."""

from __future__ import annotations

import logging
import sqlite3

from inkrecipe.cache.base_cache_store import BaseCacheStore
from inkrecipe.cache.recipe_cache import DEFAULT_CACHE_KEY, DEFAULT_MAX_ENTRIES, RecipeCache
from inkrecipe.config.settings import Settings

logger = logging.getLogger(__name__)


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured durable backend.

    Args:
        settings: Application settings. Defaults to JSON backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "json" if settings is None else settings.cache_backend
    cache_root = "~/.inkrecipe/cache" if settings is None else str(settings.cache_root)

    if backend == "memory":
        from inkrecipe.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    if backend == "json":
        from inkrecipe.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=cache_root)

    if backend == "sqlite":
        from inkrecipe.cache.sqlite_store import SqliteCacheStore
        return SqliteCacheStore(db_path=f"{cache_root}/inkrecipe_cache.db")

    if backend == "redis":
        from inkrecipe.cache.redis_store import RedisCacheStore
        if settings is None or not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisCacheStore(redis_url=settings.cache_redis_url)

    raise ValueError(f"Unsupported cache backend: {backend!r}")


def create_recipe_cache(
    settings: Settings | None = None,
    store: BaseCacheStore | None = None,
    hydrate: bool = True,
) -> RecipeCache:
    """Build a RecipeCache over the configured store and hydrate it once.

    A configured store that cannot be opened (unwritable or invalid cache
    root, unopenable database) yields a memory-only cache instead of an
    error.

    Args:
        settings: Application settings (backend, key, retention).
        store: Explicit durable store; overrides the configured backend.
        hydrate: Load the durable snapshot immediately.
    """
    if store is None:
        try:
            store = create_cache_store(settings)
        except (OSError, sqlite3.Error) as e:
            logger.warning(
                "Durable recipe store unavailable, caching in memory only: %s", e
            )
    cache = RecipeCache(
        store=store,
        cache_key=DEFAULT_CACHE_KEY if settings is None else settings.cache_key,
        max_entries=DEFAULT_MAX_ENTRIES if settings is None else settings.cache_max_entries,
    )
    if hydrate:
        cache.hydrate()
    return cache
