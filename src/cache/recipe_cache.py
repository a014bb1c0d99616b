# src/cache/recipe_cache.py — v2
"""Two-tier recipe cache: in-process dict backed by a durable snapshot.

- Fast tier: insertion-ordered dict, O(1) lookup by normalized hex.
- Slow tier: one JSON snapshot under a single key of a BaseCacheStore,
  truncated to the most recent max_entries at write time.

Durable failures never reach the caller. A failed read leaves the cache
empty; a failed write switches the instance to in-memory-only mode.
"""

from __future__ import annotations

import json
import logging
from collections import Counter

from pydantic import ValidationError

from inkrecipe.cache.base_cache_store import BaseCacheStore
from inkrecipe.cache.models import CacheSnapshotEntry, CacheStats
from inkrecipe.core.hex_color import normalize_hex
from inkrecipe.core.models import PrintResult

logger = logging.getLogger(__name__)

DEFAULT_CACHE_KEY = "hexviewer_ai_cmyk_cache"
DEFAULT_MAX_ENTRIES = 200


class RecipeCache:
    """Hex → PrintResult cache owned by one process/session."""

    def __init__(
        self,
        store: BaseCacheStore | None = None,
        cache_key: str = DEFAULT_CACHE_KEY,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._store = store
        self._cache_key = cache_key
        self._max_entries = max_entries
        self._entries: dict[str, PrintResult] = {}
        self._persistence_enabled = store is not None
        self._hydrated = False

    # --- durable tier ---

    def hydrate(self) -> int:
        """Load the durable snapshot into the fast tier (once).

        Loaded entries are tagged 'cache' and their ink values are clamped
        into 0..100. Returns the number loaded.
        """
        if self._hydrated or self._store is None:
            return 0
        self._hydrated = True

        try:
            raw = self._store.get(self._cache_key)
        except Exception as e:
            logger.warning("Failed to read recipe cache snapshot: %s", e)
            return 0
        if not raw:
            return 0

        try:
            rows = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring corrupt recipe cache snapshot: %s", e)
            return 0
        if not isinstance(rows, list):
            logger.warning("Ignoring recipe cache snapshot of type %s", type(rows).__name__)
            return 0

        loaded = 0
        for row in rows:
            try:
                entry = CacheSnapshotEntry.from_pair(row)
            except (ValidationError, ValueError) as e:
                logger.debug("Skipping unreadable snapshot row: %s", e)
                continue
            self._entries[normalize_hex(entry.hex)] = entry.result.with_source("cache")
            loaded += 1

        logger.info("Hydrated %d recipe(s) from %s store", loaded, self._store.backend_name)
        return loaded

    def flush(self) -> bool:
        """Write the most recent max_entries to the durable tier.

        Returns True when the snapshot was written.
        """
        if self._store is None or not self._persistence_enabled:
            return False

        recent = list(self._entries.items())[-self._max_entries:]
        payload = json.dumps(
            [CacheSnapshotEntry(hex=h, result=r).to_pair() for h, r in recent]
        )
        try:
            self._store.set(self._cache_key, payload)
        except Exception as e:
            self._persistence_enabled = False
            logger.warning(
                "Recipe cache write failed, continuing in memory only: %s", e
            )
            return False
        return True

    # --- fast tier ---

    def get(self, hex_code: str) -> PrintResult | None:
        """Return the cached result for hex_code, or None on a miss."""
        return self._entries.get(normalize_hex(hex_code))

    def set(self, hex_code: str, result: PrintResult) -> None:
        """Store result; an existing key moves to the most-recent position."""
        key = normalize_hex(hex_code)
        self._entries.pop(key, None)
        self._entries[key] = result

    def __contains__(self, hex_code: object) -> bool:
        return isinstance(hex_code, str) and normalize_hex(hex_code) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[str]:
        return list(self._entries)

    # --- introspection ---

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def persistence_enabled(self) -> bool:
        return self._persistence_enabled

    def stats(self) -> CacheStats:
        counts = Counter(r.source for r in self._entries.values())
        return CacheStats(
            backend=self._store.backend_name if self._store else "none",
            entry_count=len(self._entries),
            max_entries=self._max_entries,
            by_source=dict(counts),
            persistence_enabled=self._persistence_enabled,
        )

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
