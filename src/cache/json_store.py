# src/cache/json_store.py — v2
"""JSON file-based store (default CACHE_BACKEND=json).

Stores each key as an individual JSON file under CACHE_ROOT.
Writes go through a temp file and an atomic rename so a crash never
leaves a half-written snapshot behind.
"""

from __future__ import annotations

import logging
from pathlib import Path

from inkrecipe.cache.base_cache_store import BaseCacheStore

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based store using one JSON file per key."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    def get(self, key: str) -> str | None:
        """Read the file for key."""
        path = self._entry_path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Write the file for key atomically."""
        path = self._entry_path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)
        logger.debug("Wrote %d bytes to %s", len(value), path)

    @property
    def backend_name(self) -> str:
        return "json"

    @property
    def root(self) -> Path:
        return self._root

    def _entry_path(self, key: str) -> Path:
        """Return file path for a cache key."""
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"
