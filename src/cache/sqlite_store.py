# src/cache/sqlite_store.py — v1
"""SQLite-based store (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3 — no external dependency.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from inkrecipe.cache.base_cache_store import BaseCacheStore

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed key-value store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    def get(self, key: str) -> str | None:
        cursor = self._conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        )
        row = cursor.fetchone()
        return None if row is None else row[0]

    def set(self, key: str, value: str) -> None:
        """Upsert value under key."""
        self._conn.execute(
            """INSERT OR REPLACE INTO kv_store (key, value, updated_at)
               VALUES (?, ?, CURRENT_TIMESTAMP)""",
            (key, value),
        )
        self._conn.commit()

    @property
    def backend_name(self) -> str:
        return "sqlite"

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
