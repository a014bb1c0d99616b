# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides offline/online settings, in-memory recipe caches and a mock
remote model client. No external dependencies — all I/O is mocked.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from inkrecipe.cache.memory_store import MemoryCacheStore
from inkrecipe.cache.recipe_cache import RecipeCache
from inkrecipe.config.settings import Settings
from inkrecipe.llm.models import GenerationReply


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials and cache settings out of every test."""
    for var in ("GOOGLE_API_KEY", "GEMINI_API_KEY", "CACHE_BACKEND", "CACHE_ROOT"):
        monkeypatch.delenv(var, raising=False)


# === FIXTURES: Settings ===


@pytest.fixture
def offline_settings() -> Settings:
    """No credential: heuristic-only mode."""
    return Settings(_env_file=None, cache_backend="memory")


@pytest.fixture
def online_settings() -> Settings:
    """Credential present: remote path enabled."""
    return Settings(_env_file=None, cache_backend="memory", google_api_key="test-key")


# === FIXTURES: Cache ===


@pytest.fixture
def memory_store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def recipe_cache(memory_store: MemoryCacheStore) -> RecipeCache:
    return RecipeCache(store=memory_store)


# === FIXTURES: Mock LLM ===


def _make_reply(items: list[dict], fenced: bool = False) -> GenerationReply:
    """Remote reply whose text is the JSON array of items."""
    text = json.dumps(items)
    if fenced:
        text = f"```json\n{text}\n```"
    return GenerationReply(text=text, model="gemini-2.0-flash", provider="google")


def _recipe_item(hex_code: str, c=10, m=20, y=30, k=40, paper="Coated Stock") -> dict:
    return {
        "hex": hex_code,
        "c": c,
        "m": m,
        "y": y,
        "k": k,
        "explanation": f"Tuned {hex_code} for press.",
        "paper": paper,
    }


@pytest.fixture
def mock_llm_client() -> Callable[..., AsyncMock]:
    """Factory for a mock BaseLLMClient.

    Pass a reply (GenerationReply) or an exception to raise.
    """

    def _make(reply: GenerationReply | Exception | None = None) -> AsyncMock:
        client = AsyncMock()
        if isinstance(reply, Exception):
            client.generate = AsyncMock(side_effect=reply)
        else:
            client.generate = AsyncMock(return_value=reply or _make_reply([]))
        client.provider_name = "mock"
        return client

    return _make


@pytest.fixture
def make_reply() -> Callable[..., GenerationReply]:
    return _make_reply


@pytest.fixture
def recipe_item() -> Callable[..., dict]:
    return _recipe_item
