# tests/integration/conftest.py — v1
"""Shared fixtures for integration tests.

Durable stores live under tmp_path so each test starts from an empty
cache directory. The remote model is always mocked.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from inkrecipe.config.settings import Settings


@pytest.fixture
def durable_settings(tmp_path) -> Callable[..., Settings]:
    """Factory for Settings backed by a durable store under tmp_path."""

    def _make(backend: str = "json", **kwargs) -> Settings:
        return Settings(
            _env_file=None, cache_backend=backend, cache_root=tmp_path, **kwargs
        )

    return _make
