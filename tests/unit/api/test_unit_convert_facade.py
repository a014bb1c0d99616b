# tests/unit/api/test_unit_convert_facade.py — v1
"""Tests for api.facade — one-shot conversion entry point."""

from __future__ import annotations

import pytest

from inkrecipe.api.facade import convert_colors
from inkrecipe.cache.recipe_cache import RecipeCache
from inkrecipe.config.settings import Settings


class TestConvertColors:
    @pytest.mark.asyncio
    async def test_offline_builds_own_cache(self, offline_settings):
        results = await convert_colors(["#000", "#FFF", "#000000"], settings=offline_settings)
        assert list(results) == ["#000000", "#FFFFFF"]
        assert results["#000000"].conversions.smart_print_recipe.as_tuple() == (60, 40, 40, 100)

    @pytest.mark.asyncio
    async def test_uses_given_cache_and_client(
        self, online_settings, mock_llm_client, make_reply, recipe_item
    ):
        cache = RecipeCache()
        client = mock_llm_client(make_reply([recipe_item("#00FF00")]))
        results = await convert_colors(
            ["#00FF00"], settings=online_settings, cache=cache, client=client
        )
        assert results["#00FF00"].source == "ai"
        assert cache.get("#00FF00").source == "ai"

    @pytest.mark.asyncio
    async def test_unusable_cache_root_still_converts(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        s = Settings(_env_file=None, cache_backend="json", cache_root=blocker / "cache")
        results = await convert_colors(["#6366F1"], settings=s)
        assert results["#6366F1"].source == "heuristic"
        assert results["#6366F1"].conversions.standard_auto.as_tuple() == (59, 58, 0, 5)
