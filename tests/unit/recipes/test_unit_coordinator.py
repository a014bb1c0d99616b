# tests/unit/recipes/test_unit_coordinator.py — v2
"""Tests for recipes/coordinator.py — batching, caching and fallback."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from inkrecipe.config.settings import Settings
from inkrecipe.core.cmyk import standard_cmyk
from inkrecipe.llm.models import GenerationReply
from inkrecipe.logging.context import get_context
from inkrecipe.recipes.coordinator import BatchFetchCoordinator, dedupe_hexes


def _prompt_of(client: AsyncMock) -> str:
    return client.generate.call_args.args[0].prompt


class TestDedupeHexes:
    def test_normalizes_and_keeps_order(self):
        assert dedupe_hexes(["fff", "#000", "#FFFFFF", "000000"]) == ["#FFFFFF", "#000000"]


class TestHeuristicOnlyMode:
    @pytest.mark.asyncio
    async def test_no_credential(self, recipe_cache, offline_settings, mock_llm_client):
        client = mock_llm_client()
        coordinator = BatchFetchCoordinator(recipe_cache, offline_settings, client)
        results = await coordinator.fetch_batch(["#6366F1"])

        result = results["#6366F1"]
        assert result.source == "heuristic"
        assert result.conversions.standard_auto.as_tuple() == (59, 58, 0, 5)
        client.generate.assert_not_awaited()
        assert recipe_cache.get("#6366F1").source == "heuristic"

    @pytest.mark.asyncio
    async def test_placeholder_credential(self, recipe_cache, mock_llm_client):
        s = Settings(_env_file=None, cache_backend="memory", google_api_key="PLACEHOLDER_API_KEY")
        client = mock_llm_client()
        results = await BatchFetchCoordinator(recipe_cache, s, client).fetch_batch(["#FFF"])
        assert results["#FFFFFF"].source == "heuristic"
        client.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_flushes_durable_tier(self, memory_store, recipe_cache, offline_settings):
        await BatchFetchCoordinator(recipe_cache, offline_settings).fetch_batch(["#000"])
        assert "#000000" in memory_store.get("hexviewer_ai_cmyk_cache")


class TestRemotePath:
    @pytest.mark.asyncio
    async def test_one_call_for_all_uncached(
        self, recipe_cache, online_settings, mock_llm_client, make_reply, recipe_item
    ):
        client = mock_llm_client(make_reply([recipe_item("#FF0000"), recipe_item("#00FF00")]))
        coordinator = BatchFetchCoordinator(recipe_cache, online_settings, client)
        results = await coordinator.fetch_batch(["#FF0000", "#0F0", "#ff0000"])

        assert client.generate.await_count == 1
        assert coordinator.remote_calls == 1
        assert set(results) == {"#FF0000", "#00FF00"}
        assert all(r.source == "ai" for r in results.values())
        prompt = _prompt_of(client)
        assert "#FF0000" in prompt and "#00FF00" in prompt

    @pytest.mark.asyncio
    async def test_generation_parameters(
        self, recipe_cache, online_settings, mock_llm_client, make_reply, recipe_item
    ):
        client = mock_llm_client(make_reply([recipe_item("#FF0000")]))
        await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch(["#F00"])
        request = client.generate.call_args.args[0]
        assert request.temperature == 0.2
        assert request.max_output_tokens == 2048

    @pytest.mark.asyncio
    async def test_ai_results_cached(
        self, recipe_cache, online_settings, mock_llm_client, make_reply, recipe_item
    ):
        client = mock_llm_client(make_reply([recipe_item("#FF0000", c=5, m=90, y=85, k=0)]))
        coordinator = BatchFetchCoordinator(recipe_cache, online_settings, client)
        await coordinator.fetch_batch(["#FF0000"])
        again = await coordinator.fetch_batch(["#FF0000"])

        assert client.generate.await_count == 1
        assert again["#FF0000"].source == "ai"
        assert again["#FF0000"].conversions.smart_print_recipe.as_tuple() == (5, 90, 85, 0)

    @pytest.mark.asyncio
    async def test_hits_keep_stored_provenance(
        self, memory_store, online_settings, mock_llm_client, make_reply
    ):
        from inkrecipe.cache.recipe_cache import RecipeCache
        from inkrecipe.core.cmyk import heuristic_result

        writer = RecipeCache(store=memory_store)
        writer.set("#00FF00", heuristic_result("#00FF00").with_source("ai"))
        writer.flush()

        cache = RecipeCache(store=memory_store)
        cache.hydrate()
        cache.set("#0000FF", heuristic_result("#0000FF"))
        client = mock_llm_client(make_reply([]))
        coordinator = BatchFetchCoordinator(cache, online_settings, client)
        results = await coordinator.fetch_batch(["#00FF00", "#0000FF"])

        client.generate.assert_not_awaited()
        assert results["#00FF00"].source == "cache"
        assert results["#0000FF"].source == "heuristic"

    @pytest.mark.asyncio
    async def test_only_misses_sent(
        self, recipe_cache, online_settings, mock_llm_client, make_reply, recipe_item
    ):
        from inkrecipe.core.cmyk import heuristic_result

        recipe_cache.set("#0000FF", heuristic_result("#0000FF").with_source("cache"))
        client = mock_llm_client(make_reply([recipe_item("#FF0000")]))
        results = await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch(
            ["#0000FF", "#FF0000"]
        )

        prompt = _prompt_of(client)
        assert "#0000FF" not in prompt
        assert results["#0000FF"].source == "cache"
        assert results["#FF0000"].source == "ai"

    @pytest.mark.asyncio
    async def test_all_cached_skips_remote(self, recipe_cache, online_settings, mock_llm_client):
        from inkrecipe.core.cmyk import heuristic_result

        recipe_cache.set("#FFFFFF", heuristic_result("#FFFFFF").with_source("cache"))
        client = mock_llm_client()
        results = await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch(
            ["#FFF"]
        )
        client.generate.assert_not_awaited()
        assert results["#FFFFFF"].source == "cache"

    @pytest.mark.asyncio
    async def test_partial_coverage_falls_back_per_hex(
        self, recipe_cache, online_settings, mock_llm_client, make_reply, recipe_item
    ):
        client = mock_llm_client(make_reply([recipe_item("#FF0000")]))
        results = await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch(
            ["#FF0000", "#0000FF"]
        )
        assert results["#FF0000"].source == "ai"
        assert results["#0000FF"].source == "heuristic"
        assert recipe_cache.get("#0000FF") is None

    @pytest.mark.asyncio
    async def test_hallucinated_hex_not_attributed(
        self, recipe_cache, online_settings, mock_llm_client, make_reply, recipe_item
    ):
        client = mock_llm_client(make_reply([recipe_item("#ABCDEF")]))
        results = await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch(
            ["#FF0000"]
        )
        assert set(results) == {"#FF0000"}
        assert results["#FF0000"].source == "heuristic"
        assert "#ABCDEF" not in recipe_cache

    @pytest.mark.asyncio
    async def test_malformed_hex_not_cached_as_white(
        self, recipe_cache, memory_store, online_settings, mock_llm_client, make_reply,
        recipe_item,
    ):
        client = mock_llm_client(
            make_reply([recipe_item("not-a-hex", c=10, m=90, y=90, k=50), recipe_item("#FF0000")])
        )
        results = await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch(
            ["#FFFFFF", "#FF0000"]
        )
        assert results["#FF0000"].source == "ai"
        assert results["#FFFFFF"].source == "heuristic"
        assert results["#FFFFFF"].conversions.smart_print_recipe.as_tuple() == (0, 0, 0, 0)
        assert recipe_cache.get("#FFFFFF") is None
        assert "#FFFFFF" not in memory_store.get("hexviewer_ai_cmyk_cache")

    @pytest.mark.asyncio
    async def test_out_of_range_values_clamped(
        self, recipe_cache, online_settings, mock_llm_client, make_reply, recipe_item
    ):
        client = mock_llm_client(make_reply([recipe_item("#FF0000", c=130.7, m=-3, y=55.5, k=0.4)]))
        results = await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch(
            ["#FF0000"]
        )
        assert results["#FF0000"].conversions.smart_print_recipe.as_tuple() == (100, 0, 56, 0)
        assert recipe_cache.get("#FF0000").conversions.smart_print_recipe.c == 100


class TestRemoteFailure:
    @pytest.mark.asyncio
    async def test_transport_failure(self, recipe_cache, online_settings, mock_llm_client):
        client = mock_llm_client(ConnectionError("network down"))
        results = await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch(
            ["#000000", "#FFFFFF"]
        )

        black = results["#000000"]
        white = results["#FFFFFF"]
        assert black.source == white.source == "heuristic"
        assert black.conversions.smart_print_recipe.as_tuple() == (60, 40, 40, 100)
        assert white.conversions.standard_auto.as_tuple() == (0, 0, 0, 0)
        assert white.conversions.smart_print_recipe.as_tuple() == (0, 0, 0, 0)
        assert len(recipe_cache) == 0

    @pytest.mark.asyncio
    async def test_malformed_reply(self, recipe_cache, online_settings, mock_llm_client):
        reply = GenerationReply(text="not json at all", model="m", provider="google")
        client = mock_llm_client(reply)
        results = await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch(
            ["#FF0000", "#00FF00"]
        )
        assert all(r.source == "heuristic" for r in results.values())

    @pytest.mark.asyncio
    async def test_schema_mismatch_fails_whole_batch(
        self, recipe_cache, online_settings, mock_llm_client, make_reply, recipe_item
    ):
        bad = recipe_item("#00FF00")
        del bad["k"]
        client = mock_llm_client(make_reply([recipe_item("#FF0000"), bad]))
        results = await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch(
            ["#FF0000", "#00FF00"]
        )
        assert results["#FF0000"].source == "heuristic"
        assert results["#00FF00"].source == "heuristic"

    @pytest.mark.asyncio
    async def test_timeout_routes_to_fallback(self, recipe_cache, mock_llm_client):
        async def slow(*args, **kwargs):
            await asyncio.sleep(5)

        s = Settings(
            _env_file=None, cache_backend="memory", google_api_key="k", remote_timeout_s=0.01
        )
        client = mock_llm_client()
        client.generate = AsyncMock(side_effect=slow)
        results = await BatchFetchCoordinator(recipe_cache, s, client).fetch_batch(["#FF0000"])
        assert results["#FF0000"].source == "heuristic"

    @pytest.mark.asyncio
    async def test_unsupported_provider_falls_back(self, recipe_cache):
        s = Settings(_env_file=None, cache_backend="memory", google_api_key="k", llm_provider="nope")
        results = await BatchFetchCoordinator(recipe_cache, s).fetch_batch(["#FF0000"])
        assert results["#FF0000"].source == "heuristic"

    @pytest.mark.asyncio
    async def test_retry_recovers(self, recipe_cache, mock_llm_client, make_reply, recipe_item):
        s = Settings(
            _env_file=None, cache_backend="memory", google_api_key="k", remote_retry_enabled=True
        )
        client = mock_llm_client()
        client.generate = AsyncMock(
            side_effect=[Exception("503 server"), make_reply([recipe_item("#FF0000")])]
        )
        coordinator = BatchFetchCoordinator(recipe_cache, s, client)
        with patch("inkrecipe.llm.retry.asyncio.sleep", new=AsyncMock()):
            results = await coordinator.fetch_batch(["#FF0000"])
        assert results["#FF0000"].source == "ai"
        assert coordinator.remote_calls == 2


class TestEmptyInput:
    @pytest.mark.asyncio
    async def test_empty(self, recipe_cache, online_settings, mock_llm_client):
        client = mock_llm_client()
        assert await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch([]) == {}
        client.generate.assert_not_awaited()


class TestStandardConsistency:
    @pytest.mark.asyncio
    async def test_ai_standard_matches_formula(
        self, recipe_cache, online_settings, mock_llm_client, make_reply, recipe_item
    ):
        client = mock_llm_client(make_reply([recipe_item("#6366F1")]))
        results = await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch(
            ["#6366F1"]
        )
        assert (
            results["#6366F1"].conversions.standard_auto.as_tuple()
            == standard_cmyk("#6366F1").as_tuple()
        )


class TestLogContext:
    @pytest.mark.asyncio
    async def test_batch_id_bound_only_during_fetch(
        self, recipe_cache, online_settings, mock_llm_client, make_reply, recipe_item
    ):
        seen: list[str | None] = []

        async def capture(request):
            seen.append(get_context().batch_id)
            return make_reply([recipe_item("#FF0000")])

        client = mock_llm_client()
        client.generate = AsyncMock(side_effect=capture)
        await BatchFetchCoordinator(recipe_cache, online_settings, client).fetch_batch(["#F00"])

        assert seen[0] is not None and len(seen[0]) == 8
        assert get_context().batch_id is None
