# src/recipes/coordinator.py — v2
"""Batch fetch coordinator: cache → one remote call → heuristic fallback.

For a set of hex codes:
  1. Normalize and deduplicate.
  2. Serve cache hits with their stored provenance: 'cache' for entries
     hydrated from the durable tier, 'ai' or 'heuristic' for entries
     resolved earlier in this session.
  3. Without a usable credential, resolve misses with the heuristic engine
     and cache them as 'heuristic'.
  4. Otherwise send ALL misses in one remote call. Any failure of that call
     (transport, status, timeout, unparseable reply) falls the whole batch
     back to the heuristic engine. Misses absent from a good reply fall back
     individually.
  5. Cache 'ai' results and flush the durable tier once per batch.

The remote call is the only await point.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Iterable

from inkrecipe.cache.recipe_cache import RecipeCache
from inkrecipe.config.settings import Settings, load_settings
from inkrecipe.core.cmyk import heuristic_result
from inkrecipe.core.hex_color import normalize_hex
from inkrecipe.core.models import PrintResult
from inkrecipe.llm.base_client import BaseLLMClient
from inkrecipe.llm.client_factory import create_llm_client
from inkrecipe.llm.models import GenerationRequest
from inkrecipe.llm.retry import with_retry
from inkrecipe.logging.context import bound_context
from inkrecipe.recipes.parser import parse_remote_reply
from inkrecipe.recipes.prompt import build_prompt

logger = logging.getLogger(__name__)


def dedupe_hexes(hex_codes: Iterable[str]) -> list[str]:
    """Normalize hex codes, dropping duplicates while keeping first-seen order."""
    seen: dict[str, None] = {}
    for code in hex_codes:
        seen.setdefault(normalize_hex(code), None)
    return list(seen)


class BatchFetchCoordinator:
    """Resolves batches of hex codes into recipes, owning no global state."""

    def __init__(
        self,
        cache: RecipeCache,
        settings: Settings | None = None,
        client: BaseLLMClient | None = None,
    ) -> None:
        self._cache = cache
        self._settings = settings if settings is not None else load_settings()
        self._client = client
        self.remote_calls = 0

    @property
    def cache(self) -> RecipeCache:
        return self._cache

    @property
    def remote_enabled(self) -> bool:
        return self._settings.remote_enabled

    async def fetch_batch(self, hex_codes: Iterable[str]) -> dict[str, PrintResult]:
        """Resolve every hex code to a PrintResult. Never raises for remote failures.

        Cache hits are returned unchanged, so a hex resolved by the remote
        model earlier in the session still reports 'ai'.

        Args:
            hex_codes: Raw or normalized hex codes, duplicates allowed.

        Returns:
            Mapping of normalized hex → PrintResult for every distinct input.
        """
        batch_id = uuid.uuid4().hex[:8]
        with bound_context(batch_id=batch_id):
            return await self._resolve(batch_id, hex_codes)

    async def _resolve(
        self, batch_id: str, hex_codes: Iterable[str]
    ) -> dict[str, PrintResult]:
        results: dict[str, PrintResult] = {}
        uncached: list[str] = []
        for hex_code in dedupe_hexes(hex_codes):
            cached = self._cache.get(hex_code)
            if cached is not None:
                results[hex_code] = cached
            else:
                uncached.append(hex_code)

        if not uncached:
            logger.debug("Batch %s: all %d color(s) cached", batch_id, len(results))
            return results

        if not self.remote_enabled:
            for hex_code in uncached:
                fallback = heuristic_result(hex_code)
                results[hex_code] = fallback
                self._cache.set(hex_code, fallback)
            self._cache.flush()
            logger.debug(
                "Batch %s: heuristic-only mode, resolved %d color(s)",
                batch_id, len(uncached),
            )
            return results

        try:
            resolved = await self._request_remote(uncached)
        except Exception as e:
            logger.warning(
                "Remote CMYK fetch failed for %d color(s), falling back to heuristic: %s",
                len(uncached), e,
            )
            for hex_code in uncached:
                results[hex_code] = heuristic_result(hex_code)
            return results

        missing = 0
        for hex_code in uncached:
            result = resolved.get(hex_code)
            if result is None:
                missing += 1
                results[hex_code] = heuristic_result(hex_code)
                continue
            results[hex_code] = result
            self._cache.set(hex_code, result)
        self._cache.flush()

        if missing:
            logger.warning(
                "Remote reply covered %d of %d color(s); heuristic used for the rest",
                len(uncached) - missing, len(uncached),
            )
        logger.info(
            "Batch %s: %d cached, %d ai, %d heuristic",
            batch_id, len(results) - len(uncached), len(uncached) - missing, missing,
        )
        return results

    async def _request_remote(self, hex_codes: list[str]) -> dict[str, PrintResult]:
        """One remote call for the whole batch, with optional timeout and retry."""
        client = self._get_client()
        request = GenerationRequest(
            prompt=build_prompt(hex_codes),
            temperature=self._settings.llm_temperature,
            max_output_tokens=self._settings.llm_max_output_tokens,
        )

        async def attempt() -> dict[str, PrintResult]:
            self.remote_calls += 1
            call = client.generate(request)
            if self._settings.remote_timeout_s is not None:
                reply = await asyncio.wait_for(call, self._settings.remote_timeout_s)
            else:
                reply = await call
            return parse_remote_reply(reply.text, hex_codes)

        if self._settings.remote_retry_enabled:
            return await with_retry(attempt, operation="cmyk_batch")
        return await attempt()

    def _get_client(self) -> BaseLLMClient:
        if self._client is None:
            self._client = create_llm_client(self._settings)
        return self._client
