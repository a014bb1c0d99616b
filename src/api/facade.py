# src/api/facade.py — v1
"""Public API facade — one-shot batch conversion.

Usage:
    from inkrecipe.api.facade import convert_colors
    results = await convert_colors(["#6366F1", "#000"])
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from inkrecipe.cache.cache_factory import create_recipe_cache
from inkrecipe.config.settings import Settings, load_settings
from inkrecipe.core.models import PrintResult
from inkrecipe.recipes.coordinator import BatchFetchCoordinator

if TYPE_CHECKING:
    from inkrecipe.cache.recipe_cache import RecipeCache
    from inkrecipe.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)


async def convert_colors(
    hex_codes: Iterable[str],
    settings: Settings | None = None,
    cache: RecipeCache | None = None,
    client: BaseLLMClient | None = None,
) -> dict[str, PrintResult]:
    """Resolve print recipes for a batch of hex codes.

    Args:
        hex_codes: Hex codes in any accepted form.
        settings: Global settings. Loaded from .env if None.
        cache: Recipe cache to read and update. Built from settings if None.
        client: Remote model client. Built from settings on demand if None.

    Returns:
        Mapping of normalized hex → PrintResult, in first-seen input order.
    """
    settings = settings if settings is not None else load_settings()
    owns_cache = cache is None
    if cache is None:
        cache = create_recipe_cache(settings)

    try:
        coordinator = BatchFetchCoordinator(cache, settings=settings, client=client)
        return await coordinator.fetch_batch(hex_codes)
    finally:
        if owns_cache:
            cache.close()
