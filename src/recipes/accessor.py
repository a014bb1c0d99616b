# src/recipes/accessor.py — v2
"""Consumer-facing result accessor.

get_result() is synchronous and always returns something renderable:
latest refresh result, then the recipe cache, then the heuristic engine.

set_colors() starts a background refresh whenever the ordered list of hex
values changes. Each refresh captures a generation token; only the refresh
whose token is still current may touch observable state (results, loading
flag, listeners). After close() every completion is a no-op. Superseded
refreshes keep running and are held until they finish.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from inkrecipe.cache.recipe_cache import RecipeCache
from inkrecipe.core.cmyk import heuristic_result
from inkrecipe.core.hex_color import normalize_hex
from inkrecipe.core.models import ColorRecord, PrintResult
from inkrecipe.logging.context import set_color_key_context
from inkrecipe.recipes.coordinator import BatchFetchCoordinator

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


def color_set_key(colors: Sequence[ColorRecord | str]) -> str:
    """Identity of a color set: its hex values in order, comma-joined."""
    return ",".join(c.hex if isinstance(c, ColorRecord) else c for c in colors)


class ResultAccessor:
    """Best-available recipes for the colors currently in view."""

    def __init__(
        self,
        coordinator: BatchFetchCoordinator,
        cache: RecipeCache | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._cache = cache if cache is not None else coordinator.cache
        self._results: dict[str, PrintResult] = {}
        self._loading = False
        self._generation = 0
        self._color_key: str | None = None
        self._task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._listeners: list[Listener] = []
        self._closed = False

    # --- reads ---

    def get_result(self, hex_code: str) -> PrintResult:
        """Synchronous lookup; never suspends, never raises."""
        normalized = normalize_hex(hex_code)
        result = self._results.get(normalized)
        if result is not None:
            return result
        cached = self._cache.get(normalized)
        if cached is not None:
            return cached
        return heuristic_result(normalized)

    @property
    def is_loading(self) -> bool:
        """True while a refresh for the current color set is outstanding."""
        return self._loading

    @property
    def color_key(self) -> str | None:
        return self._color_key

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending_refreshes(self) -> int:
        """Refresh tasks still running, stale ones included."""
        return len(self._tasks)

    # --- refresh ---

    def set_colors(
        self, colors: Sequence[ColorRecord | str]
    ) -> asyncio.Task[None] | None:
        """Declare the colors in view; refresh when the set changed.

        Must be called from a running event loop. Returns the refresh task
        (the one already running when the set is unchanged), or None when
        there is nothing to fetch.
        """
        if self._closed:
            return None
        key = color_set_key(colors)
        if key == self._color_key:
            return self._task

        self._color_key = key
        self._generation += 1
        if not colors:
            self._task = None
            self._loading = False
            return None

        hexes = [c.hex if isinstance(c, ColorRecord) else c for c in colors]
        self._loading = True
        task = asyncio.get_running_loop().create_task(
            self._refresh(self._generation, key, hexes)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._task = task
        return task

    async def wait(self) -> None:
        """Wait for the current refresh, if any."""
        if self._task is not None:
            await self._task

    async def _refresh(self, token: int, key: str, hexes: list[str]) -> None:
        set_color_key_context(key)
        try:
            results = await self._coordinator.fetch_batch(hexes)
        except Exception:
            logger.exception("Refresh for %d color(s) failed", len(hexes))
            if self._is_current(token):
                self._loading = False
                self._notify()
            return

        if not self._is_current(token):
            logger.debug("Discarding stale refresh (generation %d)", token)
            return

        self._results.update(results)
        self._loading = False
        self._notify()

    def _is_current(self, token: int) -> bool:
        return not self._closed and token == self._generation

    # --- observers ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener after each accepted refresh. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Result listener failed")

    def close(self) -> None:
        """Tear down the consumer; pending refreshes become no-ops."""
        self._closed = True
        self._listeners.clear()
