# src/cache/models.py — v2
"""Cache domain models: CacheSnapshotEntry, CacheStats.

The durable snapshot is a JSON list of [hex, result] pairs, oldest first.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, field_validator

from inkrecipe.core.cmyk import clamp_ink
from inkrecipe.core.models import PrintResult

_INK_FIELDS = ("c", "m", "y", "k")
_RECIPE_FIELDS = ("standard_auto", "smart_print_recipe")


def _clamp_stored_inks(result: Any) -> Any:
    """Round and clamp numeric ink values of a stored result dict.

    Non-numeric values are left for model validation to reject.
    """
    if not isinstance(result, dict) or not isinstance(result.get("conversions"), dict):
        return result
    conversions = dict(result["conversions"])
    for name in _RECIPE_FIELDS:
        recipe = conversions.get(name)
        if not isinstance(recipe, dict):
            continue
        recipe = dict(recipe)
        for ink in _INK_FIELDS:
            value = recipe.get(ink)
            if (
                isinstance(value, (int, float))
                and not isinstance(value, bool)
                and math.isfinite(value)
            ):
                recipe[ink] = clamp_ink(value)
        conversions[name] = recipe
    return {**result, "conversions": conversions}


class CacheSnapshotEntry(BaseModel):
    """Single (hex, recipe+provenance) row of the durable snapshot."""

    hex: str
    result: PrintResult

    @field_validator("result", mode="before")
    @classmethod
    def clamp_inks(cls, v: Any) -> Any:
        return _clamp_stored_inks(v)

    @classmethod
    def from_pair(cls, pair: Any) -> CacheSnapshotEntry:
        """Decode a [hex, result] pair; raises ValueError on any mismatch."""
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise ValueError(f"Snapshot row is not a [hex, result] pair: {pair!r}")
        return cls(hex=pair[0], result=pair[1])

    def to_pair(self) -> list[Any]:
        return [self.hex, self.result.model_dump(mode="json")]


class CacheStats(BaseModel):
    """Point-in-time view of a RecipeCache."""

    backend: str
    entry_count: int
    max_entries: int
    by_source: dict[str, int]
    persistence_enabled: bool
