# src/recipes/parser.py — v2
"""Strict decoding of the remote batch reply.

The reply text must be a JSON array (optionally wrapped in code fences) of
{hex, c, m, y, k, explanation, paper} objects. Anything else, including a
single item with a missing or wrong-typed field, raises RecipeParseError.

Ink values are rounded and clamped into [0, 100]; standard_auto is always
recomputed locally from the resolved hex.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Collection

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr, TypeAdapter, ValidationError

from inkrecipe.core.cmyk import clamp_ink, standard_conversion
from inkrecipe.core.hex_color import is_valid_hex, normalize_hex
from inkrecipe.core.models import (
    DEFAULT_PAPER_TYPE,
    Conversions,
    PrintResult,
    SmartPrintRecipe,
)

logger = logging.getLogger(__name__)

_FENCE_OPEN_RE = re.compile(r"```json?\n?", re.IGNORECASE)


class RecipeParseError(ValueError):
    """Raised when a remote reply cannot be decoded into recipes."""


class RemoteRecipeItem(BaseModel):
    """One element of the remote JSON array."""

    model_config = ConfigDict(extra="ignore")

    hex: StrictStr
    c: StrictInt | StrictFloat
    m: StrictInt | StrictFloat
    y: StrictInt | StrictFloat
    k: StrictInt | StrictFloat
    explanation: StrictStr
    paper: StrictStr | None = None


_ITEMS_ADAPTER = TypeAdapter(list[RemoteRecipeItem])


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers around a JSON body."""
    return _FENCE_OPEN_RE.sub("", text).replace("```", "").strip()


def decode_items(text: str) -> list[RemoteRecipeItem]:
    """Parse reply text into validated items.

    Raises:
        RecipeParseError: On non-JSON text, a non-array body, or any item
            failing the schema.
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise RecipeParseError(f"Failed to parse remote reply as JSON: {e}") from e
    if not isinstance(data, list):
        raise RecipeParseError(
            f"Failed to parse remote reply: expected array, got {type(data).__name__}"
        )
    try:
        return _ITEMS_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise RecipeParseError(
            f"Failed to parse remote reply: {e.error_count()} schema error(s)"
        ) from e


def item_to_result(item: RemoteRecipeItem) -> PrintResult:
    """Build an 'ai' PrintResult from one validated item."""
    normalized = normalize_hex(item.hex)
    return PrintResult(
        input_hex=normalized,
        conversions=Conversions(
            standard_auto=standard_conversion(normalized),
            smart_print_recipe=SmartPrintRecipe(
                c=clamp_ink(item.c),
                m=clamp_ink(item.m),
                y=clamp_ink(item.y),
                k=clamp_ink(item.k),
                modifications_made=item.explanation,
                paper_type=item.paper or DEFAULT_PAPER_TYPE,
            ),
        ),
        source="ai",
    )


def parse_remote_reply(
    text: str, requested: Collection[str]
) -> dict[str, PrintResult]:
    """Decode a reply and keep only recipes for requested hex codes.

    Items whose hex is malformed or was not requested are dropped before
    they can be matched to anything.

    Args:
        text: Raw reply text from the remote model.
        requested: Normalized hex codes sent in the batch.

    Returns:
        Mapping of normalized hex → 'ai' PrintResult. Requested hex codes
        missing from the reply are simply absent.

    Raises:
        RecipeParseError: If the reply as a whole is unusable.
    """
    wanted = set(requested)
    results: dict[str, PrintResult] = {}
    for item in decode_items(text):
        if not is_valid_hex(item.hex):
            logger.warning("Dropping recipe with malformed hex %r", item.hex)
            continue
        normalized = normalize_hex(item.hex)
        if normalized not in wanted:
            logger.warning("Dropping recipe for unrequested hex %r", item.hex)
            continue
        if normalized in results:
            logger.debug("Ignoring duplicate recipe for %s", normalized)
            continue
        results[normalized] = item_to_result(item)
    return results
