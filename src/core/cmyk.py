# src/core/cmyk.py — v1
"""RGB → CMYK conversion engines.

Two pure, synchronous engines:
  1. standard_cmyk(): closed-form subtractive conversion.
  2. heuristic_recipe(): hue-banded print corrections applied on top of (1).

heuristic_result() is the unconditional fallback for every hex code and
must never fail.
"""

from __future__ import annotations

import math

from inkrecipe.core.hex_color import hex_to_rgb, normalize_hex
from inkrecipe.core.models import (
    CmykValues,
    Conversions,
    PrintConversion,
    PrintResult,
    SmartPrintRecipe,
    StandardConversion,
)

RICH_BLACK_HEX = "#000000"

RATIONALE_RICH_BLACK = "Rich Black mix applied for deeper, professional coverage."
RATIONALE_WARM = "Removed Cyan/Black to prevent browning; boosted vibrancy for print."
RATIONALE_BLUE = (
    "Capped Magenta to prevent purple shift; boosted Cyan and added depth Black."
)
RATIONALE_GREEN = (
    "Removed Magenta/Black to prevent mudding; relied on heavy Cyan/Yellow mix."
)
RATIONALE_NONE = "Standard conversion applied."


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves toward +infinity."""
    return int(math.floor(value + 0.5))


def clamp_ink(value: float) -> int:
    """Round and clamp an ink percentage into [0, 100]."""
    return max(0, min(100, round_half_up(value)))


def standard_cmyk(hex_code: str) -> CmykValues:
    """Classical RGB → CMYK formula, rounded to integer percentages."""
    r, g, b = hex_to_rgb(hex_code)
    rp, gp, bp = r / 255, g / 255, b / 255
    k = 1 - max(rp, gp, bp)
    if k == 1:
        return CmykValues(c=0, m=0, y=0, k=100)
    return CmykValues(
        c=round_half_up(((1 - rp - k) / (1 - k)) * 100),
        m=round_half_up(((1 - gp - k) / (1 - k)) * 100),
        y=round_half_up(((1 - bp - k) / (1 - k)) * 100),
        k=round_half_up(k * 100),
    )


def hue_degrees(r: int, g: int, b: int) -> float:
    """Hue in [0, 360) from max/min chroma; achromatic colors get 0."""
    rf, gf, bf = r / 255, g / 255, b / 255
    hi, lo = max(rf, gf, bf), min(rf, gf, bf)
    if hi == lo:
        return 0.0
    d = hi - lo
    if hi == rf:
        h = (gf - bf) / d + (6 if gf < bf else 0)
    elif hi == gf:
        h = (bf - rf) / d + 2
    else:
        h = (rf - gf) / d + 4
    return (h / 6) * 360


def heuristic_recipe(hex_code: str, standard: CmykValues) -> SmartPrintRecipe:
    """Apply the first matching correction rule to the standard values.

    Rule order: rich black, warm (0-50° / 330-360°), blue (190-260°),
    green (70-165°), otherwise pass-through.
    """
    normalized = normalize_hex(hex_code)
    hue = hue_degrees(*hex_to_rgb(normalized))
    c, m, y, k = standard.as_tuple()

    if normalized == RICH_BLACK_HEX:
        return SmartPrintRecipe(
            c=60, m=40, y=40, k=100, modifications_made=RATIONALE_RICH_BLACK
        )

    if 0 <= hue <= 50 or 330 <= hue <= 360:
        return SmartPrintRecipe(
            c=0,
            m=min(100, round_half_up(m * 1.2)),
            y=min(100, round_half_up(y * 1.15)),
            k=0,
            modifications_made=RATIONALE_WARM,
        )

    if 190 <= hue <= 260:
        return SmartPrintRecipe(
            c=100,
            m=min(70, m),
            y=y,
            k=max(5, min(15, k + 5)),
            modifications_made=RATIONALE_BLUE,
        )

    if 70 <= hue <= 165:
        return SmartPrintRecipe(
            c=round_half_up(c * 0.9),
            m=0,
            y=100,
            k=0,
            modifications_made=RATIONALE_GREEN,
        )

    return SmartPrintRecipe(c=c, m=m, y=y, k=k, modifications_made=RATIONALE_NONE)


def standard_conversion(hex_code: str) -> StandardConversion:
    """Deterministic values with the fixed caveat attached."""
    values = standard_cmyk(hex_code)
    return StandardConversion(**values.model_dump())


def get_print_conversions(hex_code: str) -> PrintConversion:
    """Compute both recipes for a hex code with the local engines."""
    normalized = normalize_hex(hex_code)
    standard = standard_conversion(normalized)
    return PrintConversion(
        input_hex=normalized,
        conversions=Conversions(
            standard_auto=standard,
            smart_print_recipe=heuristic_recipe(normalized, standard),
        ),
    )


def heuristic_result(hex_code: str) -> PrintResult:
    """Heuristic recipe tagged with 'heuristic' provenance."""
    return PrintResult.from_conversion(get_print_conversions(hex_code), "heuristic")
