# src/core/hex_color.py — v1
"""Hex color validation, canonicalization and RGB decoding.

Every hex that enters a cache or a recipe goes through normalize_hex(),
which never raises: invalid input maps to the fixed fallback #FFFFFF.
"""

from __future__ import annotations

import re

from inkrecipe.core.models import ContrastType

FALLBACK_HEX = "#FFFFFF"

_HEX_RE = re.compile(r"#?(?:[0-9A-Fa-f]{3}){1,2}")


def is_valid_hex(value: str) -> bool:
    """True iff value is 3 or 6 hex digits, optionally prefixed with '#'."""
    return isinstance(value, str) and _HEX_RE.fullmatch(value) is not None


def normalize_hex(value: str) -> str:
    """Return the canonical '#RRGGBB' uppercase form of value.

    3-digit shorthand is expanded. Invalid input returns FALLBACK_HEX.
    """
    if not isinstance(value, str):
        return FALLBACK_HEX
    cleaned = value if value.startswith("#") else f"#{value}"
    if not is_valid_hex(cleaned):
        return FALLBACK_HEX
    digits = cleaned[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return f"#{digits.upper()}"


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    """Decode a hex color into (r, g, b) components in 0-255."""
    digits = normalize_hex(value)[1:]
    return (
        int(digits[0:2], 16),
        int(digits[2:4], 16),
        int(digits[4:6], 16),
    )


def hex_to_rgb_string(value: str) -> str:
    """CSS-style 'rgb(r, g, b)' string."""
    r, g, b = hex_to_rgb(value)
    return f"rgb({r}, {g}, {b})"


def get_contrast_type(value: str) -> ContrastType:
    """Pick DARK or LIGHT text for a swatch using YIQ brightness."""
    if not is_valid_hex(value):
        return ContrastType.DARK
    r, g, b = hex_to_rgb(value)
    yiq = (r * 299 + g * 587 + b * 114) / 1000
    return ContrastType.DARK if yiq >= 128 else ContrastType.LIGHT
