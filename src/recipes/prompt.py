# src/recipes/prompt.py — v1
"""Instruction text for one remote batch of hex codes."""

from __future__ import annotations

from collections.abc import Sequence

_TEMPLATE = """You are an expert print color technician specializing in offset and digital CMYK printing. For each hex color below, provide an optimized CMYK recipe for professional printing.

Hex codes: [{hex_list}]

For EACH color provide:
1. Optimized C, M, Y, K values (integers 0-100) for vibrant print reproduction. Apply professional knowledge:
   - Rich black (C60/M40/Y40/K100) for pure black
   - Remove cyan from warm colors to prevent mudding/browning
   - Cap magenta for blues to prevent purple shift
   - Remove magenta from greens to keep them clean
   - Keep total ink coverage under 300%
   - Account for CMYK gamut being smaller than RGB
2. A 1-2 sentence explanation of your modifications for a designer audience
3. Recommended paper type

Respond with ONLY a JSON array, no markdown, no extra text. Each element:
{{"hex":"#XXXXXX","c":0,"m":0,"y":0,"k":0,"explanation":"...","paper":"..."}}"""


def build_prompt(hex_codes: Sequence[str]) -> str:
    """Embed every hex code of the batch in one instruction."""
    hex_list = ", ".join(f'"{h}"' for h in hex_codes)
    return _TEMPLATE.format(hex_list=hex_list)
