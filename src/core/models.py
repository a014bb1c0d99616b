# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
Recipes are frozen: a new hex always yields a new PrintConversion.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Provenance = Literal["ai", "heuristic", "cache"]

STANDARD_DESCRIPTION = "Standard mathematical conversion. May appear duller on paper."
DEFAULT_PAPER_TYPE = "Regular Stock"


# === INPUT RECORDS ===


class ColorRecord(BaseModel):
    """A color as held by a collection (id + raw hex value)."""

    id: str
    hex: str


class ContrastType(str, Enum):
    """Text color that reads best on top of a swatch."""

    LIGHT = "LIGHT"
    DARK = "DARK"


# === INK VALUES ===


class CmykValues(BaseModel):
    """Cyan/magenta/yellow/black ink percentages, each an integer in [0, 100]."""

    model_config = ConfigDict(frozen=True)

    c: int = Field(ge=0, le=100)
    m: int = Field(ge=0, le=100)
    y: int = Field(ge=0, le=100)
    k: int = Field(ge=0, le=100)

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.c, self.m, self.y, self.k)


class StandardConversion(CmykValues):
    """Deterministic conversion, always labelled with the fixed caveat."""

    description: str = STANDARD_DESCRIPTION


class SmartPrintRecipe(CmykValues):
    """Print-corrected recipe with its rationale and paper label."""

    modifications_made: str
    paper_type: str = DEFAULT_PAPER_TYPE


class Conversions(BaseModel):
    """Both recipes computed for one color."""

    model_config = ConfigDict(frozen=True)

    standard_auto: StandardConversion
    smart_print_recipe: SmartPrintRecipe


# === RECIPES ===


class PrintConversion(BaseModel):
    """Printable content for one normalized hex color."""

    model_config = ConfigDict(frozen=True)

    input_hex: str
    conversions: Conversions


class PrintResult(PrintConversion):
    """PrintConversion tagged with where it came from."""

    source: Provenance

    @classmethod
    def from_conversion(
        cls, conversion: PrintConversion, source: Provenance
    ) -> PrintResult:
        return cls(
            input_hex=conversion.input_hex,
            conversions=conversion.conversions,
            source=source,
        )

    def with_source(self, source: Provenance) -> PrintResult:
        """Return a copy carrying a different provenance tag."""
        return self.model_copy(update={"source": source})
