# src/llm/models.py — v2
"""Request and reply types for a single-prompt generation call."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GenerationRequest(BaseModel):
    """One prompt plus the generation parameters sent with it."""

    model_config = ConfigDict(frozen=True)

    prompt: str
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=2048, ge=1)


class GenerationReply(BaseModel):
    """Provider-neutral view of a generation result.

    `text` is the first candidate's first text part, or "" when the
    provider returned no usable candidate.
    """

    text: str
    model: str
    provider: str
    finish_reason: str | None = None
    prompt_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    raw_response: Any = None
