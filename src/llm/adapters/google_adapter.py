# src/llm/adapters/google_adapter.py — v2
"""Gemini adapter over the google-generativeai SDK.

The reply text is read from candidates[0].content.parts[0].text rather than
the SDK's `.text` shortcut, which raises when the candidate was blocked or
truncated. A missing candidate yields an empty text.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from inkrecipe.llm.base_client import BaseLLMClient
from inkrecipe.llm.models import GenerationReply, GenerationRequest

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"


class GoogleAdapter(BaseLLMClient):
    """Gemini text generation with a per-instance credential."""

    def __init__(self, model: str = DEFAULT_MODEL, api_key: str = "") -> None:
        if not api_key:
            raise ValueError("GoogleAdapter requires an API key")
        self._model = model
        self._api_key = api_key

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def model_name(self) -> str:
        return self._model

    async def generate(self, request: GenerationRequest) -> GenerationReply:
        import google.generativeai as genai

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model)

        started = time.monotonic()
        resp = await model.generate_content_async(
            request.prompt,
            generation_config={
                "temperature": request.temperature,
                "max_output_tokens": request.max_output_tokens,
            },
        )
        latency_ms = int((time.monotonic() - started) * 1000)

        text, finish_reason = _first_text(resp)
        if not text:
            logger.warning(
                "Gemini returned no text (finish_reason=%s)", finish_reason
            )

        usage = getattr(resp, "usage_metadata", None)
        return GenerationReply(
            text=text,
            model=self._model,
            provider=self.provider_name,
            finish_reason=finish_reason,
            prompt_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) or 0,
            latency_ms=latency_ms,
            raw_response=resp,
        )


def _first_text(resp: Any) -> tuple[str, str | None]:
    """Text of the first part of the first candidate, plus its finish reason."""
    candidates = getattr(resp, "candidates", None) or []
    if not candidates:
        return "", None
    candidate = candidates[0]
    reason = getattr(candidate, "finish_reason", None)
    reason_name = getattr(reason, "name", None) or (str(reason) if reason is not None else None)
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return "", reason_name
    return getattr(parts[0], "text", "") or "", reason_name
