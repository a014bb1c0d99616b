# src/llm/base_client.py — v2
"""Abstract generative-model client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from inkrecipe.llm.models import GenerationReply, GenerationRequest


class BaseLLMClient(ABC):
    """One-shot text generation against a remote provider.

    Implementations raise on transport or status failures; a reply without
    text is returned with an empty `text` and left to the caller.
    """

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationReply:
        """Send request.prompt and return the provider's reply."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Registry key of this provider."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model the client sends requests to."""
