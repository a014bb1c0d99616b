# src/llm/client_factory.py — v3
"""Build the remote generation client named by the settings.

Adapters are registered by dotted class path and imported on first use,
so the provider SDK is only loaded when a remote call is actually made.
"""

from __future__ import annotations

import importlib
import logging

from inkrecipe.config.settings import Settings
from inkrecipe.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

_PROVIDER_REGISTRY: dict[str, str] = {
    "google": "inkrecipe.llm.adapters.google_adapter.GoogleAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when settings name a provider that is not registered."""


def available_providers() -> list[str]:
    return sorted(_PROVIDER_REGISTRY)


def create_llm_client(settings: Settings) -> BaseLLMClient:
    """Instantiate the adapter for settings.llm_provider.

    The adapter receives the configured model and credential.

    Raises:
        UnsupportedProviderError: If the provider is not registered.
    """
    provider = settings.llm_provider
    class_path = _PROVIDER_REGISTRY.get(provider)
    if class_path is None:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(available_providers())}"
        )

    module_path, class_name = class_path.rsplit(".", 1)
    adapter_cls = getattr(importlib.import_module(module_path), class_name)
    logger.debug("Creating LLM client: provider=%s, model=%s", provider, settings.llm_model)
    return adapter_cls(model=settings.llm_model, api_key=settings.google_api_key)


def register_provider(name: str, class_path: str) -> None:
    """Register an adapter class (dotted path) under a provider name.

    The class must accept `model` and `api_key` keyword arguments.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered LLM provider: %s -> %s", name, class_path)
