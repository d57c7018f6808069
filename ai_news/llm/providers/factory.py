"""Provider factory and registry for generation backends."""

from __future__ import annotations

import logging

from ...config import LoggingConfig, ProviderConfig, get_api_key
from .base import GenerationProvider
from .gemini import GeminiProvider


ProviderBuilder = type[GeminiProvider]

_PROVIDER_REGISTRY: dict[str, ProviderBuilder] = {
    "gemini": GeminiProvider,
    "google": GeminiProvider,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(
    provider_cfg: ProviderConfig,
    log_cfg: LoggingConfig,
    llm_logger: logging.Logger | None = None,
    api_key: str | None = None,
) -> GenerationProvider:
    """Build a provider instance from runtime config.

    Raises:
        ValueError: If the provider name is unknown or no API key is available
    """
    name = provider_cfg.name.lower().strip()
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ValueError(f"Unsupported provider: {provider_cfg.name}. Supported: {supported}")
    return builder(provider_cfg, api_key or get_api_key(provider_cfg), log_cfg, llm_logger)
