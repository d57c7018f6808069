"""Tests for the provider registry and factory."""

import pytest

from ai_news.config import LoggingConfig, ProviderConfig
from ai_news.llm.providers.factory import available_providers, create_provider
from ai_news.llm.providers.gemini import GeminiProvider


def test_available_providers_contains_gemini():
    names = available_providers()
    assert "gemini" in names
    assert "google" in names


def test_create_provider_gemini():
    provider = create_provider(
        ProviderConfig(name="gemini", model="gemini-2.5-flash", api_key="test-key"),
        LoggingConfig(),
        llm_logger=None,
    )
    assert isinstance(provider, GeminiProvider)
    assert provider.api_key == "test-key"


def test_create_provider_prefers_explicit_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    provider = create_provider(ProviderConfig(), LoggingConfig(), api_key="explicit-key")
    assert provider.api_key == "explicit-key"


def test_create_provider_reads_key_from_env(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    provider = create_provider(ProviderConfig(), LoggingConfig())
    assert provider.api_key == "env-key"


def test_create_provider_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unsupported provider"):
        create_provider(
            ProviderConfig(name="unknown-provider", model="x", api_key="test-key"),
            LoggingConfig(),
            llm_logger=None,
        )
