"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FeedConfig: Feed sources, recency window and candidate limits
- FetchConfig: HTTP fetching settings for feed documents
- ProviderConfig: Generation provider settings
- RetryConfig: Retry policy for overloaded generation calls
- PromptConfig: Prompt content settings
- RenderConfig: Output rendering and HTML sanitizing settings
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml

from .core.types import FeedSource


DEFAULT_FEED_SOURCES: list[dict[str, str]] = [
    {"name": "OpenAI News", "url": "https://openai.com/news/rss.xml"},
    {"name": "Google AI", "url": "https://blog.google/technology/ai/rss/"},
    {"name": "TechCrunch AI", "url": "https://techcrunch.com/category/artificial-intelligence/feed/"},
    {"name": "The Verge AI", "url": "https://www.theverge.com/rss/ai-artificial-intelligence/index.xml"},
    {"name": "VentureBeat AI", "url": "https://venturebeat.com/category/ai/feed/"},
]


@dataclass
class FeedConfig:
    """Configuration for feed aggregation.

    Attributes:
        sources: Feed sources as {"name", "url"} mappings
        window_hours: Recency window; older items are discarded
        per_source_limit: Maximum survivors taken from a single source
        max_items: Maximum candidates handed to the augmentation stage
        dedup_enabled: Whether to drop duplicate URLs and near-identical titles
        title_similarity_threshold: Fuzzy match threshold (0-100) for title similarity
    """

    sources: list[dict[str, str]] = field(default_factory=lambda: [dict(s) for s in DEFAULT_FEED_SOURCES])
    window_hours: float = 48.0
    per_source_limit: int = 3
    max_items: int = 3
    dedup_enabled: bool = True
    title_similarity_threshold: int = 92

    def feed_sources(self) -> list[FeedSource]:
        return [FeedSource(name=str(s["name"]), url=str(s["url"])) for s in self.sources]


@dataclass
class FetchConfig:
    """Configuration for HTTP feed fetching.

    Attributes:
        timeout_seconds: Per-feed request timeout
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
    """

    timeout_seconds: float = 20.0
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )


@dataclass
class ProviderConfig:
    """Configuration for the generation provider.

    Attributes:
        name: Provider name ("gemini" currently supported)
        model: Model identifier (e.g., "gemini-2.5-flash")
        api_key_env: Environment variable name containing the API key
        base_url: Base URL for the provider API
        api_key: Optional inline API key (overrides env var)
        trust_env: Whether to respect system proxy settings for API requests
        timeout_seconds: Per-call timeout for the generation request
        temperature: Sampling temperature
        max_output_tokens: Output token budget for one generation call
    """

    name: str = "gemini"
    model: str = "gemini-2.5-flash"
    api_key_env: str = "GEMINI_API_KEY"
    base_url: str = "https://generativelanguage.googleapis.com"
    api_key: str | None = None
    trust_env: bool = True
    timeout_seconds: float = 60.0
    temperature: float = 0.4
    max_output_tokens: int = 16384


@dataclass
class RetryConfig:
    """Retry policy for overloaded generation calls.

    Attributes:
        max_attempts: Total attempts, including the first one
        backoff_base: Wait ``backoff_base ** k`` seconds before attempt k (k >= 1)
    """

    max_attempts: int = 3
    backoff_base: float = 2.0


@dataclass
class PromptConfig:
    """Configuration for the enrichment prompt.

    Attributes:
        language: Language for summaries and translated titles
        summary_min_chars: Lower bound of the requested summary length
        summary_max_chars: Upper bound of the requested summary length
        excerpt_chars: Maximum characters of each feed excerpt sent to the model
    """

    language: str = "Japanese"
    summary_min_chars: int = 250
    summary_max_chars: int = 350
    excerpt_chars: int = 500


@dataclass
class RenderConfig:
    """Configuration for output rendering.

    Attributes:
        sanitize_html: Reduce generated visualHtml to an allow-listed tag set
        page_title: Title shown on the browser page
        fallback_summary: Summary used when the model returned none for an item
        fallback_visual_html: Fragment used when the model returned no infographic
    """

    sanitize_html: bool = True
    page_title: str = "AI News Visualizer"
    fallback_summary: str = "要約を生成できませんでした。"
    fallback_visual_html: str = (
        '<div class="bg-slate-100 p-6 rounded-2xl border-2 border-slate-200 text-center text-slate-600">'
        "図解を生成できませんでした"
        "</div>"
    )


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        log_dir: Directory for log files
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "server.jsonl"
    log_dir: str = "logs"
    llm_log_enabled: bool = False
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "redact_urls"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    environment: str | None = None
    release: str | None = None
    redaction: str = "redact_urls"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    feeds: FeedConfig = field(default_factory=FeedConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    prompt: PromptConfig = field(default_factory=PromptConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


_SECTIONS: dict[str, type] = {
    "feeds": FeedConfig,
    "fetch": FetchConfig,
    "provider": ProviderConfig,
    "retry": RetryConfig,
    "prompt": PromptConfig,
    "render": RenderConfig,
    "logging": LoggingConfig,
    "langfuse": LangfuseConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig.

    Unknown sections and unknown keys inside a section are ignored.
    """
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict):
            allowed = data[key].keys()
            data[key].update({k: v for k, v in value.items() if k in allowed})
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, dict[str, Any]]:
    """Convert AppConfig to nested dictionary."""
    return {name: dict(vars(getattr(cfg, name))) for name in _SECTIONS}


def _fromdict(data: dict[str, dict[str, Any]]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(**{name: section(**data[name]) for name, section in _SECTIONS.items()})


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)
