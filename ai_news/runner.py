"""
Pipeline orchestration for one news request.

Stages:
1. Check that a provider API key is configured
2. Collect recent candidates from the configured feeds
3. Enrich the candidates through the generation provider
4. Return the merged NewsItems

Each call is independent; nothing is cached or persisted between calls.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable

import httpx

from .analyzers.augmenter import AugmentationClient, Sleeper
from .config import AppConfig, get_api_key
from .core.types import NewsItem
from .errors import ConfigurationError, NoCandidatesError
from .feeds.aggregator import FeedAggregator, FeedFetcher
from .llm.providers import GenerationProvider, create_provider
from .llm.tracing import set_span_output, start_span
from .logging_utils import log_event


ProviderFactory = Callable[[str], GenerationProvider]


async def build_news(
    cfg: AppConfig,
    provider_factory: ProviderFactory | None = None,
    fetcher: FeedFetcher | None = None,
    feed_transport: httpx.AsyncBaseTransport | None = None,
    sleep: Sleeper = asyncio.sleep,
    now: datetime | None = None,
    logger: logging.Logger | None = None,
    llm_logger: logging.Logger | None = None,
) -> list[NewsItem]:
    """Run the full pipeline and return the news items for one request.

    Args:
        cfg: Application configuration
        provider_factory: Builds a provider from the API key (defaults to the registry)
        fetcher: Optional feed fetcher override
        feed_transport: Optional httpx transport for feed requests
        sleep: Coroutine used for retry backoff waits
        now: Evaluation time for the recency window (defaults to current UTC time)
        logger: Application logger
        llm_logger: Optional logger for prompt/response events

    Raises:
        ConfigurationError: No API key is configured
        NoCandidatesError: No feed item survived filtering
        NewsPipelineError: Augmentation failed (see AugmentationClient.enrich)
    """
    logger = logger or logging.getLogger("ai_news")

    api_key = get_api_key(cfg.provider)
    if not api_key:
        raise ConfigurationError(f"{cfg.provider.api_key_env} is not set")

    if provider_factory is not None:
        provider = provider_factory(api_key)
    else:
        provider = create_provider(cfg.provider, cfg.logging, llm_logger, api_key=api_key)

    with start_span("news.build", kind="chain") as span:
        aggregator = FeedAggregator(
            cfg.feeds,
            cfg.fetch,
            fetcher=fetcher,
            transport=feed_transport,
            logger=logger,
        )
        candidates = await aggregator.collect(now=now)
        if not candidates:
            log_event(logger, "No candidates survived filtering", level=logging.WARNING, event="no_candidates")
            raise NoCandidatesError(
                "No recent AI news was found. Please try again later.",
                details=f"No feed items published within the last {cfg.feeds.window_hours:g} hours",
            )

        augmenter = AugmentationClient(provider, cfg, sleep=sleep, logger=logger)
        today = now.date() if now is not None else None
        items = await augmenter.enrich(candidates, today=today)
        set_span_output(span, [item.title for item in items])

    log_event(logger, f"Built {len(items)} news item(s)", event="news_built", items=len(items))
    return items
