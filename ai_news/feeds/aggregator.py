"""
Feed aggregation: fetch configured feeds and select enrichment candidates.

Selection rules, applied per request:
1. Items without a publication time are dropped.
2. Items older than ``now - window`` are dropped (the boundary is kept).
3. At most ``per_source_limit`` survivors per source, in feed order.
4. The pool is sorted newest first, optionally deduplicated, truncated to
   ``max_items`` and numbered from 1.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable

import httpx

from ..config import FeedConfig, FetchConfig
from ..core.dedup import dedup_items
from ..core.types import Candidate, FeedSource, RawFeedItem
from ..llm.tracing import set_span_output, start_span
from ..logging_utils import log_event
from .fetcher import FetchResult, fetch_feed
from .parser import FeedParseError, parse_feed


FeedFetcher = Callable[[FeedSource], Awaitable[FetchResult]]


class FeedAggregator:
    """Fetches a fixed set of feed sources and selects recent candidates."""

    def __init__(
        self,
        feed_cfg: FeedConfig,
        fetch_cfg: FetchConfig,
        sources: list[FeedSource] | None = None,
        fetcher: FeedFetcher | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
    ):
        self.feed_cfg = feed_cfg
        self.fetch_cfg = fetch_cfg
        self.sources = sources if sources is not None else feed_cfg.feed_sources()
        self._fetcher = fetcher
        self._transport = transport
        self.logger = logger or logging.getLogger("ai_news")

    async def collect(self, now: datetime | None = None) -> list[Candidate]:
        """Fetch every source and return at most ``max_items`` candidates.

        Never raises for per-source failures; a failing source contributes
        no items. Returns an empty list when nothing survives.
        """
        now = now or datetime.now(timezone.utc)
        with start_span(
            "feeds.collect",
            kind="chain",
            attributes={"feeds.count": len(self.sources)},
        ) as span:
            per_source = await asyncio.gather(*(self._load_source(source) for source in self.sources))
            candidates = select_candidates(
                per_source,
                now=now,
                window=timedelta(hours=self.feed_cfg.window_hours),
                per_source_limit=self.feed_cfg.per_source_limit,
                max_items=self.feed_cfg.max_items,
                dedup=self.feed_cfg.dedup_enabled,
                title_similarity_threshold=self.feed_cfg.title_similarity_threshold,
            )
            set_span_output(span, [c.title for c in candidates])

        log_event(
            self.logger,
            f"Selected {len(candidates)} candidate(s) from {len(self.sources)} feed(s)",
            event="feeds_selected",
            candidates=len(candidates),
            sources=len(self.sources),
        )
        return candidates

    async def _load_source(self, source: FeedSource) -> list[RawFeedItem]:
        result = await self._fetch(source)
        if not result.ok:
            log_event(
                self.logger,
                f"Feed fetch failed for {source.name}: {result.error}",
                level=logging.WARNING,
                event="feed_fetch_failed",
                source=source.name,
                url=source.url,
                status_code=result.status_code,
                error=result.error,
            )
            return []
        try:
            items = parse_feed(result.content or result.text or "", source.name)
        except FeedParseError as exc:
            log_event(
                self.logger,
                f"Feed parse failed for {source.name}: {exc}",
                level=logging.WARNING,
                event="feed_parse_failed",
                source=source.name,
                url=source.url,
                error=str(exc),
            )
            return []
        log_event(
            self.logger,
            f"Fetched {len(items)} item(s) from {source.name}",
            level=logging.DEBUG,
            event="feed_fetched",
            source=source.name,
            items=len(items),
        )
        return items

    async def _fetch(self, source: FeedSource) -> FetchResult:
        if self._fetcher is not None:
            try:
                return await self._fetcher(source)
            except Exception as exc:  # noqa: BLE001
                return FetchResult(url=source.url, status_code=None, text=None, error=f"{type(exc).__name__}: {exc}")
        return await fetch_feed(
            source.url,
            timeout=self.fetch_cfg.timeout_seconds,
            user_agent=self.fetch_cfg.user_agent,
            trust_env=self.fetch_cfg.trust_env,
            transport=self._transport,
        )


def select_candidates(
    per_source: list[list[RawFeedItem]],
    now: datetime,
    window: timedelta = timedelta(hours=48),
    per_source_limit: int = 3,
    max_items: int = 3,
    dedup: bool = False,
    title_similarity_threshold: int = 92,
) -> list[Candidate]:
    """Apply recency filtering and truncation to per-source item lists.

    Args:
        per_source: One list of parsed items per source, in feed order
        now: Evaluation time; defines the recency cutoff
        window: Recency window; items published exactly at the cutoff are kept
        per_source_limit: Maximum survivors taken from one source
        max_items: Maximum candidates returned
        dedup: Whether to drop duplicate URLs and near-identical titles
        title_similarity_threshold: Fuzzy title threshold used when dedup is on

    Returns:
        Candidates sorted by publication time, newest first, indexed from 1
    """
    cutoff = now - window
    pool: list[RawFeedItem] = []
    for items in per_source:
        recent = [
            item
            for item in items
            if item.published_at is not None and item.published_at >= cutoff
        ]
        pool.extend(recent[:per_source_limit])

    # sorted() is stable, so equal timestamps keep source order
    pool = sorted(pool, key=lambda item: item.published_at, reverse=True)
    if dedup:
        pool = dedup_items(pool, title_similarity_threshold)

    return [Candidate(index=idx + 1, item=item) for idx, item in enumerate(pool[:max_items])]
