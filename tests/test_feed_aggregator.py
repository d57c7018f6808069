"""Tests for feed fetching isolation and candidate selection."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import httpx

from ai_news.config import FeedConfig, FetchConfig
from ai_news.core.types import FeedSource
from ai_news.feeds.aggregator import FeedAggregator, select_candidates
from ai_news.feeds.fetcher import FetchResult

from conftest import NOW, make_item


def _rss(*entries: tuple[str, str]) -> str:
    items = "".join(
        f"<item><title>{title}</title><link>https://example.com/{title.replace(' ', '-')}</link>"
        f"<pubDate>{pub}</pubDate><description>About {title}</description></item>"
        for title, pub in entries
    )
    return f'<?xml version="1.0"?><rss version="2.0"><channel><title>Feed</title>{items}</channel></rss>'


def _rfc822(hours_ago: float) -> str:
    return (NOW - timedelta(hours=hours_ago)).strftime("%a, %d %b %Y %H:%M:%S +0000")


def test_scenario_two_sources_drops_stale_item():
    per_source = [
        [make_item("Fresh", 1, source="A"), make_item("Stale", 50, source="A")],
        [make_item("Recent", 10, source="B")],
    ]

    candidates = select_candidates(per_source, now=NOW)

    assert [c.title for c in candidates] == ["Fresh", "Recent"]
    assert [c.index for c in candidates] == [1, 2]


def test_boundary_item_is_inclusive():
    per_source = [[make_item("Edge", 48), make_item("Past", 48.001)]]

    candidates = select_candidates(per_source, now=NOW)

    assert [c.title for c in candidates] == ["Edge"]


def test_items_without_timestamp_are_dropped():
    per_source = [[make_item("Undated", None), make_item("Dated", 2)]]

    candidates = select_candidates(per_source, now=NOW)

    assert [c.title for c in candidates] == ["Dated"]


def test_per_source_and_overall_limits():
    noisy = [make_item(f"Noisy {i}", 0.1 * (i + 1), source="Noisy") for i in range(10)]
    quiet = [make_item("Quiet", 5, source="Quiet")]

    candidates = select_candidates([noisy, quiet], now=NOW, per_source_limit=3, max_items=10)

    assert len([c for c in candidates if c.source == "Noisy"]) == 3
    assert [c.title for c in candidates] == ["Noisy 0", "Noisy 1", "Noisy 2", "Quiet"]

    capped = select_candidates([noisy, quiet], now=NOW)
    assert len(capped) == 3


def test_per_source_limit_uses_feed_order_before_sorting():
    # The feed lists an older item first; only the first three survivors count.
    items = [make_item("Old first", 30), make_item("B", 3), make_item("C", 2), make_item("Newest", 1)]

    candidates = select_candidates([items], now=NOW, max_items=5)

    assert [c.title for c in candidates] == ["C", "B", "Old first"]


def test_candidates_sorted_newest_first():
    per_source = [
        [make_item("A3", 3, source="A"), make_item("A20", 20, source="A")],
        [make_item("B1", 1, source="B"), make_item("B7", 7, source="B")],
    ]

    candidates = select_candidates(per_source, now=NOW, max_items=4)

    stamps = [c.published_at for c in candidates]
    assert stamps == sorted(stamps, reverse=True)
    assert [c.title for c in candidates] == ["B1", "A3", "B7", "A20"]


def test_dedup_drops_same_url_across_sources():
    per_source = [
        [make_item("Model launch", 2, source="A", link="https://example.com/launch")],
        [make_item("Totally different headline", 1, source="B", link="https://example.com/launch")],
    ]

    candidates = select_candidates(per_source, now=NOW, dedup=True)

    assert [c.source for c in candidates] == ["B"]


def test_collect_isolates_failing_sources():
    sources = [
        FeedSource(name="Broken", url="https://broken.example.com/rss"),
        FeedSource(name="Garbage", url="https://garbage.example.com/rss"),
        FeedSource(name="Good AI", url="https://good.example.com/rss"),
    ]

    async def fetcher(source: FeedSource) -> FetchResult:
        if source.name == "Broken":
            raise httpx.ConnectError("connection refused")
        if source.name == "Garbage":
            return FetchResult(url=source.url, status_code=200, text="<<<not a feed", error=None)
        return FetchResult(url=source.url, status_code=200, text=_rss(("Hello", _rfc822(2))), error=None)

    aggregator = FeedAggregator(FeedConfig(), FetchConfig(), sources=sources, fetcher=fetcher)
    candidates = asyncio.run(aggregator.collect(now=NOW))

    assert [c.title for c in candidates] == ["Hello"]
    assert candidates[0].source == "Good AI"


def test_collect_returns_empty_when_every_source_fails():
    sources = [FeedSource(name=f"S{i}", url=f"https://s{i}.example.com") for i in range(3)]

    async def fetcher(source: FeedSource) -> FetchResult:
        return FetchResult(url=source.url, status_code=None, text=None, error="ConnectError: boom")

    aggregator = FeedAggregator(FeedConfig(), FetchConfig(), sources=sources, fetcher=fetcher)

    assert asyncio.run(aggregator.collect(now=NOW)) == []


def test_collect_over_http_transport():
    feeds = {
        "a.example.com": _rss(("One", _rfc822(1)), ("Old", _rfc822(72))),
        "b.example.com": _rss(("Two", _rfc822(10))),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "down.example.com":
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, text=feeds[request.url.host])

    sources = [
        FeedSource(name="A", url="https://a.example.com/rss"),
        FeedSource(name="Down", url="https://down.example.com/rss"),
        FeedSource(name="B", url="https://b.example.com/rss"),
    ]
    aggregator = FeedAggregator(
        FeedConfig(),
        FetchConfig(),
        sources=sources,
        transport=httpx.MockTransport(handler),
    )

    candidates = asyncio.run(aggregator.collect(now=NOW))

    assert [c.title for c in candidates] == ["One", "Two"]
    assert candidates[0].url == "https://example.com/One"
