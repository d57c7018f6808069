"""
Core data types for the AI news pipeline.

This module defines the data structures that flow through one request:
- FeedSource: A configured feed endpoint
- RawFeedItem: One entry parsed from a feed document
- Candidate: A feed item selected for enrichment, tagged with a 1-based index
- EnrichmentResult: Per-item output parsed from the generation response
- NewsItem: Final merged item serialized to the client
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


# Title given to feed entries that have none.
UNTITLED_PLACEHOLDER = "(no title)"


@dataclass(frozen=True)
class FeedSource:
    """A configured feed endpoint.

    Attributes:
        name: Display name (e.g., "TechCrunch AI")
        url: Feed document URL
    """
    name: str
    url: str


@dataclass
class RawFeedItem:
    """Represents a single entry parsed from a feed document.

    Attributes:
        title: The entry headline, or a placeholder when the feed omits it
        link: The entry URL, or "" when absent
        published_at: Timezone-aware publication time, or None when unknown
        excerpt: Plain-text excerpt with markup stripped
        source: Display name of the originating feed source
    """
    title: str
    link: str
    published_at: datetime | None
    excerpt: str
    source: str


@dataclass
class Candidate:
    """A feed item selected for enrichment.

    Attributes:
        index: 1-based position used to correlate the enrichment result
        item: The underlying feed item (always has published_at set)
    """
    index: int
    item: RawFeedItem

    @property
    def title(self) -> str:
        return self.item.title

    @property
    def url(self) -> str:
        return self.item.link

    @property
    def source(self) -> str:
        return self.item.source

    @property
    def published_at(self) -> datetime:
        if self.item.published_at is None:
            raise ValueError(f"Candidate {self.index} has no publication time")
        return self.item.published_at


@dataclass
class EnrichmentResult:
    """Per-item output of the generation service.

    Any field may be empty; the merge step substitutes fallbacks per field.
    """
    index: int
    summary: str = ""
    translated_title: str = ""
    visual_html: str = ""


@dataclass(frozen=True)
class NewsItem:
    """Final output item served by the API.

    Attributes:
        title: Translated title, or the original feed title
        published_at: Publication date as YYYY-MM-DD
        source: Source label with the trailing " AI" token removed
        summary: Generated summary, or a placeholder
        url: Canonical article URL
        visual_html: Generated infographic fragment, or a placeholder
    """
    title: str
    published_at: str
    source: str
    summary: str
    url: str
    visual_html: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "publishedAt": self.published_at,
            "source": self.source,
            "summary": self.summary,
            "url": self.url,
            "visualHtml": self.visual_html,
        }
