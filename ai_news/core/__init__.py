"""
Core domain models.

This package contains data types and helpers that are independent of
any specific pipeline stage.
"""

from .types import Candidate, EnrichmentResult, FeedSource, NewsItem, RawFeedItem
from .dedup import dedup_items

__all__ = [
    "FeedSource",
    "RawFeedItem",
    "Candidate",
    "EnrichmentResult",
    "NewsItem",
    "dedup_items",
]
