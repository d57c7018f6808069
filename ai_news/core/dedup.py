"""
Feed item deduplication using URL matching and fuzzy title comparison.

This module removes duplicate items based on:
1. Exact URL matches (the same story listed by two feeds)
2. Fuzzy title similarity (same story, different URLs)
"""

from __future__ import annotations

from rapidfuzz import fuzz

from .types import UNTITLED_PLACEHOLDER, RawFeedItem


def dedup_items(items: list[RawFeedItem], threshold: int = 92) -> list[RawFeedItem]:
    """Remove duplicate feed items from a list.

    The first occurrence wins, so callers sort before deduplicating when
    the newest copy should be kept. Items with an empty link are only
    compared by title; untitled items are only compared by URL.

    Args:
        items: List of feed items to deduplicate
        threshold: Similarity threshold (0-100) for fuzzy title matching

    Returns:
        Deduplicated list of items, preserving original order
    """
    seen_urls: set[str] = set()
    kept: list[RawFeedItem] = []
    titles: list[str] = []

    for item in items:
        if item.link and item.link in seen_urls:
            continue
        titled = item.title != UNTITLED_PLACEHOLDER
        if titled and _is_similar_title(item.title, titles, threshold):
            continue
        if item.link:
            seen_urls.add(item.link)
        if titled:
            titles.append(item.title)
        kept.append(item)

    return kept


def _is_similar_title(title: str, titles: list[str], threshold: int) -> bool:
    for existing in titles:
        if fuzz.ratio(title, existing) >= threshold:
            return True
    return False
