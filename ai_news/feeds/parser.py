"""
Feed document parser.

This module turns an RSS or Atom document into RawFeedItem objects using
feedparser. Missing fields degrade gracefully:
- a missing title becomes a placeholder
- a missing link, or one that is not http(s), becomes an empty string
- a missing or unparsable date leaves published_at as None (the
  aggregator filters those items out)
"""

from __future__ import annotations

from datetime import datetime, timezone
import io
import time
from urllib.parse import urlsplit
from typing import Any

from bs4 import BeautifulSoup
import feedparser

from ..core.types import UNTITLED_PLACEHOLDER, RawFeedItem


class FeedParseError(ValueError):
    """Raised when a document cannot be read as a feed at all."""


def parse_feed(document: str | bytes, source_name: str) -> list[RawFeedItem]:
    """Parse a feed document into a list of RawFeedItem objects.

    The document is handed to feedparser as a byte stream so it never
    mistakes the text for a URL or file name, and so the encoding declared
    in the XML prolog applies to raw bytes.

    Args:
        document: The raw feed document
        source_name: Display name of the feed source, stored on every item

    Returns:
        Items in the feed's native order

    Raises:
        FeedParseError: If the document is malformed and yields no entries
    """
    if isinstance(document, str):
        document = document.encode("utf-8")
    parsed = feedparser.parse(io.BytesIO(document))
    entries = parsed.get("entries") or []
    if parsed.get("bozo") and not entries:
        reason = parsed.get("bozo_exception")
        raise FeedParseError(f"Malformed feed document: {reason}")

    return [_to_item(entry, source_name) for entry in entries]


def _to_item(entry: Any, source_name: str) -> RawFeedItem:
    title = _clean_text(entry.get("title") or "") or UNTITLED_PLACEHOLDER
    link = _safe_link(entry.get("link") or "")
    excerpt_html = entry.get("summary") or entry.get("description") or ""
    return RawFeedItem(
        title=title,
        link=link,
        published_at=_published_at(entry),
        excerpt=_clean_text(excerpt_html),
        source=source_name,
    )


def _published_at(entry: Any) -> datetime | None:
    """Return the entry's publication time as an aware UTC datetime.

    feedparser normalizes RFC 822 and ISO 8601 dates into UTC
    ``time.struct_time`` values; ``updated`` is used when ``published``
    is absent (common in Atom feeds).
    """
    for key in ("published_parsed", "updated_parsed"):
        value = entry.get(key)
        if isinstance(value, time.struct_time):
            return datetime(*value[:6], tzinfo=timezone.utc)
    return None


def _clean_text(html_text: str) -> str:
    """Remove HTML tags and collapse whitespace."""
    if not html_text:
        return ""
    if "<" not in html_text:
        return " ".join(html_text.split())
    soup = BeautifulSoup(html_text, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return " ".join(soup.get_text(separator=" ").split())


def _safe_link(link: str) -> str:
    """Keep only absolute http(s) links; anything else (javascript:, data:) becomes ""."""
    link = link.strip()
    if urlsplit(link).scheme.lower() not in ("http", "https"):
        return ""
    return link
