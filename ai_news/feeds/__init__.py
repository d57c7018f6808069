"""
Feed fetching, parsing and candidate selection.
"""

from .aggregator import FeedAggregator, select_candidates
from .fetcher import FetchResult, fetch_feed
from .parser import FeedParseError, parse_feed

__all__ = [
    "FeedAggregator",
    "select_candidates",
    "FetchResult",
    "fetch_feed",
    "FeedParseError",
    "parse_feed",
]
