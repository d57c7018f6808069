"""
AI News Visualizer - recent AI news with generated summaries and infographics.

This package fetches AI-related RSS feeds, keeps the most recent items,
asks a generation provider for a summary, a translated title and an HTML
infographic per item, and serves the result as JSON and as a web page.

Main entry point is the CLI via `ai-news serve` or `ai-news fetch`.

Example:
    $ ai-news serve --port 8000
"""

__all__ = ["__version__", "AppConfig", "load_config", "build_news", "NewsItem"]
__version__ = "0.1.0"

from .config import AppConfig, load_config
from .core.types import NewsItem
from .runner import build_news
