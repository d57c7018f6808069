"""
Page rendering for the browser client and static HTML reports.

Both outputs use Jinja2 templates from ``ai_news/templates``:
- page.html: the live page that loads ``/api/news`` and offers a manual refresh
- report.html: a static snapshot of already-built news items
"""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .core.types import NewsItem


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
        autoescape=select_autoescape(["html"]),
    )


def render_page(title: str, api_path: str = "/api/news") -> str:
    """Render the live page shell; cards are built client-side."""
    template = _environment().get_template("page.html")
    return template.render(title=title, api_path=api_path)


def render_report(items: list[NewsItem], output_path: Path, title: str) -> None:
    """Render news items as a static HTML file.

    visualHtml is inserted as markup; it has already passed through the
    sanitizer when sanitizing is enabled.
    """
    template = _environment().get_template("report.html")
    html = template.render(
        title=title,
        generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
        items=[{"item": item, "visual": Markup(item.visual_html)} for item in items],
        total=len(items),
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
