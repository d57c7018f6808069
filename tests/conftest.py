"""Shared fixtures and fakes for pipeline tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from ai_news.config import AppConfig
from ai_news.core.types import Candidate, RawFeedItem
from ai_news.llm.providers.base import GenerationError, GenerationProvider


NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def make_item(
    title: str,
    hours_ago: float | None,
    source: str = "Test AI",
    link: str | None = None,
    excerpt: str = "excerpt",
) -> RawFeedItem:
    published = NOW - timedelta(hours=hours_ago) if hours_ago is not None else None
    return RawFeedItem(
        title=title,
        link=link if link is not None else f"https://example.com/{title.lower().replace(' ', '-')}",
        published_at=published,
        excerpt=excerpt,
        source=source,
    )


def make_candidates(*titles: str, source: str = "Test AI") -> list[Candidate]:
    return [
        Candidate(index=idx + 1, item=make_item(title, hours_ago=idx + 1, source=source))
        for idx, title in enumerate(titles)
    ]


class FakeProvider(GenerationProvider):
    """Replays scripted responses; an exception in the script is raised."""

    def __init__(self, *responses: str | GenerationError):
        self.responses = list(responses)
        self.prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        response = self.responses[min(len(self.prompts), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


class SleepRecorder:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def cfg() -> AppConfig:
    config = AppConfig()
    config.provider.api_key = "test-key"
    config.logging.console = False
    return config
