"""
Augmentation client: enrich candidates with generated summaries and infographics.

One request makes a single combined prompt for all candidates. A call
plus parse is one attempt:
- an overloaded provider is retried with exponential backoff
- any other provider failure, or a response without usable JSON, ends
  the request immediately

On success the parsed results are merged onto the candidates with
per-field fallbacks, so every NewsItem is complete.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Awaitable, Callable

from ..config import AppConfig, RenderConfig
from ..core.types import Candidate, EnrichmentResult, NewsItem
from ..errors import AugmentationParseError, GenerationFailedError, UpstreamOverloadedError
from ..llm.json_parser import extract_json_object
from ..llm.prompts import build_enrichment_prompt
from ..llm.providers.base import GenerationError, GenerationProvider
from ..logging_utils import log_event, truncate_text
from ..sanitize import sanitize_visual_html


SOURCE_SUFFIX = " AI"

Sleeper = Callable[[float], Awaitable[Any]]


class AugmentationClient:
    """Turns candidates into NewsItems via a generation provider."""

    def __init__(
        self,
        provider: GenerationProvider,
        cfg: AppConfig,
        sleep: Sleeper = asyncio.sleep,
        logger: logging.Logger | None = None,
    ):
        self.provider = provider
        self.cfg = cfg
        self._sleep = sleep
        self.logger = logger or logging.getLogger("ai_news")

    async def enrich(self, candidates: list[Candidate], today: date | None = None) -> list[NewsItem]:
        """Return one NewsItem per candidate, in candidate order.

        Raises:
            UpstreamOverloadedError: Every attempt hit an overloaded provider
            GenerationFailedError: The provider failed with a non-retryable error
            AugmentationParseError: The response held no usable JSON payload
        """
        if not candidates:
            return []

        prompt = build_enrichment_prompt(candidates, self.cfg.prompt, today)
        max_attempts = max(1, int(self.cfg.retry.max_attempts))
        last_error: GenerationError | None = None

        for attempt in range(max_attempts):
            if attempt > 0:
                delay = self.cfg.retry.backoff_base ** attempt
                log_event(
                    self.logger,
                    f"Retrying generation in {delay:g}s (attempt {attempt + 1}/{max_attempts})",
                    event="generation_retry_wait",
                    attempt=attempt + 1,
                    delay_seconds=delay,
                )
                await self._sleep(delay)

            try:
                text = await self.provider.generate(prompt)
            except GenerationError as exc:
                if not exc.retryable:
                    log_event(
                        self.logger,
                        f"Generation failed: {exc}",
                        level=logging.ERROR,
                        event="generation_failed",
                        attempt=attempt + 1,
                        kind=exc.kind.value,
                    )
                    raise GenerationFailedError("Failed to generate news summaries", details=str(exc)) from exc
                last_error = exc
                log_event(
                    self.logger,
                    f"Generation service overloaded: {exc}",
                    level=logging.WARNING,
                    event="generation_overloaded",
                    attempt=attempt + 1,
                    max_attempts=max_attempts,
                )
                continue

            results = parse_enrichment_response(text)
            log_event(
                self.logger,
                f"Generation succeeded with {len(results)} result(s)",
                event="generation_ok",
                attempt=attempt + 1,
                results=len(results),
            )
            return merge_results(candidates, results, self.cfg.render)

        raise UpstreamOverloadedError(
            "The AI service is temporarily overloaded. Please try again later.",
            details=str(last_error) if last_error else "",
            attempts=max_attempts,
        )


def parse_enrichment_response(text: str) -> dict[int, EnrichmentResult]:
    """Parse a generation response into results keyed by candidate index.

    Entries that are not objects or lack a usable index are ignored; the
    first entry wins when an index repeats.

    Raises:
        AugmentationParseError: No JSON object was found, or it has no results array
    """
    extraction = extract_json_object(text)
    if not extraction.ok or extraction.data is None:
        raise AugmentationParseError(
            "Could not parse the AI response",
            details=truncate_text(extraction.raw, 500) or extraction.error,
        )

    entries = extraction.data.get("results")
    if not isinstance(entries, list):
        raise AugmentationParseError(
            "Unexpected AI response format",
            details="Response JSON has no 'results' array",
        )

    results: dict[int, EnrichmentResult] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        index = _coerce_index(entry.get("index"))
        if index is None or index in results:
            continue
        results[index] = EnrichmentResult(
            index=index,
            summary=_text_field(entry, "summary"),
            translated_title=_text_field(entry, "title", "translatedTitle"),
            visual_html=_text_field(entry, "visualHtml", "visual_html"),
        )
    return results


def merge_results(
    candidates: list[Candidate],
    results: dict[int, EnrichmentResult],
    render_cfg: RenderConfig,
) -> list[NewsItem]:
    """Build NewsItems in candidate order, falling back per field.

    The candidate at position i takes the result whose index is i + 1.
    """
    items: list[NewsItem] = []
    for position, candidate in enumerate(candidates):
        result = results.get(position + 1) or EnrichmentResult(index=position + 1)
        visual_html = result.visual_html
        if visual_html and render_cfg.sanitize_html:
            visual_html = sanitize_visual_html(visual_html)
        items.append(
            NewsItem(
                title=result.translated_title or candidate.title,
                published_at=candidate.published_at.date().isoformat(),
                source=clean_source_label(candidate.source),
                summary=result.summary or render_cfg.fallback_summary,
                url=candidate.url,
                visual_html=visual_html or render_cfg.fallback_visual_html,
            )
        )
    return items


def clean_source_label(name: str) -> str:
    """Strip the trailing " AI" token from a feed display name."""
    label = name.strip()
    if label.endswith(SOURCE_SUFFIX) and len(label) > len(SOURCE_SUFFIX):
        label = label[: -len(SOURCE_SUFFIX)].rstrip()
    return label


def _coerce_index(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _text_field(entry: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = entry.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""
