"""Tests for enrichment prompt rendering."""

from __future__ import annotations

from datetime import date
import json

from ai_news.config import PromptConfig
from ai_news.llm.prompts import build_enrichment_prompt, candidates_to_payload

from conftest import make_candidates


def test_prompt_lists_every_candidate_with_its_index():
    candidates = make_candidates("First story", "Second story")

    prompt = build_enrichment_prompt(candidates, PromptConfig(), today=date(2026, 10, 18))

    assert "First story" in prompt
    assert "Second story" in prompt
    assert '"index": 1' in prompt
    assert '"index": 2' in prompt
    assert "2026-10-18" in prompt
    assert "visualHtml" in prompt


def test_prompt_uses_configured_language_and_lengths():
    cfg = PromptConfig(language="German", summary_min_chars=100, summary_max_chars=200)

    prompt = build_enrichment_prompt(make_candidates("Story"), cfg, today=date(2026, 10, 18))

    assert "German" in prompt
    assert "100" in prompt
    assert "200" in prompt


def test_payload_truncates_excerpts_and_keeps_order():
    candidates = make_candidates("A", "B")
    candidates[0].item.excerpt = "x" * 1000

    payload = candidates_to_payload(candidates, excerpt_chars=50)

    assert [entry["index"] for entry in payload] == [1, 2]
    assert len(payload[0]["excerpt"]) == 50
    assert payload[0]["publishedAt"] == "2026-10-18"
    json.dumps(payload)
