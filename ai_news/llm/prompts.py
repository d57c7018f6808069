"""Prompt loading and rendering helpers for generation providers."""

from __future__ import annotations

from datetime import date
from functools import lru_cache
import json
from pathlib import Path

from ..config import PromptConfig
from ..core.types import Candidate


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def candidates_to_payload(candidates: list[Candidate], excerpt_chars: int) -> list[dict[str, object]]:
    return [
        {
            "index": c.index,
            "title": c.title,
            "source": c.source,
            "url": c.url,
            "publishedAt": c.published_at.date().isoformat(),
            "excerpt": c.item.excerpt[:excerpt_chars],
        }
        for c in candidates
    ]


def build_enrichment_prompt(
    candidates: list[Candidate],
    cfg: PromptConfig,
    today: date | None = None,
) -> str:
    today = today or date.today()
    items_json = json.dumps(
        candidates_to_payload(candidates, cfg.excerpt_chars),
        ensure_ascii=False,
        indent=2,
    )
    return _render_template(
        "enrichment",
        today=today.isoformat(),
        count=str(len(candidates)),
        language=cfg.language,
        summary_min_chars=str(cfg.summary_min_chars),
        summary_max_chars=str(cfg.summary_max_chars),
        items_json=items_json,
    )
