"""Best-effort extraction of a JSON object from free-form model output.

The generation service is asked for pure JSON but may wrap it in prose or
a fenced code block. ``extract_json_object`` hides the scanning strategy
behind a tagged result so callers only branch on ``ok``.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any


@dataclass(frozen=True)
class JsonExtraction:
    """Outcome of a JSON extraction attempt.

    Attributes:
        ok: Whether a JSON object was decoded
        data: The decoded object when ok, otherwise None
        raw: The original response text
        error: Reason for failure when not ok
    """
    ok: bool
    data: dict[str, Any] | None
    raw: str
    error: str | None = None


def extract_json_object(content: str) -> JsonExtraction:
    """Locate and decode the JSON object in a model response.

    Tries, in order: the whole text, the first fenced ```json block, and
    the span from the first ``{`` to the last ``}``.
    """
    if not content or not content.strip():
        return JsonExtraction(ok=False, data=None, raw=content or "", error="Empty response")

    try:
        obj = json.loads(content)
    except json.JSONDecodeError:
        snippet = _extract_json_snippet(content)
        if snippet is None:
            return JsonExtraction(ok=False, data=None, raw=content, error="No JSON object found")
        try:
            obj = json.loads(snippet)
        except json.JSONDecodeError as exc:
            return JsonExtraction(ok=False, data=None, raw=content, error=f"Invalid JSON: {exc.msg}")

    if not isinstance(obj, dict):
        return JsonExtraction(ok=False, data=None, raw=content, error="JSON value is not an object")
    return JsonExtraction(ok=True, data=obj, raw=content)


def _extract_json_snippet(content: str) -> str | None:
    fence = _extract_fenced_json(content)
    if fence:
        return fence
    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    return content[start : end + 1]


def _extract_fenced_json(content: str) -> str | None:
    lines = content.splitlines()
    start_idx = None
    for idx, line in enumerate(lines):
        if line.strip().startswith("```") and "json" in line.lower():
            start_idx = idx + 1
            break
    if start_idx is None:
        return None
    for idx in range(start_idx, len(lines)):
        if lines[idx].strip().startswith("```"):
            snippet = "\n".join(lines[start_idx:idx]).strip()
            return snippet or None
    return None
