"""
Langfuse tracing for news requests.

Spans cover feed collection and the whole pipeline; each Gemini call is
recorded as a Langfuse generation so the model name and the (redacted)
prompt and response show up together. Every span carries the request id
from ``logging_utils.request_context``. With tracing disabled all helpers
are no-ops and the SDK is never imported.
"""

from __future__ import annotations

from contextlib import contextmanager
import json
import logging
import os
from typing import Any, Iterator

from ..config import LangfuseConfig
from ..logging_utils import current_request_id, log_event, redact_text, truncate_text

_TRACER = None
_CFG: LangfuseConfig | None = None

_ENV_FALLBACKS = {
    "public_key": "LANGFUSE_PUBLIC_KEY",
    "secret_key": "LANGFUSE_SECRET_KEY",
    "host": "LANGFUSE_HOST",
    "environment": "LANGFUSE_ENVIRONMENT",
    "release": "LANGFUSE_RELEASE",
}


def setup_langfuse(cfg: LangfuseConfig) -> None:
    """Initialize Langfuse tracing if enabled.

    Inline config values win over the LANGFUSE_* environment variables.
    """
    global _TRACER, _CFG  # noqa: PLW0603
    _CFG = cfg
    if not cfg.enabled:
        _TRACER = None
        return

    from langfuse import Langfuse

    options = {key: getattr(cfg, key) or os.getenv(env) for key, env in _ENV_FALLBACKS.items()}
    _TRACER = Langfuse(**options)


def get_tracer():
    return _TRACER


@contextmanager
def start_span(
    name: str,
    kind: str = "span",
    input_value: Any | None = None,
    attributes: dict[str, Any] | None = None,
    model: str | None = None,
) -> Iterator[Any | None]:
    """Open a span (or a generation when ``kind == "generation"``).

    An exception leaving the block marks the observation as an error and
    propagates unchanged. Failures of the tracing backend itself are logged
    and never reach the caller.
    """
    tracer = _TRACER
    if tracer is None:
        yield None
        return

    metadata = _clean_attributes(attributes or {})
    metadata.setdefault("span.kind", kind)
    metadata.setdefault("request_id", current_request_id())
    payload = _normalize_text(input_value)

    try:
        if kind == "generation":
            cm = tracer.start_as_current_generation(name=name, input=payload, metadata=metadata, model=model)
        else:
            cm = tracer.start_as_current_span(name=name, input=payload, metadata=metadata)
        span = cm.__enter__()
    except Exception as exc:  # noqa: BLE001
        _log_tracing_failure(f"start {name}", exc)
        yield None
        return

    try:
        yield span
    except Exception as exc:
        record_span_error(span, exc)
        raise
    finally:
        try:
            cm.__exit__(None, None, None)
        except Exception as exc:  # noqa: BLE001
            _log_tracing_failure(f"end {name}", exc)


def set_span_output(span: Any | None, output_value: Any) -> None:
    if span is None:
        return
    payload = _normalize_text(output_value)
    if payload is None:
        return
    _safe_update(span, output=payload)


def record_span_error(span: Any | None, exc: Exception) -> None:
    if span is None:
        return
    _safe_update(span, level="ERROR", status_message=f"{type(exc).__name__}: {exc}")


def flush() -> None:
    """Send buffered observations; called on server shutdown and after a CLI run."""
    tracer = _TRACER
    if tracer is None:
        return
    try:
        tracer.flush()
    except Exception as exc:  # noqa: BLE001
        _log_tracing_failure("flush", exc)


def _safe_update(span: Any, **fields: Any) -> None:
    try:
        span.update(**fields)
    except Exception as exc:  # noqa: BLE001
        _log_tracing_failure("update", exc)


def _log_tracing_failure(action: str, exc: Exception) -> None:
    log_event(
        logging.getLogger("ai_news"),
        f"Langfuse {action} failed: {exc}",
        level=logging.WARNING,
        event="tracing_failed",
        action=action,
        error=f"{type(exc).__name__}: {exc}",
    )


def _normalize_text(value: Any) -> str | None:
    if value is None:
        return None
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, default=str)
    cfg = _CFG
    if cfg is None:
        return text
    return truncate_text(redact_text(text, cfg.redaction), cfg.max_text_chars)


def _clean_attributes(attrs: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value if isinstance(value, (str, int, float, bool)) else str(value)
        for key, value in attrs.items()
        if value is not None
    }
