"""Tests for Langfuse tracing setup behavior."""

from __future__ import annotations

import sys
import types

import pytest

from ai_news.config import LangfuseConfig
from ai_news.llm import tracing
from ai_news.logging_utils import request_context


class DummySpan:
    def __init__(self):
        self.updates: list[dict] = []

    def update(self, **kwargs):
        self.updates.append(kwargs)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class DummyLangfuse:
    def __init__(self, **kwargs):
        self.options = kwargs
        self.observations: list[tuple[str, dict, DummySpan]] = []

    def _open(self, kind: str, kwargs: dict) -> DummySpan:
        span = DummySpan()
        self.observations.append((kind, kwargs, span))
        return span

    def start_as_current_span(self, **kwargs):
        return self._open("span", kwargs)

    def start_as_current_generation(self, **kwargs):
        return self._open("generation", kwargs)


@pytest.fixture
def dummy_langfuse(monkeypatch):
    monkeypatch.setitem(sys.modules, "langfuse", types.SimpleNamespace(Langfuse=DummyLangfuse))
    yield
    tracing.setup_langfuse(LangfuseConfig(enabled=False))


def test_setup_langfuse_prefers_inline_over_env(monkeypatch, dummy_langfuse):
    monkeypatch.setenv("LANGFUSE_PUBLIC_KEY", "pk-test")
    monkeypatch.setenv("LANGFUSE_SECRET_KEY", "sk-env")
    monkeypatch.setenv("LANGFUSE_HOST", "https://us.cloud.langfuse.com")

    tracing.setup_langfuse(LangfuseConfig(enabled=True, secret_key="sk-inline"))
    options = tracing.get_tracer().options

    assert options["public_key"] == "pk-test"
    assert options["secret_key"] == "sk-inline"
    assert options["host"] == "https://us.cloud.langfuse.com"


def test_disabled_tracing_is_a_noop():
    tracing.setup_langfuse(LangfuseConfig(enabled=False))

    assert tracing.get_tracer() is None
    with tracing.start_span("noop", kind="chain", input_value="x") as span:
        assert span is None
        tracing.set_span_output(span, "ignored")
        tracing.record_span_error(span, RuntimeError("ignored"))
    tracing.flush()


def test_generation_is_redacted_truncated_and_tagged(dummy_langfuse):
    tracing.setup_langfuse(LangfuseConfig(enabled=True, max_text_chars=30))
    tracer = tracing.get_tracer()

    with request_context("req-7"):
        with tracing.start_span(
            "gemini.generate",
            kind="generation",
            input_value="see https://example.com/a",
            model="gemini-test",
        ) as span:
            tracing.set_span_output(span, "y" * 100)

    kind, kwargs, observed = tracer.observations[0]
    assert kind == "generation"
    assert kwargs["model"] == "gemini-test"
    assert kwargs["input"] == "see [REDACTED_URL]"
    assert kwargs["metadata"]["request_id"] == "req-7"
    assert observed.updates[0]["output"] == "y" * 30 + "...(truncated)"


def test_exception_marks_span_as_error(dummy_langfuse):
    tracing.setup_langfuse(LangfuseConfig(enabled=True))
    tracer = tracing.get_tracer()

    with pytest.raises(ValueError):
        with tracing.start_span("news.build", kind="chain", attributes={"feeds": 3, "skip": None}):
            raise ValueError("no candidates")

    kind, kwargs, observed = tracer.observations[0]
    assert kind == "span"
    assert kwargs["metadata"] == {"feeds": 3, "span.kind": "chain", "request_id": "-"}
    assert observed.updates == [{"level": "ERROR", "status_message": "ValueError: no candidates"}]


class BrokenSpan(DummySpan):
    def update(self, **kwargs):
        raise RuntimeError("ingestion queue full")


class BrokenLangfuse(DummyLangfuse):
    def start_as_current_span(self, **kwargs):
        if kwargs["name"] == "unreachable":
            raise ConnectionError("langfuse down")
        span = BrokenSpan()
        self.observations.append(("span", kwargs, span))
        return span

    def flush(self):
        raise ConnectionError("langfuse down")


@pytest.fixture
def broken_langfuse(monkeypatch):
    monkeypatch.setitem(sys.modules, "langfuse", types.SimpleNamespace(Langfuse=BrokenLangfuse))
    tracing.setup_langfuse(LangfuseConfig(enabled=True))
    yield
    tracing.setup_langfuse(LangfuseConfig(enabled=False))


def test_backend_failures_do_not_reach_the_caller(broken_langfuse):
    with tracing.start_span("feeds.collect", kind="chain") as span:
        tracing.set_span_output(span, ["title"])

    with tracing.start_span("unreachable", kind="chain") as span:
        assert span is None

    tracing.flush()


def test_original_error_survives_failing_error_update(broken_langfuse):
    with pytest.raises(ValueError, match="no candidates"):
        with tracing.start_span("news.build", kind="chain"):
            raise ValueError("no candidates")
