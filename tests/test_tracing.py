"""Tests for Langfuse tracing setup and span behavior."""

from __future__ import annotations

from contextlib import contextmanager
import sys
import types

import pytest

from podcast_briefing.config import LangfuseConfig
from podcast_briefing.llm import tracing


class _DummySpan:
    def __init__(self):
        self.updates: list[dict] = []

    def update(self, **kwargs):
        self.updates.append(kwargs)


class _DummyLangfuse:
    instances: list["_DummyLangfuse"] = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.spans: list[tuple[str, dict]] = []
        self.flushed = False
        _DummyLangfuse.instances.append(self)

    @contextmanager
    def start_as_current_span(self, name, input=None, metadata=None):
        span = _DummySpan()
        self.spans.append((name, {"input": input, "metadata": metadata, "span": span}))
        yield span

    def flush(self):
        self.flushed = True


@pytest.fixture
def fake_langfuse(monkeypatch):
    _DummyLangfuse.instances.clear()
    monkeypatch.setitem(sys.modules, "langfuse", types.SimpleNamespace(Langfuse=_DummyLangfuse))
    yield _DummyLangfuse
    tracing.setup_langfuse(LangfuseConfig(enabled=False))


def test_disabled_tracing_yields_no_span():
    tracing.setup_langfuse(LangfuseConfig(enabled=False))
    with tracing.stage_span("run", 3) as span:
        assert span is None
    tracing.set_span_output(None, {"ignored": True})
    tracing.flush()


def test_setup_reads_keys_from_env(monkeypatch, fake_langfuse):
    monkeypatch.setenv("LANGFUSE_PUBLIC_KEY", "pk-test")
    monkeypatch.setenv("LANGFUSE_SECRET_KEY", "sk-test")
    monkeypatch.setenv("LANGFUSE_HOST", "https://langfuse.example.com")

    tracing.setup_langfuse(LangfuseConfig(enabled=True))

    client = fake_langfuse.instances[-1]
    assert client.kwargs == {
        "public_key": "pk-test",
        "secret_key": "sk-test",
        "host": "https://langfuse.example.com",
    }


def test_span_input_is_redacted_and_output_recorded(fake_langfuse):
    tracing.setup_langfuse(LangfuseConfig(enabled=True, public_key="pk", secret_key="sk"))

    with tracing.llm_span("anthropic", "summarize", "m", "Summarize https://example.com/secret please") as span:
        tracing.set_span_output(span, "done")

    client = fake_langfuse.instances[-1]
    name, info = client.spans[0]
    assert name == "anthropic.summarize"
    assert "https://example.com/secret" not in info["input"]
    assert info["metadata"] == {"llm.provider": "anthropic", "llm.model": "m", "llm.purpose": "summarize"}
    assert info["span"].updates == [{"output": "done"}]

    tracing.flush()
    assert client.flushed


def test_record_span_error_marks_level(fake_langfuse):
    tracing.setup_langfuse(LangfuseConfig(enabled=True, public_key="pk", secret_key="sk"))
    with tracing.stage_span("cluster", 2) as span:
        tracing.record_span_error(span, RuntimeError("bad"))

    _, info = fake_langfuse.instances[-1].spans[0]
    assert info["span"].updates == [{"level": "ERROR", "status_message": "bad"}]


def test_stage_span_records_item_count(fake_langfuse):
    tracing.setup_langfuse(LangfuseConfig(enabled=True, public_key="pk", secret_key="sk"))
    with tracing.stage_span("fetch", 4) as span:
        tracing.set_span_output(span, {"success": 3})

    name, info = fake_langfuse.instances[-1].spans[0]
    assert name == "podcast_briefing.fetch"
    assert info["input"] == '{"count": 4}'
    assert info["metadata"] == {"stage": "fetch"}
    assert info["span"].updates == [{"output": '{"success": 3}'}]
