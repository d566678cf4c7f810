"""
Langfuse tracing for briefing runs.

One span per pipeline stage (fetch, summarize, cluster) nested under a run
span, and one span per LLM call. Everything is a no-op unless tracing is
enabled and the langfuse package is installed.
"""

from __future__ import annotations

from contextlib import contextmanager
import json
import os
from typing import Any, Iterator

from ..config import LangfuseConfig
from ..utils.logging import redact_text, truncate_text

_CLIENT = None
_CFG: LangfuseConfig | None = None


def setup_langfuse(cfg: LangfuseConfig) -> None:
    """Create the Langfuse client when tracing is enabled."""
    global _CLIENT, _CFG  # noqa: PLW0603
    _CFG = cfg
    _CLIENT = None
    if not cfg.enabled:
        return
    try:
        from langfuse import Langfuse  # type: ignore
    except ImportError:
        return

    _CLIENT = Langfuse(
        public_key=cfg.public_key or os.getenv("LANGFUSE_PUBLIC_KEY"),
        secret_key=cfg.secret_key or os.getenv("LANGFUSE_SECRET_KEY"),
        host=cfg.host or os.getenv("LANGFUSE_HOST"),
    )


@contextmanager
def stage_span(stage: str, count: int) -> Iterator[Any | None]:
    """Span around a pipeline stage; ``count`` is the number of items it receives."""
    with _span(f"podcast_briefing.{stage}", {"count": count}, {"stage": stage}) as span:
        yield span


@contextmanager
def llm_span(provider: str, purpose: str, model: str, prompt: str) -> Iterator[Any | None]:
    """Span around one completion call. The prompt is redacted before upload."""
    metadata = {"llm.provider": provider, "llm.model": model, "llm.purpose": purpose}
    with _span(f"{provider}.{purpose}", prompt, metadata) as span:
        yield span


def set_span_output(span: Any | None, output_value: Any) -> None:
    if span is None:
        return
    payload = _payload(output_value)
    if payload is not None:
        _update(span, output=payload)


def record_span_error(span: Any | None, exc: Exception) -> None:
    if span is not None:
        _update(span, level="ERROR", status_message=str(exc))


def flush() -> None:
    """Send queued spans; Langfuse ingests in the background."""
    if _CLIENT is None:
        return
    try:
        _CLIENT.flush()
    except Exception:  # noqa: BLE001
        return


@contextmanager
def _span(name: str, input_value: Any, metadata: dict[str, str]) -> Iterator[Any | None]:
    client = _CLIENT
    if client is None:
        yield None
        return

    try:
        cm = client.start_as_current_span(name=name, input=_payload(input_value), metadata=metadata)
        span = cm.__enter__()
    except Exception:  # noqa: BLE001
        yield None
        return

    try:
        yield span
    finally:
        try:
            cm.__exit__(None, None, None)
        except Exception:  # noqa: BLE001
            pass


def _payload(value: Any) -> str | None:
    if value is None:
        return None
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=True, default=str)
    if _CFG is None:
        return text
    return truncate_text(redact_text(text, _CFG.redaction), _CFG.max_text_chars)


def _update(span: Any, **kwargs: Any) -> None:
    try:
        span.update(**kwargs)
    except Exception:  # noqa: BLE001
        return
