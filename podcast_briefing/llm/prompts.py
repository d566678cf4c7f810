"""Prompt loading and rendering helpers for LLM providers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from ..config import SummaryConfig
from ..core.types import Story


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"

INSUFFICIENT_MARKER = "Insufficient content for summary"
QUOTE_PREFIX = "QUOTE:"


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    return _load_template(name).format(**values)


def truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut text to at most max_bytes of UTF-8 without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def build_summary_prompt(text: str, cfg: SummaryConfig) -> str:
    return _render_template(
        "summary",
        bullet_count=str(cfg.bullet_count),
        insufficient_marker=INSUFFICIENT_MARKER,
        quote_prefix=QUOTE_PREFIX,
        content=truncate_utf8(text, cfg.max_input_bytes),
    )


def build_story_digest(stories: list[Story]) -> str:
    """One line per story: index, title and first summary point."""
    return "\n".join(
        f"{idx}: {story.title} - {story.first_point}" for idx, story in enumerate(stories)
    )


def build_cluster_prompt(stories: list[Story]) -> str:
    return _render_template(
        "cluster",
        articles=build_story_digest(stories),
        last_index=str(len(stories) - 1),
    )
