"""
Concurrent article summarization.

Articles are summarized on a small thread pool because the provider
enforces a token-rate budget shared by every call. Each article is retried
on provider errors, with a long attempt-scaled wait for rate limits and
exponential backoff otherwise. The model's reply is parsed strictly: it
must contain exactly the configured number of bullets.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from contextvars import copy_context
import logging
import re
import time
from typing import Callable, Iterable

from ..config import SummaryConfig
from ..core.retry import RATE_LIMITED, TRANSIENT, RetryPolicy
from ..core.types import SUMMARY_SUCCESS, SummaryOutcome
from ..llm.prompts import INSUFFICIENT_MARKER, QUOTE_PREFIX, build_summary_prompt
from ..llm.providers.base import CompletionProvider, ProviderError, RateLimitError
from ..utils.logging import log_event

_NUMBERED_RE = re.compile(r"^\d+[.)]\s*(.*)$")
_BULLET_MARKERS = ("-", "*", "•")


class ArticleSummarizer:
    """Summarizes article texts with bounded concurrency.

    Args:
        provider: LLM backend used for every call
        cfg: Concurrency, retry and output settings
        sleep: Blocking sleep used for backoff and the post-success delay
        logger: Logger for summarize events
    """

    def __init__(
        self,
        provider: CompletionProvider,
        cfg: SummaryConfig,
        sleep: Callable[[float], None] = time.sleep,
        logger: logging.Logger | None = None,
    ):
        if cfg.concurrency < 1:
            raise ValueError("summary.concurrency must be at least 1")
        self.provider = provider
        self.cfg = cfg
        self.policy = RetryPolicy(
            max_attempts=cfg.max_attempts,
            base_delay=cfg.backoff_base_seconds,
            rate_limit_delay=cfg.rate_limit_backoff_seconds,
        )
        self._sleep = sleep
        self.logger = logger or logging.getLogger("podcast_briefing")

    def summarize_all(
        self,
        items: Iterable[tuple[str, str]],
        on_complete: Callable[[str, SummaryOutcome], None] | None = None,
    ) -> dict[str, SummaryOutcome]:
        """Summarize every (id, text) pair.

        Results are keyed by id as workers finish; completion order is not
        submission order.

        Args:
            items: Pairs of identifier (the article URL) and article text
            on_complete: Optional callback invoked once per finished item

        Returns:
            Mapping of identifier to SummaryOutcome
        """
        results: dict[str, SummaryOutcome] = {}
        with ThreadPoolExecutor(max_workers=self.cfg.concurrency) as executor:
            future_map = {}
            for item_id, text in items:
                # Copy current context (including tracing ids) into worker thread.
                ctx = copy_context()
                future = executor.submit(ctx.run, self.summarize_one, text, item_id)
                future_map[future] = item_id

            for future in as_completed(future_map):
                item_id = future_map[future]
                try:
                    results[item_id] = future.result()
                except Exception as exc:  # noqa: BLE001
                    log_event(
                        self.logger,
                        "Summary worker crashed",
                        level=logging.ERROR,
                        event="summary_error",
                        url=item_id,
                        error=f"{type(exc).__name__}: {exc}",
                    )
                    results[item_id] = SummaryOutcome.failed(f"{type(exc).__name__}: {exc}")
                if on_complete is not None:
                    on_complete(item_id, results[item_id])
        return results

    def summarize_one(self, text: str, item_id: str = "") -> SummaryOutcome:
        """Summarize one article, applying the retry policy."""
        prompt = build_summary_prompt(text, self.cfg)
        last_error = "Max retries reached"

        for attempt in range(self.policy.max_attempts):
            try:
                response = self.provider.complete(
                    prompt, self.cfg.max_output_tokens, purpose="summarize"
                )
            except RateLimitError as exc:
                last_error = str(exc)
                failure = RATE_LIMITED
            except ProviderError as exc:
                last_error = str(exc)
                failure = TRANSIENT
            else:
                outcome = parse_summary_response(response, self.cfg.bullet_count)
                log_event(
                    self.logger,
                    "Summary finished",
                    event="summary_done",
                    url=item_id,
                    status=outcome.status,
                    reason=outcome.reason,
                    attempt=attempt + 1,
                )
                # Spread load across the shared rate budget
                self._sleep(self.cfg.settle_delay_seconds)
                return outcome

            delay = self.policy.next_delay(attempt, failure)
            if delay is None:
                break
            log_event(
                self.logger,
                "Rate limit hit, backing off" if failure == RATE_LIMITED else "Summary retry",
                level=logging.WARNING if failure == RATE_LIMITED else logging.DEBUG,
                event="summary_retry",
                url=item_id,
                attempt=attempt + 1,
                failure=failure,
                delay_seconds=delay,
                error=last_error,
            )
            self._sleep(delay)

        log_event(
            self.logger,
            "Summary failed",
            level=logging.WARNING,
            event="summary_failed",
            url=item_id,
            error=last_error,
        )
        return SummaryOutcome.failed(last_error)


def parse_summary_response(text: str, expected_bullets: int = 5) -> SummaryOutcome:
    """Turn the model's reply into a SummaryOutcome.

    Returns:
        insufficient when the model says so, failed when the bullet count is
        not exactly ``expected_bullets``, success otherwise
    """
    if INSUFFICIENT_MARKER.lower() in (text or "").lower():
        return SummaryOutcome.insufficient()

    quote, bullets = parse_summary_lines(text or "")
    if len(bullets) != expected_bullets:
        return SummaryOutcome.failed(f"expected {expected_bullets} bullets, got {len(bullets)}")
    return SummaryOutcome.success(bullets, quote)


def parse_summary_lines(text: str) -> tuple[str | None, list[str]]:
    """Split a summary reply into its quote line and bullet lines.

    Recognizes ``-``, ``*`` and ``•`` bullets and numbered items such as
    ``1.`` or ``2)``. The quote keeps its quotation marks and attribution.
    """
    quote: str | None = None
    bullets: list[str] = []

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue

        if stripped.startswith(QUOTE_PREFIX):
            quote_text = stripped[len(QUOTE_PREFIX):].strip()
            if quote_text:
                quote = quote_text
            continue

        numbered = _NUMBERED_RE.match(stripped)
        if numbered:
            item = numbered.group(1).strip()
            if item:
                bullets.append(item)
            continue

        if stripped.startswith(_BULLET_MARKERS):
            item = stripped[1:].strip()
            if item:
                bullets.append(item)

    return quote, bullets


def count_successes(outcomes: dict[str, SummaryOutcome]) -> int:
    return sum(1 for outcome in outcomes.values() if outcome.status == SUMMARY_SUCCESS)
