"""
Concurrent article fetching with paywall detection and retries.

Every URL gets exactly one FetchOutcome. Fetches run on a shared
httpx.AsyncClient; an asyncio.Semaphore caps how many are in flight.
Each URL is retried according to a RetryPolicy, except HTTP 403 which is
reported as paywalled straight away.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Awaitable, Callable, Iterable

import httpx

from ..config import ExtractConfig, FetchConfig
from ..core.retry import CONTENT, STRUCTURAL, TRANSIENT, RetryPolicy, classify_http_status
from ..core.types import FETCH_FAILED, FETCH_PAYWALLED, ArticleContent, FetchOutcome
from ..utils.logging import log_event
from .extractor import extract_published_date, extract_text

SleepFn = Callable[[float], Awaitable[None]]


class FetchError(Exception):
    """A single fetch attempt failed.

    Attributes:
        failure: Failure class from ``core.retry`` deciding whether to retry
    """

    def __init__(self, message: str, failure: str):
        super().__init__(message)
        self.failure = failure


@dataclass
class FetchStats:
    """Counts of fetch outcomes for one run."""

    total: int = 0
    success: int = 0
    paywalled: int = 0
    failed: int = 0

    @classmethod
    def from_outcomes(cls, outcomes: dict[str, FetchOutcome]) -> "FetchStats":
        stats = cls(total=len(outcomes))
        for outcome in outcomes.values():
            if outcome.ok:
                stats.success += 1
            elif outcome.status == FETCH_PAYWALLED:
                stats.paywalled += 1
            elif outcome.status == FETCH_FAILED:
                stats.failed += 1
        return stats


class ArticleFetcher:
    """Fetches article pages and extracts their text.

    Args:
        fetch_cfg: Concurrency, retry and HTTP settings
        extract_cfg: Text extraction method chain
        cookies: Optional cookie jar for authenticated/paywalled sources
        transport: Optional httpx transport, used by tests
        sleep: Coroutine used for backoff waits
        logger: Logger for fetch events
    """

    def __init__(
        self,
        fetch_cfg: FetchConfig,
        extract_cfg: ExtractConfig | None = None,
        cookies: httpx.Cookies | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFn = asyncio.sleep,
        logger: logging.Logger | None = None,
    ):
        if fetch_cfg.concurrency < 1:
            raise ValueError("fetch.concurrency must be at least 1")
        self.fetch_cfg = fetch_cfg
        self.extract_cfg = extract_cfg or ExtractConfig()
        self.cookies = cookies
        self.transport = transport
        self.policy = RetryPolicy(
            max_attempts=fetch_cfg.max_attempts,
            base_delay=fetch_cfg.backoff_base_seconds,
        )
        self._sleep = sleep
        self.logger = logger or logging.getLogger("podcast_briefing")

    async def fetch_all(self, urls: Iterable[str]) -> dict[str, FetchOutcome]:
        """Fetch every distinct URL concurrently.

        Returns:
            Mapping of URL to its FetchOutcome, one entry per distinct input URL
        """
        unique_urls = list(dict.fromkeys(urls))
        results: dict[str, FetchOutcome] = {}
        if not unique_urls:
            return results

        semaphore = asyncio.Semaphore(self.fetch_cfg.concurrency)

        async with self._build_client() as client:

            async def _fetch_single(url: str) -> None:
                async with semaphore:
                    results[url] = await self.fetch_one(client, url)

            await asyncio.gather(*(_fetch_single(url) for url in unique_urls))

        return results

    async def fetch_one(self, client: httpx.AsyncClient, url: str) -> FetchOutcome:
        """Fetch a single URL, applying the retry policy."""
        last_error = "Max retries exceeded"
        for attempt in range(self.policy.max_attempts):
            try:
                content = await self._try_fetch(client, url)
                log_event(
                    self.logger,
                    "Fetch succeeded",
                    event="fetch_success",
                    url=url,
                    attempt=attempt + 1,
                    text_chars=len(content.text),
                )
                return FetchOutcome.success(content)
            except FetchError as exc:
                last_error = str(exc)
                failure = exc.failure
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                last_error = f"{type(exc).__name__}: {exc}"
                failure = TRANSIENT

            if failure == STRUCTURAL:
                log_event(self.logger, "Fetch paywalled", event="fetch_paywalled", url=url)
                return FetchOutcome.paywalled()

            delay = self.policy.next_delay(attempt, failure)
            if delay is None:
                break
            log_event(
                self.logger,
                "Fetch retry",
                level=logging.DEBUG,
                event="fetch_retry",
                url=url,
                attempt=attempt + 1,
                delay_seconds=delay,
                error=last_error,
            )
            await self._sleep(delay)

        log_event(
            self.logger,
            "Fetch failed",
            level=logging.WARNING,
            event="fetch_failed",
            url=url,
            error=last_error,
        )
        return FetchOutcome.failed(last_error)

    async def _try_fetch(self, client: httpx.AsyncClient, url: str) -> ArticleContent:
        response = await client.get(url)
        failure = classify_http_status(response.status_code)
        if failure is not None:
            raise FetchError(_describe_status(response.status_code), failure)

        html = response.text
        return await asyncio.to_thread(self._extract, html)

    def _extract(self, html: str) -> ArticleContent:
        text = extract_text(html, self.extract_cfg.primary, self.extract_cfg.fallback)
        if not text:
            raise FetchError("No text content extracted - may require JavaScript or login", CONTENT)
        if len(text) < self.fetch_cfg.min_text_chars:
            raise FetchError(
                f"Content too short ({len(text)} chars) - may be paywalled or blocked",
                CONTENT,
            )
        return ArticleContent(text=text, published_date=extract_published_date(html))

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.fetch_cfg.timeout_seconds),
            headers={"User-Agent": self.fetch_cfg.user_agent},
            cookies=self.cookies,
            follow_redirects=True,
            trust_env=self.fetch_cfg.trust_env,
            transport=self.transport,
            limits=httpx.Limits(max_connections=self.fetch_cfg.concurrency),
        )


def fetch_articles(
    urls: Iterable[str],
    fetch_cfg: FetchConfig,
    extract_cfg: ExtractConfig | None = None,
    cookies: httpx.Cookies | None = None,
    logger: logging.Logger | None = None,
) -> dict[str, FetchOutcome]:
    """Synchronous entry point for callers outside an event loop."""
    fetcher = ArticleFetcher(fetch_cfg, extract_cfg, cookies=cookies, logger=logger)
    return asyncio.run(fetcher.fetch_all(urls))


def _describe_status(status_code: int) -> str:
    if status_code == 401:
        return "Access denied (401 Unauthorized) - requires login"
    if status_code == 403:
        return "Access forbidden (403 Forbidden) - may be paywalled or blocking bots"
    if status_code == 404:
        return "Page not found (404) - article may have been removed"
    if status_code == 429:
        return "Rate limited (429) - too many requests"
    if status_code >= 500:
        return f"Server error ({status_code}) - website is having issues"
    return f"HTTP error: {status_code}"
