"""Tests for concurrent article fetching, paywall detection and retries."""

from __future__ import annotations

import asyncio

import httpx

from podcast_briefing.config import ExtractConfig, FetchConfig
from podcast_briefing.core.types import FETCH_FAILED, FETCH_PAYWALLED, FETCH_SUCCESS
from podcast_briefing.fetch.fetcher import ArticleFetcher, FetchStats

ARTICLE_BODY = " ".join(["The quick brown fox jumps over the lazy dog."] * 20)

ARTICLE_HTML = f"""
<html>
  <head>
    <title>Example</title>
    <meta property="article:published_time" content="2026-02-01T15:30:00Z">
  </head>
  <body><article><p>{ARTICLE_BODY}</p></article></body>
</html>
"""

SHORT_HTML = "<html><body><p>Subscribe to read.</p></body></html>"


class _RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _fetcher(handler, sleep=None, **cfg_overrides) -> ArticleFetcher:
    cfg = FetchConfig(trust_env=False, use_browser_cookies=False, **cfg_overrides)
    return ArticleFetcher(
        cfg,
        ExtractConfig(primary="bs4", fallback=[]),
        transport=httpx.MockTransport(handler),
        sleep=sleep or _RecordingSleep(),
    )


def test_fetch_success_extracts_text_and_published_date():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=ARTICLE_HTML)

    results = asyncio.run(_fetcher(handler).fetch_all(["https://example.com/a"]))

    outcome = results["https://example.com/a"]
    assert outcome.status == FETCH_SUCCESS
    assert "quick brown fox" in outcome.content.text
    assert outcome.content.published_date is not None
    assert outcome.content.published_date.isoformat() == "2026-02-01T15:30:00+00:00"


def test_forbidden_is_paywalled_after_single_attempt():
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(403, text="Forbidden")

    sleep = _RecordingSleep()
    results = asyncio.run(_fetcher(handler, sleep=sleep).fetch_all(["https://paywall.example.com/x"]))

    assert results["https://paywall.example.com/x"].status == FETCH_PAYWALLED
    assert len(calls) == 1
    assert sleep.delays == []


def test_server_errors_retry_with_backoff_then_fail():
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(503, text="unavailable")

    sleep = _RecordingSleep()
    results = asyncio.run(_fetcher(handler, sleep=sleep).fetch_all(["https://down.example.com/"]))

    outcome = results["https://down.example.com/"]
    assert outcome.status == FETCH_FAILED
    assert "503" in outcome.reason
    assert len(calls) == 3
    assert sleep.delays == [0.5, 1.0]


def test_short_content_is_retried_then_fails():
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, text=SHORT_HTML)

    results = asyncio.run(_fetcher(handler).fetch_all(["https://short.example.com/"]))

    outcome = results["https://short.example.com/"]
    assert outcome.status == FETCH_FAILED
    assert "too short" in outcome.reason
    assert len(calls) == 3


def test_transient_error_then_success():
    attempts = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["n"] += 1
        if attempts["n"] == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, text=ARTICLE_HTML)

    sleep = _RecordingSleep()
    results = asyncio.run(_fetcher(handler, sleep=sleep).fetch_all(["https://flaky.example.com/"]))

    assert results["https://flaky.example.com/"].ok
    assert sleep.delays == [0.5]


def test_one_outcome_per_distinct_url():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "blocked.example.com":
            return httpx.Response(403)
        if request.url.host == "broken.example.com":
            return httpx.Response(500)
        return httpx.Response(200, text=ARTICLE_HTML)

    urls = [
        "https://ok.example.com/1",
        "https://blocked.example.com/2",
        "https://broken.example.com/3",
        "https://ok.example.com/1",
    ]
    results = asyncio.run(_fetcher(handler).fetch_all(urls))

    assert set(results) == set(urls)
    assert len(results) == 3
    stats = FetchStats.from_outcomes(results)
    assert (stats.total, stats.success, stats.paywalled, stats.failed) == (3, 1, 1, 1)


def test_empty_input_returns_empty_mapping():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert asyncio.run(_fetcher(handler).fetch_all([])) == {}


def test_concurrency_is_bounded():
    state = {"active": 0, "peak": 0}

    async def handler(request: httpx.Request) -> httpx.Response:
        state["active"] += 1
        state["peak"] = max(state["peak"], state["active"])
        await asyncio.sleep(0.01)
        state["active"] -= 1
        return httpx.Response(200, text=ARTICLE_HTML)

    urls = [f"https://example.com/{i}" for i in range(12)]
    fetcher = _fetcher(handler, concurrency=3)
    results = asyncio.run(fetcher.fetch_all(urls))

    assert len(results) == 12
    assert state["peak"] <= 3


def test_fetching_twice_gives_same_statuses():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/paywalled":
            return httpx.Response(403)
        return httpx.Response(200, text=ARTICLE_HTML)

    urls = ["https://example.com/open", "https://example.com/paywalled"]
    first = asyncio.run(_fetcher(handler).fetch_all(urls))
    second = asyncio.run(_fetcher(handler).fetch_all(urls))

    assert {u: o.status for u, o in first.items()} == {u: o.status for u, o in second.items()}
