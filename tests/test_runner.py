"""Tests for pipeline orchestration and story reconciliation."""

from __future__ import annotations

from datetime import datetime, timezone
import json

from rich.console import Console

from podcast_briefing.config import AppConfig
from podcast_briefing.core.types import ArticleContent, Bookmark, FetchOutcome, SummaryOutcome, Topic
from podcast_briefing.runner import build_briefing, build_stories, run_pipeline, save_run

CREATED = datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc)
PUBLISHED = datetime(2026, 1, 30, 9, 0, tzinfo=timezone.utc)


def _bookmark(url: str, title: str | None = None) -> Bookmark:
    return Bookmark(title=title or url.rsplit("/", 1)[-1], url=url, created=CREATED)


class _StubFetcher:
    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.requested: list[str] = []

    async def fetch_all(self, urls):
        self.requested = list(urls)
        return {url: self.outcomes[url] for url in dict.fromkeys(self.requested)}


class _StubSummarizer:
    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.items: list[tuple[str, str]] = []

    def summarize_all(self, items, on_complete=None):
        self.items = list(items)
        # Return in reverse completion order to prove the merge is keyed
        return {url: self.outcomes[url] for url, _ in reversed(self.items) if url in self.outcomes}


class _ClusterProvider:
    def __init__(self, response):
        self.response = response

    def complete(self, prompt, max_tokens, purpose="completion"):
        assert purpose == "cluster"
        return self.response


def _five(prefix: str) -> SummaryOutcome:
    return SummaryOutcome.success([f"{prefix} {i}" for i in range(5)])


def test_build_stories_covers_every_bookmark():
    bookmarks = [
        _bookmark("https://ok.example.com/a"),
        _bookmark("https://paywall.example.com/b"),
        _bookmark("https://broken.example.com/c"),
        _bookmark("https://nosummary.example.com/d"),
    ]
    fetched = {
        "https://ok.example.com/a": FetchOutcome.success(ArticleContent("text a", PUBLISHED)),
        "https://paywall.example.com/b": FetchOutcome.paywalled(),
        "https://broken.example.com/c": FetchOutcome.failed("Server error (500)"),
        "https://nosummary.example.com/d": FetchOutcome.success(ArticleContent("text d")),
    }
    summaries = {"https://ok.example.com/a": _five("a")}

    stories = build_stories(bookmarks, fetched, summaries)

    assert [s.url for s in stories] == [b.url for b in bookmarks]
    assert stories[0].summary.ok
    assert stories[0].effective_date == PUBLISHED
    assert stories[1].summary.reason == "Paywalled - summary unavailable"
    assert stories[1].effective_date == CREATED
    assert stories[2].summary.reason == "Summary not available: Server error (500)"
    assert stories[3].summary.reason == "Summarization failed"
    assert stories[3].effective_date == CREATED


def test_run_pipeline_merges_by_url_and_clusters():
    urls = [f"https://example.com/{i}" for i in range(3)]
    bookmarks = [_bookmark(url) for url in urls] + [_bookmark(urls[0], "duplicate")]
    fetcher = _StubFetcher(
        {
            urls[0]: FetchOutcome.success(ArticleContent("zero")),
            urls[1]: FetchOutcome.paywalled(),
            urls[2]: FetchOutcome.success(ArticleContent("two")),
        }
    )
    summarizer = _StubSummarizer({urls[0]: _five("zero"), urls[2]: _five("two")})
    provider = _ClusterProvider(
        '{"topics": [{"title": "Tech", "article_indices": [0, 2, 3]}, {"title": "Biz", "article_indices": [1]}]}'
    )

    topics = run_pipeline(
        bookmarks,
        AppConfig(),
        provider=provider,
        console=Console(quiet=True),
        fetcher=fetcher,
        summarizer=summarizer,
    )

    assert fetcher.requested == urls
    assert {url for url, _ in summarizer.items} == {urls[0], urls[2]}
    stories = [s for t in topics for s in t.stories]
    assert len(stories) == len(bookmarks)
    by_title = {s.title: s for s in stories}
    assert by_title["0"].summary.points[0] == "zero 0"
    assert by_title["duplicate"].summary.points[0] == "zero 0"
    assert by_title["2"].summary.points[0] == "two 0"
    assert by_title["1"].summary.reason == "Paywalled - summary unavailable"
    assert [t.title for t in topics] == ["Tech", "Biz"]


def test_run_pipeline_with_no_successful_fetch_still_emits_stories():
    bookmarks = [_bookmark("https://a.example.com/x"), _bookmark("https://b.example.com/y")]
    fetcher = _StubFetcher({b.url: FetchOutcome.failed("timeout") for b in bookmarks})
    summarizer = _StubSummarizer({})
    provider = _ClusterProvider("not json")

    topics = run_pipeline(
        bookmarks,
        AppConfig(),
        provider=provider,
        console=Console(quiet=True),
        fetcher=fetcher,
        summarizer=summarizer,
    )

    assert summarizer.items == []
    assert [t.title for t in topics] == ["News Stories"]
    assert [s.summary.reason for s in topics[0].stories] == ["Summary not available: timeout"] * 2


def test_save_run_writes_json_and_documents(tmp_path):
    bookmarks = [_bookmark("https://example.com/a")]
    stories = build_stories(
        bookmarks,
        {"https://example.com/a": FetchOutcome.success(ArticleContent("text"))},
        {"https://example.com/a": _five("a")},
    )
    briefing = build_briefing([Topic(title="News", stories=stories)], AppConfig())
    paths = save_run(briefing, tmp_path, AppConfig())

    names = sorted(p.name for p in paths)
    assert names == ["briefing.html", "briefing.json", "briefing.org", "links.csv"]
    data = json.loads((tmp_path / "briefing.json").read_text(encoding="utf-8"))
    assert data["version"] == "1.0"
    assert data["show"] == "This Week in Tech"
    assert data["topics"][0]["stories"][0]["summary"]["points"][0] == "a 0"
