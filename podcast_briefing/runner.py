"""
Main pipeline orchestration for the podcast briefing.

This module coordinates the workflow:
1. Fetch and extract every distinct bookmark URL (async, bounded)
2. Summarize the successfully fetched articles (thread pool, bounded)
3. Merge fetch and summary outcomes by URL into one Story per bookmark
4. Cluster the stories into topics
5. Render the requested output documents

Stage results are reconciled through dicts keyed by URL, so completion
order inside a stage never affects the result.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from .analyzers.clusterer import TopicClusterer
from .analyzers.summarizer import ArticleSummarizer, count_successes
from .config import AppConfig
from .core.types import (
    FETCH_PAYWALLED,
    Bookmark,
    BriefingData,
    FetchOutcome,
    Story,
    SummaryOutcome,
    Topic,
)
from .fetch.fetcher import ArticleFetcher, FetchStats
from .llm.providers import CompletionProvider, create_provider
from .llm.tracing import set_span_output, stage_span
from .output.renderer import render_html, render_links_csv, render_org
from .output.store import save_briefing
from .utils.logging import log_event, setup_llm_logger

PAYWALLED_REASON = "Paywalled - summary unavailable"
NOT_AVAILABLE_REASON = "Summary not available"
SUMMARY_MISSING_REASON = "Summarization failed"


def run_pipeline(
    bookmarks: list[Bookmark],
    cfg: AppConfig,
    provider: CompletionProvider | None = None,
    cookies: httpx.Cookies | None = None,
    logger: logging.Logger | None = None,
    console: Console | None = None,
    show_progress: bool = False,
    fetcher: ArticleFetcher | None = None,
    summarizer: ArticleSummarizer | None = None,
) -> list[Topic]:
    """Turn bookmarks into clustered topics.

    Every bookmark yields exactly one Story, whatever happened to its fetch
    or summary, and every Story lands in exactly one Topic.

    Args:
        bookmarks: Bookmarks to process (duplicate URLs are fetched once)
        cfg: Application configuration
        provider: LLM backend; built from ``cfg.provider`` if omitted
        cookies: Optional cookie jar for the fetch stage
        logger: Logger for pipeline events
        console: Rich console for stage statistics
        show_progress: Whether to show a progress bar while summarizing
        fetcher: Prebuilt fetcher, mainly for tests
        summarizer: Prebuilt summarizer, mainly for tests

    Returns:
        Topics covering every story
    """
    logger = logger or logging.getLogger("podcast_briefing")
    console = console or Console()
    if provider is None:
        provider = create_provider(cfg.provider, cfg.logging, setup_llm_logger(cfg.logging, None))

    with stage_span("run", len(bookmarks)) as run_span:
        log_event(logger, "Pipeline start", event="pipeline_start", bookmarks=len(bookmarks))
        urls = list(dict.fromkeys(b.url for b in bookmarks))

        # Stage 1: fetch + extract
        fetcher = fetcher or ArticleFetcher(cfg.fetch, cfg.extract, cookies=cookies, logger=logger)
        with stage_span("fetch", len(urls)) as span:
            fetched = asyncio.run(fetcher.fetch_all(urls))
            stats = FetchStats.from_outcomes(fetched)
            set_span_output(span, vars(stats))
        _render_fetch_stats(stats, console)
        log_event(
            logger,
            "Fetch stage complete",
            event="fetch_stage_complete",
            total=stats.total,
            success=stats.success,
            paywalled=stats.paywalled,
            failed=stats.failed,
        )

        # Stage 2: summarize successful fetches only
        summarizer = summarizer or ArticleSummarizer(provider, cfg.summary, logger=logger)
        items = [(url, outcome.content.text) for url, outcome in fetched.items() if outcome.ok and outcome.content]
        with stage_span("summarize", len(items)) as span:
            summaries = _summarize(summarizer, items, console, show_progress)
            set_span_output(span, {"success": count_successes(summaries)})
        console.print(
            "[bold]Summary stats[/bold]: "
            f"articles={len(items)}, summarized={count_successes(summaries)}"
        )

        # Stage 3: reconcile
        stories = build_stories(bookmarks, fetched, summaries)

        # Stage 4: cluster
        clusterer = TopicClusterer(provider, cfg.cluster, logger=logger)
        with stage_span("cluster", len(stories)) as span:
            topics = clusterer.cluster(stories)
            set_span_output(span, {"topics": [t.title for t in topics]})

        log_event(
            logger,
            "Pipeline complete",
            event="pipeline_complete",
            stories=len(stories),
            topics=len(topics),
        )
        set_span_output(run_span, {"stories": len(stories), "topics": len(topics)})
        return topics


def build_stories(
    bookmarks: list[Bookmark],
    fetched: dict[str, FetchOutcome],
    summaries: dict[str, SummaryOutcome],
) -> list[Story]:
    """Merge fetch and summary outcomes into one Story per bookmark.

    The effective date is the extracted publish date when present, else
    the bookmark's creation time.
    """
    stories: list[Story] = []
    for bookmark in bookmarks:
        outcome = fetched.get(bookmark.url)
        effective_date = bookmark.created
        if outcome is None:
            summary = SummaryOutcome.failed(NOT_AVAILABLE_REASON)
        elif outcome.ok and outcome.content:
            if outcome.content.published_date is not None:
                effective_date = outcome.content.published_date
            summary = summaries.get(bookmark.url) or SummaryOutcome.failed(SUMMARY_MISSING_REASON)
        elif outcome.status == FETCH_PAYWALLED:
            summary = SummaryOutcome.failed(PAYWALLED_REASON)
        else:
            summary = SummaryOutcome.failed(f"{NOT_AVAILABLE_REASON}: {outcome.reason}")
        stories.append(
            Story(
                title=bookmark.title,
                url=bookmark.url,
                effective_date=effective_date,
                summary=summary,
            )
        )
    return stories


def build_briefing(topics: list[Topic], cfg: AppConfig) -> BriefingData:
    return BriefingData(show=cfg.output.show_name, topics=topics)


def write_outputs(briefing: BriefingData, output_dir: Path, cfg: AppConfig) -> list[Path]:
    """Render the enabled documents for a briefing into output_dir.

    Returns:
        Paths of the files written
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    if cfg.output.html:
        path = output_dir / "briefing.html"
        path.write_text(render_html(briefing), encoding="utf-8")
        written.append(path)
    if cfg.output.links_csv:
        path = output_dir / "links.csv"
        path.write_text(render_links_csv(briefing.topics), encoding="utf-8")
        written.append(path)
    if cfg.output.org:
        path = output_dir / "briefing.org"
        path.write_text(
            render_org(briefing, extra_sections=cfg.output.extra_org_sections),
            encoding="utf-8",
        )
        written.append(path)
    return written


def save_run(briefing: BriefingData, output_dir: Path, cfg: AppConfig) -> list[Path]:
    """Persist the briefing JSON and render documents next to it."""
    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / "briefing.json"
    save_briefing(briefing, json_path)
    return [json_path, *write_outputs(briefing, output_dir, cfg)]


def _summarize(
    summarizer: ArticleSummarizer,
    items: list[tuple[str, str]],
    console: Console,
    show_progress: bool,
) -> dict[str, SummaryOutcome]:
    if not show_progress or not items:
        return summarizer.summarize_all(items)

    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeRemainingColumn(),
        console=console,
    )
    with progress:
        task = progress.add_task("Summarize", total=len(items))
        return summarizer.summarize_all(
            items, on_complete=lambda _url, _outcome: progress.advance(task, 1)
        )


def _render_fetch_stats(stats: FetchStats, console: Console) -> None:
    console.print(
        "[bold]Fetch summary[/bold]: "
        f"total={stats.total}, success={stats.success}, "
        f"paywalled={stats.paywalled}, failed={stats.failed}"
    )
