"""
Command-line interface for the podcast briefing tool.

Uses Typer to provide three commands:
- collect: bookmarks (JSON export or Raindrop.io) -> briefing JSON + documents
- render: briefing JSON or an edited org file -> documents
- list: saved briefings in a folder, newest first

Supports loading .env files for API key configuration.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .config import AppConfig, get_raindrop_token, load_config
from .core.types import Bookmark, BriefingData
from .fetch.cookies import load_browser_cookies
from .input import RaindropClient, RaindropError, filter_by_tag, parse_bookmarks_json
from .llm.providers import create_provider
from .llm.tracing import flush, setup_langfuse
from .output import list_briefings, load_briefing, parse_org
from .runner import build_briefing, run_pipeline, save_run, write_outputs
from .shows import get_show, next_show_date
from .utils.logging import setup_llm_logger, setup_logging

try:
    from dotenv import load_dotenv
except Exception:  # noqa: BLE001
    load_dotenv = None

app = typer.Typer(add_completion=False)
console = Console()


@app.command()
def collect(
    input: Path | None = typer.Option(
        None, "--input", "-i", exists=True, readable=True, help="Bookmark JSON export."
    ),
    show: str | None = typer.Option(
        None, "--show", "-s", help="Show slug (twit, mbw, im); selects the Raindrop tag."
    ),
    days: int | None = typer.Option(None, "--days", "-d", help="Days of bookmarks to collect."),
    output: Path = typer.Option(Path("out"), "--output", "-o"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    cookie_file: Path | None = typer.Option(
        None, "--cookies", help="Netscape cookies.txt, Firefox cookies.sqlite or Chrome Cookies file."
    ),
    browser_cookies: bool | None = typer.Option(
        None, "--browser-cookies/--no-browser-cookies", help="Look up Chrome, Chromium and Firefox cookies."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log file format: jsonl or plain."
    ),
    api_key: str | None = typer.Option(
        None, "--api-key", help="Override provider API key (or set it in the environment / .env)."
    ),
):
    """Collect bookmarks and build a topic-organized briefing.

    Reads bookmarks from a JSON export (--input) or from Raindrop.io for a
    show's tag (--show), fetches and summarizes each article, clusters the
    stories into topics, and writes briefing.json plus HTML, CSV and org
    documents to a per-show folder under --output.
    """
    if load_dotenv is not None:
        load_dotenv()

    cfg = load_config(str(config) if config else None)
    if api_key:
        cfg.provider.api_key = api_key
    if log_level:
        cfg.logging.level = log_level
    if log_format:
        cfg.logging.format = log_format
    if cookie_file is not None:
        cfg.fetch.cookie_file = str(cookie_file)
    if browser_cookies is not None:
        cfg.fetch.use_browser_cookies = browser_cookies
    if days is not None:
        cfg.raindrop.days = days

    try:
        show_info = get_show(show) if show else None
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if show_info is not None:
        cfg.output.show_name = show_info.name
    if input is None and show_info is None:
        raise typer.BadParameter("Provide --input or --show.")

    now = datetime.now(timezone.utc)
    show_date = next_show_date(cfg.output.show_name, datetime.now())
    slug = show_info.slug if show_info else (input.stem if input else "briefing")
    run_output_dir = output / f"{slug}-{show_date.strftime('%Y-%m-%d')}"
    run_output_dir.mkdir(parents=True, exist_ok=True)
    logger = setup_logging(cfg.logging, run_output_dir)
    setup_langfuse(cfg.langfuse)

    try:
        bookmarks = _load_bookmarks(cfg, input, show_info.tag if show_info else None, now)
        if not bookmarks:
            console.print("No bookmarks found.")
            return
        console.print(f"Found {len(bookmarks)} bookmarks")

        provider = create_provider(
            cfg.provider, cfg.logging, setup_llm_logger(cfg.logging, run_output_dir)
        )
        cookies = None
        if cfg.fetch.cookie_file or cfg.fetch.use_browser_cookies:
            cookies = load_browser_cookies(cfg.fetch.cookie_file, discover=cfg.fetch.use_browser_cookies)

        topics = run_pipeline(
            bookmarks,
            cfg,
            provider=provider,
            cookies=cookies,
            logger=logger,
            console=console,
            show_progress=progress,
        )
    except (ValueError, RaindropError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    finally:
        flush()

    briefing = build_briefing(topics, cfg)
    for path in save_run(briefing, run_output_dir, cfg):
        console.print(f"Saved: {path}")


@app.command()
def render(
    file: Path = typer.Option(..., "--file", "-f", exists=True, readable=True),
    output: Path | None = typer.Option(None, "--output", "-o"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
):
    """Render documents from a briefing JSON file or an edited org file."""
    cfg = load_config(str(config) if config else None)
    try:
        briefing = _read_briefing(file)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    for path in write_outputs(briefing, output or file.parent, cfg):
        console.print(f"Saved: {path}")


@app.command("list")
def list_command(
    directory: Path = typer.Argument(Path("out"), help="Folder holding briefing JSON files."),
):
    """List saved briefings, newest first."""
    found = list_briefings(directory)
    if directory.exists():
        for folder in sorted(p for p in directory.iterdir() if p.is_dir()):
            found.extend(list_briefings(folder))
    found.sort(key=lambda item: item[1].created_at, reverse=True)

    table = Table(title="Briefings")
    table.add_column("File")
    table.add_column("Show")
    table.add_column("Created")
    table.add_column("Topics", justify="right")
    table.add_column("Stories", justify="right")
    for path, data in found:
        table.add_row(
            str(path),
            data.show,
            data.created_at.strftime("%Y-%m-%d %H:%M"),
            str(len(data.topics)),
            str(data.story_count),
        )
    console.print(table)


def _load_bookmarks(
    cfg: AppConfig, input: Path | None, tag: str | None, now: datetime
) -> list[Bookmark]:
    if input is not None:
        with open(input, encoding="utf-8") as f:
            bookmarks = parse_bookmarks_json(json.load(f))
        if tag:
            bookmarks = filter_by_tag(bookmarks, tag)
        return bookmarks

    client = RaindropClient(get_raindrop_token(cfg.raindrop), cfg.raindrop)
    return client.fetch_bookmarks(tag or "", now - timedelta(days=cfg.raindrop.days))


def _read_briefing(path: Path) -> BriefingData:
    if path.suffix == ".org":
        show, topics = parse_org(path.read_text(encoding="utf-8"))
        return BriefingData(show=show, topics=topics)
    return load_briefing(path)


if __name__ == "__main__":
    app()
