"""
Briefing rendering for HTML, CSV and org-mode output.

This module generates the HTML briefing with a Jinja2 template, a links
CSV laid out for pasting into a spreadsheet, and an org-mode outline that
can be edited by hand and read back with ``output.org.parse_org``.
"""

from __future__ import annotations

import csv
from datetime import datetime
import io
from pathlib import Path
from typing import Iterable

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.types import BriefingData, Story, Topic
from ..shows import next_show_date

NOT_AVAILABLE_TEXT = "Summary not available"


def _slugify(value: str) -> str:
    """Convert a string to a URL-safe slug.

    Examples:
        >>> _slugify("Apple & Google")
        'apple-google'
    """
    cleaned = []
    last_dash = False
    for ch in value.strip().lower():
        if ch.isalnum():
            cleaned.append(ch)
            last_dash = False
        elif not last_dash:
            cleaned.append("-")
            last_dash = True
    return "".join(cleaned).strip("-") or "topic"


def format_story_date(value: datetime | None) -> str:
    """Format a story date as e.g. ``1-Feb-2026 3:30PM``."""
    if value is None:
        return ""
    hour = value.hour % 12 or 12
    return f"{value.day}-{value.strftime('%b-%Y')} {hour}:{value.strftime('%M%p')}"


def format_show_date(value: datetime) -> str:
    """Format a show date as e.g. ``Sunday, 1 February 2026``."""
    return f"{value.strftime('%A')}, {value.day} {value.strftime('%B %Y')}"


def render_html(
    briefing: BriefingData,
    show_date: datetime | None = None,
    prepared_at: datetime | None = None,
) -> str:
    """Render a briefing as a standalone HTML page.

    Args:
        briefing: Briefing to render
        show_date: Recording date shown in the header; defaults to the
            next recording after the briefing was created
        prepared_at: Timestamp shown as the preparation time; defaults to now

    Returns:
        HTML document text; all story and topic text is escaped
    """
    env = Environment(
        loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
        autoescape=select_autoescape(["html"]),
    )
    template = env.get_template("briefing.html")

    show_date = show_date or next_show_date(briefing.show, briefing.created_at)
    prepared_at = prepared_at or datetime.now().astimezone()

    used_ids: dict[str, int] = {}
    topics = []
    for topic in briefing.topics:
        base_id = _slugify(topic.title)
        count = used_ids.get(base_id, 0)
        used_ids[base_id] = count + 1
        topics.append(
            {
                "id": f"{base_id}-{count + 1}" if count else base_id,
                "title": topic.title,
                "stories": [
                    {
                        "title": story.title,
                        "url": story.url,
                        "date": format_story_date(story.effective_date),
                        "summary": story.summary,
                    }
                    for story in topic.stories
                ],
            }
        )

    prepared = f"{prepared_at.strftime('%a')} {prepared_at.day} {prepared_at.strftime('%b %Y at %H:%M')}"
    tz_name = prepared_at.tzname()
    if tz_name:
        prepared = f"{prepared} {tz_name}"

    return template.render(
        show=briefing.show,
        show_date=format_show_date(show_date),
        prepared=prepared,
        topics=topics,
    )


def render_links_csv(topics: Iterable[Topic]) -> str:
    """Render topic/story links as five-column CSV rows.

    The first story of a topic carries the topic title in column B; later
    stories leave it blank. Titles go in column C and links in column E.
    A blank row separates topics.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    for topic in topics:
        for idx, story in enumerate(topic.stories):
            writer.writerow(["", topic.title if idx == 0 else "", story.title, "", story.url])
        writer.writerow(["", "", "", "", ""])
    return buffer.getvalue()


def render_org(
    briefing: BriefingData,
    show_date: datetime | None = None,
    extra_sections: Iterable[str] = (),
) -> str:
    """Render a briefing as an editable org-mode outline.

    Topics are level-1 headings and stories level-2 headings with
    ``URL``, ``Date`` and ``Summary`` subsections. ``extra_sections`` are
    appended as empty level-1 headings for hand-written segments.
    """
    show_date = show_date or next_show_date(briefing.show, briefing.created_at)
    lines = [
        f"#+TITLE: {briefing.show} Briefing Book",
        f"#+DATE: {show_date.strftime('%a')}, {show_date.day} {show_date.strftime('%B %Y')}",
        "",
    ]

    for topic in briefing.topics:
        lines.extend([f"* {topic.title}", ""])
        for story in topic.stories:
            lines.extend(_org_story(story))

    for section in extra_sections:
        lines.extend([f"* {section}", ""])

    return "\n".join(lines) + "\n"


def _org_story(story: Story) -> list[str]:
    lines = [f"** {story.title}", "", "*** URL", story.url, ""]
    if story.effective_date is not None:
        lines.extend(["*** Date", story.effective_date.isoformat(), ""])
    lines.append("*** Summary")
    if story.summary.ok:
        if story.summary.quote:
            lines.extend([story.summary.quote, ""])
        lines.extend(f"- {point}" for point in story.summary.points)
    else:
        lines.append(NOT_AVAILABLE_TEXT)
    lines.append("")
    return lines
