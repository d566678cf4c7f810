"""
Reading edited org-mode briefings back into topics.

Hosts reorder, retitle and prune the generated outline by hand before a
show; this parser recovers the topics and stories from that edited file so
the HTML and CSV can be regenerated. Topics without stories (the trailing
hand-written sections) are dropped, and stories inside each topic are
sorted by date with undated stories last.
"""

from __future__ import annotations

from datetime import datetime, timezone

from ..core.types import Story, SummaryOutcome, Topic
from ..fetch.extractor import parse_timestamp

_DATE_FORMATS = ("%a, %d %b %Y", "%d %b %Y", "%Y-%m-%d")


def parse_org(content: str) -> tuple[str, list[Topic]]:
    """Parse an org-mode briefing.

    Returns:
        (show name, topics)

    Raises:
        ValueError: No topic with stories was found
    """
    show = "Briefing"
    topics: list[Topic] = []
    topic: Topic | None = None
    story: dict | None = None
    section: str | None = None

    def _close_story() -> None:
        nonlocal story
        if story is not None and topic is not None:
            topic.stories.append(_build_story(story))
        story = None

    def _close_topic() -> None:
        nonlocal topic
        _close_story()
        if topic is not None and topic.stories:
            topics.append(topic)
        topic = None

    for line in content.splitlines():
        stripped = line.strip()

        if stripped.startswith("#+TITLE:"):
            title = stripped[len("#+TITLE:"):]
            show = title.replace("Briefing Book", "").replace("Briefing", "").strip()
            continue
        if stripped.startswith("#+"):
            continue

        if stripped.startswith("*** "):
            section = stripped[4:].strip()
            continue
        if stripped.startswith("** "):
            _close_story()
            story = {"title": stripped[3:].strip(), "url": "", "date": "", "points": [], "quote": None}
            section = None
            continue
        if stripped.startswith("* "):
            _close_topic()
            topic = Topic(title=stripped[2:].strip())
            section = None
            continue

        if not stripped or story is None:
            continue
        if section == "URL":
            story["url"] = stripped
        elif section == "Date":
            story["date"] = stripped
        elif section == "Summary":
            if stripped.startswith("- "):
                story["points"].append(stripped[2:].strip())
            elif stripped.startswith('"'):
                story["quote"] = stripped

    _close_topic()

    if not topics:
        raise ValueError("No topics found in org file. Make sure the file follows the expected format.")

    for item in topics:
        # Stable sort keeps the edited order among equal or missing dates
        item.stories.sort(key=_date_sort_key)
    return show, topics


def parse_org_date(value: str) -> datetime | None:
    """Parse ISO timestamps and the date-only forms used in older files."""
    raw = value.strip()
    if not raw:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return parse_timestamp(raw)


def _build_story(data: dict) -> Story:
    if data["points"]:
        summary = SummaryOutcome.success(data["points"], data["quote"])
    else:
        summary = SummaryOutcome.insufficient()
    return Story(
        title=data["title"],
        url=data["url"],
        effective_date=parse_org_date(data["date"]),
        summary=summary,
    )


def _date_sort_key(story: Story) -> tuple[int, datetime]:
    if story.effective_date is None:
        return (1, datetime.min.replace(tzinfo=timezone.utc))
    return (0, story.effective_date)
