"""Tests for HTML, CSV and org-mode rendering."""

from __future__ import annotations

import csv
from datetime import datetime, timezone
import io

from podcast_briefing.core.types import BriefingData, Story, SummaryOutcome, Topic
from podcast_briefing.output.renderer import (
    format_story_date,
    render_html,
    render_links_csv,
    render_org,
)

SHOW_DATE = datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc)
PREPARED = datetime(2026, 1, 30, 9, 15, tzinfo=timezone.utc)


def _story(title: str, url: str, summary: SummaryOutcome, date=None) -> Story:
    return Story(title=title, url=url, effective_date=date, summary=summary)


def _briefing() -> BriefingData:
    return BriefingData(
        show="This Week in Tech",
        topics=[
            Topic(
                title="Apple & Google",
                stories=[
                    _story(
                        "Test <script>",
                        "https://example.com/a?x=1&y=2",
                        SummaryOutcome.success(['Point "quoted"', "b", "c", "d", "e"], '"Hi" -- Tim'),
                        datetime(2026, 2, 1, 15, 30, tzinfo=timezone.utc),
                    ),
                    _story(
                        "Paywalled one",
                        "https://example.com/b",
                        SummaryOutcome.failed("Paywalled - summary unavailable"),
                    ),
                ],
            ),
            Topic(
                title="AI",
                stories=[_story("Model, released", "https://example.com/c", SummaryOutcome.insufficient())],
            ),
        ],
        created_at=SHOW_DATE,
    )


def test_html_contains_header_topics_and_escapes_text():
    html = render_html(_briefing(), show_date=SHOW_DATE, prepared_at=PREPARED)

    assert "This Week in Tech Briefing" in html
    assert "For Sunday, 1 February 2026" in html
    assert "1. Apple &amp; Google" in html
    assert "2. AI" in html
    assert "Test &lt;script&gt;" in html
    assert "<script>" not in html.split("</style>", 1)[1]
    assert "Point &#34;quoted&#34;" in html
    assert "https://example.com/a?x=1&amp;y=2" in html
    assert "1-Feb-2026 3:30PM" in html


def test_html_failed_summaries_show_placeholder():
    html = render_html(_briefing(), show_date=SHOW_DATE, prepared_at=PREPARED)
    assert html.count("Summary not available") == 2
    assert "Paywalled - summary unavailable" not in html


def test_links_csv_layout():
    text = render_links_csv(_briefing().topics)
    rows = list(csv.reader(io.StringIO(text)))

    assert rows == [
        ["", "Apple & Google", "Test <script>", "", "https://example.com/a?x=1&y=2"],
        ["", "", "Paywalled one", "", "https://example.com/b"],
        ["", "", "", "", ""],
        ["", "AI", "Model, released", "", "https://example.com/c"],
        ["", "", "", "", ""],
    ]
    assert ',"Model, released",' in text
    assert text.endswith(",,,,\n")


def test_org_outline():
    org = render_org(
        _briefing(),
        show_date=SHOW_DATE,
        extra_sections=["In Other News", "Picks", "In Memoriam"],
    )

    assert org.startswith("#+TITLE: This Week in Tech Briefing Book\n#+DATE: Sun, 1 February 2026\n")
    assert "* Apple & Google\n" in org
    assert "** Test <script>\n" in org
    assert "*** URL\nhttps://example.com/a?x=1&y=2\n" in org
    assert "*** Date\n2026-02-01T15:30:00+00:00\n" in org
    assert '*** Summary\n"Hi" -- Tim\n\n- Point "quoted"\n- b\n' in org
    assert "** Paywalled one\n\n*** URL\nhttps://example.com/b\n\n*** Summary\nSummary not available\n" in org
    assert org.rstrip().endswith("* In Memoriam")
    assert "* Picks\n" in org


def test_format_story_date():
    assert format_story_date(datetime(2026, 2, 1, 0, 5, tzinfo=timezone.utc)) == "1-Feb-2026 12:05AM"
    assert format_story_date(None) == ""
