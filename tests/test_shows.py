"""Tests for the show catalog and recording-date calculation."""

from __future__ import annotations

from datetime import datetime

import pytest

from podcast_briefing.shows import get_show, next_show_date


@pytest.mark.parametrize(
    ("show", "now", "expected"),
    [
        ("MacBreak Weekly", datetime(2026, 2, 1, 21, 25), datetime(2026, 2, 3).date()),
        ("This Week in Tech", datetime(2026, 2, 1, 19, 0), datetime(2026, 2, 8).date()),
        ("This Week in Tech", datetime(2026, 2, 1, 17, 0), datetime(2026, 2, 1).date()),
        ("MacBreak Weekly", datetime(2026, 2, 3, 15, 0), datetime(2026, 2, 10).date()),
        ("MacBreak Weekly", datetime(2026, 2, 3, 13, 0), datetime(2026, 2, 3).date()),
        ("Intelligent Machines", datetime(2026, 2, 4, 19, 0), datetime(2026, 2, 11).date()),
        ("Intelligent Machines", datetime(2026, 2, 1, 21, 25), datetime(2026, 2, 4).date()),
        ("Some Other Show", datetime(2026, 2, 2, 9, 0), datetime(2026, 2, 8).date()),
    ],
)
def test_next_show_date(show, now, expected):
    assert next_show_date(show, now).date() == expected


def test_get_show_by_slug():
    show = get_show("MBW")
    assert show.name == "MacBreak Weekly"
    assert show.tag == "#mbw"


def test_unknown_show_slug():
    with pytest.raises(ValueError, match="Unknown show"):
        get_show("nope")
