"""Known shows, their bookmark tags and recording schedules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class ShowInfo:
    """A show the briefing can be prepared for.

    Attributes:
        name: Display name
        slug: Short identifier used on the command line and in filenames
        tag: Bookmark tag marking stories for this show
        weekday: Recording day (Monday is 0)
        cutoff_hour: Hour on recording day after which the next week's show is targeted
    """

    name: str
    slug: str
    tag: str
    weekday: int = 6
    cutoff_hour: int = 18


SHOWS: dict[str, ShowInfo] = {
    "twit": ShowInfo("This Week in Tech", "twit", "#twit", weekday=6, cutoff_hour=18),
    "mbw": ShowInfo("MacBreak Weekly", "mbw", "#mbw", weekday=1, cutoff_hour=14),
    "im": ShowInfo("Intelligent Machines", "im", "#im", weekday=2, cutoff_hour=18),
}


def get_show(slug: str) -> ShowInfo:
    """Look up a show by slug.

    Raises:
        ValueError: The slug is unknown
    """
    show = SHOWS.get(slug.lower().strip())
    if show is None:
        raise ValueError(f"Unknown show: {slug}. Use one of: {', '.join(sorted(SHOWS))}")
    return show


def show_by_name(name: str) -> ShowInfo | None:
    for show in SHOWS.values():
        if show.name == name:
            return show
    return None


def next_show_date(show_name: str, now: datetime) -> datetime:
    """Date of the next recording of a show, counting from now.

    On recording day the current show is targeted until its cutoff hour.
    Unknown shows follow the Sunday 18:00 schedule.
    """
    show = show_by_name(show_name)
    weekday = show.weekday if show else 6
    cutoff_hour = show.cutoff_hour if show else 18

    days_ahead = (weekday - now.weekday()) % 7
    if days_ahead == 0 and now.hour >= cutoff_hour:
        days_ahead = 7
    return now + timedelta(days=days_ahead)
