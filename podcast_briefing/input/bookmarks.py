"""JSON parser for bookmark exports.

Accepts either a bare list of bookmark objects or an object with an
``items`` array, which is what the Raindrop.io API and its exports return:

    {
        "items": [
            {
                "_id": 123,
                "title": "Article Title",
                "link": "https://example.com/article",
                "tags": ["#twit"],
                "created": "2026-02-01T15:30:00.000Z"
            }
        ]
    }
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any

from ..core.types import Bookmark
from ..fetch.extractor import parse_timestamp

logger = logging.getLogger(__name__)


def parse_bookmarks_json(data: Any) -> list[Bookmark]:
    """Parse a bookmark export into Bookmark objects.

    Items without a title or URL are skipped with a warning. A missing or
    unreadable creation time becomes the current time.

    Raises:
        ValueError: The data is neither a list nor an object with ``items``
    """
    if isinstance(data, dict):
        if "items" not in data:
            raise ValueError("Invalid bookmark JSON: missing 'items' key")
        items = data["items"]
    else:
        items = data
    if not isinstance(items, list):
        raise ValueError("Invalid bookmark JSON: expected a list of bookmarks")

    bookmarks: list[Bookmark] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        bookmark = parse_bookmark(item)
        if bookmark is None:
            logger.warning(
                "Skipping bookmark %s: missing required fields (title or link)",
                item.get("_id", "unknown"),
            )
            continue
        bookmarks.append(bookmark)
    return bookmarks


def parse_bookmark(item: dict[str, Any]) -> Bookmark | None:
    title = (item.get("title") or "").strip()
    url = (item.get("link") or item.get("url") or "").strip()
    if not title or not url:
        return None

    raw_created = item.get("created") or item.get("createdDate") or ""
    created = parse_timestamp(str(raw_created)) if raw_created else None
    tags = item.get("tags") or []
    return Bookmark(
        title=title,
        url=url,
        created=created or datetime.now(timezone.utc),
        tags=tuple(str(tag) for tag in tags),
    )


def filter_by_tag(bookmarks: list[Bookmark], tag: str) -> list[Bookmark]:
    """Keep bookmarks carrying ``tag``, compared case-insensitively."""
    wanted = tag.lower()
    return [b for b in bookmarks if any(t.lower() == wanted for t in b.tags)]
