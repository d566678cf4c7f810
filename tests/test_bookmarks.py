"""Tests for bookmark sources: JSON exports and the Raindrop.io client."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from podcast_briefing.config import RaindropConfig
from podcast_briefing.input import RaindropClient, RaindropError, filter_by_tag, parse_bookmarks_json


def test_parse_items_object():
    data = {
        "items": [
            {
                "_id": 1,
                "title": "Apple ships thing",
                "link": "https://example.com/a",
                "tags": ["#TWiT"],
                "created": "2026-02-01T15:30:00.000Z",
            },
            {"_id": 2, "title": "", "link": "https://example.com/untitled"},
            {"_id": 3, "title": "No link"},
        ]
    }
    bookmarks = parse_bookmarks_json(data)

    assert len(bookmarks) == 1
    assert bookmarks[0].url == "https://example.com/a"
    assert bookmarks[0].tags == ("#TWiT",)
    assert bookmarks[0].created == datetime(2026, 2, 1, 15, 30, tzinfo=timezone.utc)


def test_parse_bare_list_with_url_key():
    bookmarks = parse_bookmarks_json([{"title": "T", "url": "https://example.com/t"}])
    assert bookmarks[0].url == "https://example.com/t"
    assert bookmarks[0].created.tzinfo is not None


def test_parse_rejects_unknown_shape():
    with pytest.raises(ValueError, match="missing 'items'"):
        parse_bookmarks_json({"articles": []})
    with pytest.raises(ValueError):
        parse_bookmarks_json("nope")


def test_filter_by_tag_is_case_insensitive():
    bookmarks = parse_bookmarks_json(
        [
            {"title": "A", "link": "https://a", "tags": ["#TWiT"]},
            {"title": "B", "link": "https://b", "tags": ["#mbw"]},
        ]
    )
    assert [b.title for b in filter_by_tag(bookmarks, "#twit")] == ["A"]


def test_raindrop_pages_until_empty_and_filters_tag():
    requests: list[httpx.Request] = []
    pages = {
        "0": [
            {"_id": 1, "title": "A", "link": "https://a", "tags": ["#TWiT"], "created": "2026-02-01T00:00:00Z"},
            {"_id": 2, "title": "B", "link": "https://b", "tags": ["#im"], "created": "2026-02-01T00:00:00Z"},
        ],
        "1": [
            {"_id": 3, "title": "C", "link": "https://c", "tags": ["#twit"], "created": "2026-02-02T00:00:00Z"},
        ],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        page = request.url.params["page"]
        return httpx.Response(200, json={"items": pages.get(page, []), "count": 3})

    sleeps: list[float] = []
    client = RaindropClient(
        "token-123",
        RaindropConfig(),
        transport=httpx.MockTransport(handler),
        sleep=sleeps.append,
    )
    bookmarks = client.fetch_bookmarks("#twit", datetime(2026, 1, 25, tzinfo=timezone.utc))

    assert [b.title for b in bookmarks] == ["A", "C"]
    assert len(requests) == 3
    assert sleeps == [0.5, 0.5]
    first = requests[0]
    assert first.headers["Authorization"] == "Bearer token-123"
    assert first.url.path == "/rest/v1/raindrops/0"
    assert first.url.params["perpage"] == "50"
    assert first.url.params["search"] == "created:>2026-01-25"


def test_raindrop_error_status_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="unauthorized")

    client = RaindropClient("bad", transport=httpx.MockTransport(handler), sleep=lambda _d: None)
    with pytest.raises(RaindropError, match="401"):
        client.fetch_bookmarks("#twit", datetime(2026, 1, 25, tzinfo=timezone.utc))


def test_raindrop_requires_token():
    with pytest.raises(ValueError, match="Raindrop API token"):
        RaindropClient(None)
