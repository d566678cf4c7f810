"""
Raindrop.io bookmark client.

Pages through every bookmark created after a cutoff date and keeps those
carrying the requested tag. The search API's tag matching is case
sensitive, so the query filters only by date and the tag filter is
applied locally.
"""

from __future__ import annotations

from datetime import datetime
import logging
import time
from typing import Callable

import httpx

from ..config import RaindropConfig
from ..core.types import Bookmark
from ..utils.logging import log_event
from .bookmarks import filter_by_tag, parse_bookmark


class RaindropError(Exception):
    """The Raindrop API could not be reached or returned an error."""


class RaindropClient:
    """Fetches bookmarks from the Raindrop.io REST API.

    Args:
        api_token: Raindrop API token
        cfg: Paging, timeout and endpoint settings
        transport: Optional httpx transport, used by tests
        sleep: Blocking sleep used between pages
        logger: Logger for paging events
    """

    def __init__(
        self,
        api_token: str | None,
        cfg: RaindropConfig | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: logging.Logger | None = None,
    ):
        if not api_token:
            raise ValueError("Missing Raindrop API token. Set RAINDROP_API_TOKEN or raindrop.api_token.")
        self.api_token = api_token
        self.cfg = cfg or RaindropConfig()
        self.transport = transport
        self._sleep = sleep
        self.logger = logger or logging.getLogger("podcast_briefing")

    def fetch_bookmarks(self, tag: str, since: datetime) -> list[Bookmark]:
        """Return bookmarks tagged ``tag`` created after ``since``.

        Raises:
            RaindropError: A page request failed or returned invalid JSON
        """
        search = f"created:>{since.strftime('%Y-%m-%d')}"
        url = f"{self.cfg.base_url.rstrip('/')}/raindrops/0"
        bookmarks: list[Bookmark] = []
        page = 0

        with httpx.Client(
            timeout=self.cfg.timeout_seconds,
            headers={"Authorization": f"Bearer {self.api_token}"},
            transport=self.transport,
        ) as client:
            while True:
                items = self._fetch_page(client, url, search, page)
                if not items:
                    break
                for item in items:
                    if not isinstance(item, dict):
                        continue
                    bookmark = parse_bookmark(item)
                    if bookmark is not None:
                        bookmarks.append(bookmark)
                log_event(
                    self.logger,
                    "Raindrop page fetched",
                    level=logging.DEBUG,
                    event="raindrop_page",
                    page=page,
                    items=len(items),
                )
                page += 1
                self._sleep(self.cfg.page_delay_seconds)

        matched = filter_by_tag(bookmarks, tag)
        log_event(
            self.logger,
            "Raindrop bookmarks fetched",
            event="raindrop_done",
            tag=tag,
            total=len(bookmarks),
            matched=len(matched),
        )
        return matched

    def _fetch_page(self, client: httpx.Client, url: str, search: str, page: int) -> list:
        params = {"perpage": self.cfg.per_page, "page": page, "search": search}
        try:
            response = client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise RaindropError(f"Failed to fetch bookmarks from Raindrop.io: {exc}") from exc

        if response.status_code >= 400:
            raise RaindropError(
                f"Raindrop API returned error: {response.status_code} - {response.text[:500]}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise RaindropError("Failed to parse Raindrop API response") from exc
        items = data.get("items") if isinstance(data, dict) else None
        return items if isinstance(items, list) else []
