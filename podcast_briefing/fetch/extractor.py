"""
HTML content extraction with multiple fallback strategies.

This module provides a chain of extraction methods:
1. trafilatura: Fast, purpose-built for article content (default)
2. readability: Mozilla's readability algorithm (fallback)
3. bs4: BeautifulSoup plain text extraction (last resort)

It also scans document metadata for the article's publication date.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Callable

from bs4 import BeautifulSoup
import trafilatura
from readability import Document


# Ordered by reliability; the first selector yielding a parsable date wins.
PUBLISHED_DATE_SELECTORS: tuple[str, ...] = (
    'meta[property="article:published_time"]',
    'meta[property="og:published_time"]',
    'meta[name="article:published_time"]',
    'meta[name="publishdate"]',
    'meta[name="publish_date"]',
    'meta[name="date"]',
    'meta[name="publication_date"]',
    'meta[itemprop="datePublished"]',
    "time[datetime]",
)


def extract_text(html: str, primary: str, fallback: list[str]) -> str | None:
    """Extract plain text from HTML using a chain of extractors.

    Tries each extraction method in order until one produces non-empty
    output.

    Args:
        html: The HTML content to extract text from
        primary: Name of the primary extraction method to try first
        fallback: List of fallback method names to try if primary fails

    Returns:
        Extracted plain text with leading/trailing whitespace stripped,
        or None if all methods fail
    """
    order = [primary] + [name for name in fallback if name != primary]
    for method in order:
        extractor = _get_extractor(method)
        if not extractor:
            continue
        try:
            text = extractor(html)
        except Exception:  # noqa: BLE001
            # lxml rejects some documents outright; the next method may cope
            continue
        if text and text.strip():
            return text.strip()
    return None


def extract_published_date(html: str) -> datetime | None:
    """Find the article's publication timestamp in its metadata.

    Checks ``PUBLISHED_DATE_SELECTORS`` in order, reading the ``content``
    attribute of meta tags and the ``datetime`` attribute of time tags.

    Returns:
        A timezone-aware datetime, or None when nothing parsable is found
    """
    soup = BeautifulSoup(html, "html.parser")
    for selector in PUBLISHED_DATE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        for attr in ("content", "datetime"):
            value = element.get(attr)
            if not value:
                continue
            parsed = parse_timestamp(str(value))
            if parsed is not None:
                return parsed
    return None


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO 8601 timestamp or a bare YYYY-MM-DD date.

    Naive values are treated as UTC. Returns None for anything else.
    """
    raw = value.strip()
    if not raw:
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(raw[:10]), time())
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _get_extractor(name: str) -> Callable[[str], str | None] | None:
    if name == "trafilatura":
        return _extract_trafilatura
    if name == "readability":
        return _extract_readability
    if name == "bs4":
        return _extract_bs4
    return None


def _extract_trafilatura(html: str) -> str | None:
    return trafilatura.extract(html)


def _extract_readability(html: str) -> str | None:
    doc = Document(html)
    return _extract_bs4(doc.summary())


def _extract_bs4(html: str) -> str | None:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    text = soup.get_text(separator="\n")
    cleaned = "\n".join([line.strip() for line in text.splitlines() if line.strip()])
    return cleaned if cleaned else None
