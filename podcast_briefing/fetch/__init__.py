"""
Article fetching and extraction.

This package handles concurrent HTTP fetching, content extraction,
publish-date detection and browser cookie loading.
"""

from .cookies import load_browser_cookies
from .extractor import extract_published_date, extract_text
from .fetcher import ArticleFetcher, FetchError, FetchStats, fetch_articles

__all__ = [
    "ArticleFetcher",
    "FetchError",
    "FetchStats",
    "fetch_articles",
    "extract_text",
    "extract_published_date",
    "load_browser_cookies",
]
