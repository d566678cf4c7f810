"""
Bookmark sources.

This package contains the JSON export parser and the Raindrop.io client.
"""

from .bookmarks import filter_by_tag, parse_bookmarks_json
from .raindrop import RaindropClient, RaindropError

__all__ = ["parse_bookmarks_json", "filter_by_tag", "RaindropClient", "RaindropError"]
