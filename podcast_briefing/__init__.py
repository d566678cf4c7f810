"""
Podcast Briefing - AI-assisted show prep from bookmarked articles.

This package turns a set of bookmarked news articles into a topic-organized
briefing: it fetches each article, summarizes it with an LLM, clusters the
stories into topics, and renders HTML, CSV and org-mode documents.

Main entry point is the CLI via `podcast-briefing collect` command.

Example:
    $ podcast-briefing collect --show twit --days 7 -o out/
"""

__all__ = ["__version__", "parse_bookmarks_json", "run_pipeline"]
__version__ = "0.1.0"

from .input.bookmarks import parse_bookmarks_json
from .runner import run_pipeline
