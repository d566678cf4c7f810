"""
Output documents and persistence.

This package renders briefings to HTML, CSV and org-mode, reads edited
org files back, and stores briefings as JSON.
"""

from .org import parse_org
from .renderer import render_html, render_links_csv, render_org
from .store import list_briefings, load_briefing, save_briefing

__all__ = [
    "render_html",
    "render_links_csv",
    "render_org",
    "parse_org",
    "save_briefing",
    "load_briefing",
    "list_briefings",
]
