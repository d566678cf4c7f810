"""
Core domain models and retry policy.

This package contains data types and logic that is independent of
any specific pipeline stage.
"""

from .retry import RetryPolicy, classify_http_status, is_rate_limit_signal
from .types import (
    ArticleContent,
    Bookmark,
    BriefingData,
    FetchOutcome,
    Story,
    SummaryOutcome,
    Topic,
)

__all__ = [
    "ArticleContent",
    "Bookmark",
    "BriefingData",
    "FetchOutcome",
    "RetryPolicy",
    "Story",
    "SummaryOutcome",
    "Topic",
    "classify_http_status",
    "is_rate_limit_signal",
]
