"""
Core data types for the briefing pipeline.

This module defines the fundamental data structures used throughout the pipeline:
- Bookmark: A bookmarked article supplied by the bookmark source
- ArticleContent: Text and publish date extracted from a fetched article
- FetchOutcome: Per-URL result of the fetch stage
- SummaryOutcome: Per-URL result of the summarize stage
- Story: A bookmark enriched with its effective date and summary
- Topic: A named group of stories produced by clustering
- BriefingData: Serializable envelope handed to renderers and the store
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

FETCH_SUCCESS = "success"
FETCH_PAYWALLED = "paywalled"
FETCH_FAILED = "failed"

SUMMARY_SUCCESS = "success"
SUMMARY_INSUFFICIENT = "insufficient"
SUMMARY_FAILED = "failed"

BRIEFING_VERSION = "1.0"


@dataclass(frozen=True)
class Bookmark:
    """A bookmarked article.

    Attributes:
        title: The bookmark title
        url: The article URL
        created: When the bookmark was created
        tags: Tags attached to the bookmark at the source
    """

    title: str
    url: str
    created: datetime
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class ArticleContent:
    """Plain text and optional publish date extracted from an article."""

    text: str
    published_date: datetime | None = None


@dataclass(frozen=True)
class FetchOutcome:
    """Result of fetching one URL.

    Exactly one of three variants, selected by ``status``:
    - "success": ``content`` holds the extracted article
    - "paywalled": the source structurally denied access (HTTP 403)
    - "failed": every attempt failed; ``reason`` holds the last error
    """

    status: str
    content: ArticleContent | None = None
    reason: str | None = None

    @classmethod
    def success(cls, content: ArticleContent) -> "FetchOutcome":
        return cls(status=FETCH_SUCCESS, content=content)

    @classmethod
    def paywalled(cls) -> "FetchOutcome":
        return cls(status=FETCH_PAYWALLED)

    @classmethod
    def failed(cls, reason: str) -> "FetchOutcome":
        return cls(status=FETCH_FAILED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status == FETCH_SUCCESS


@dataclass(frozen=True)
class SummaryOutcome:
    """Result of summarizing one article.

    Exactly one of three variants, selected by ``status``:
    - "success": ``points`` holds the bullets, ``quote`` an optional quotation
    - "insufficient": the model reported too little material
    - "failed": the summary could not be produced; ``reason`` says why
    """

    status: str
    points: tuple[str, ...] = ()
    quote: str | None = None
    reason: str | None = None

    @classmethod
    def success(cls, points: list[str] | tuple[str, ...], quote: str | None = None) -> "SummaryOutcome":
        return cls(status=SUMMARY_SUCCESS, points=tuple(points), quote=quote)

    @classmethod
    def insufficient(cls) -> "SummaryOutcome":
        return cls(status=SUMMARY_INSUFFICIENT)

    @classmethod
    def failed(cls, reason: str) -> "SummaryOutcome":
        return cls(status=SUMMARY_FAILED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status == SUMMARY_SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "points": list(self.points),
            "quote": self.quote,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SummaryOutcome":
        status = data.get("status")
        if status == SUMMARY_SUCCESS:
            return cls.success(data.get("points") or [], data.get("quote"))
        if status == SUMMARY_INSUFFICIENT:
            return cls.insufficient()
        return cls.failed(str(data.get("reason") or "Summary not available"))


@dataclass
class Story:
    """A bookmark enriched with its effective date and summary outcome.

    Attributes:
        title: The bookmark title
        url: The article URL
        effective_date: Extracted publish date, else the bookmark creation date
        summary: Outcome of the summarize stage (or a failure variant)
    """

    title: str
    url: str
    effective_date: datetime | None
    summary: SummaryOutcome

    @property
    def first_point(self) -> str:
        if self.summary.ok and self.summary.points:
            return self.summary.points[0]
        return ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "effective_date": self.effective_date.isoformat() if self.effective_date else None,
            "summary": self.summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Story":
        raw_date = data.get("effective_date")
        return cls(
            title=data["title"],
            url=data["url"],
            effective_date=datetime.fromisoformat(raw_date) if raw_date else None,
            summary=SummaryOutcome.from_dict(data.get("summary") or {}),
        )


@dataclass
class Topic:
    """A named group of stories."""

    title: str
    stories: list[Story] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "stories": [s.to_dict() for s in self.stories]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Topic":
        return cls(
            title=data["title"],
            stories=[Story.from_dict(item) for item in data.get("stories") or []],
        )


@dataclass
class BriefingData:
    """Complete briefing ready for rendering or persistence.

    Attributes:
        show: Name of the show the briefing is prepared for
        topics: Clustered topics
        version: Format version of the serialized briefing
        created_at: When the briefing was produced
    """

    show: str
    topics: list[Topic]
    version: str = BRIEFING_VERSION
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def story_count(self) -> int:
        return sum(len(topic.stories) for topic in self.topics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "show": self.show,
            "topics": [t.to_dict() for t in self.topics],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BriefingData":
        return cls(
            show=data.get("show", ""),
            topics=[Topic.from_dict(item) for item in data.get("topics") or []],
            version=str(data.get("version", "")),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
