"""
AI topic clustering with a deterministic fallback.

One provider call partitions the stories into named topics. The reply is
untrusted: indices are bound-checked and deduplicated, empty topics are
dropped, and any failure collapses to a single topic holding every story
in input order. Clustering never raises to its caller.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ..config import ClusterConfig
from ..core.types import Story, Topic
from ..llm.prompts import build_cluster_prompt
from ..llm.providers.base import CompletionProvider, ProviderError
from ..utils.logging import log_event


class TopicClusterer:
    """Groups stories into topics using a single LLM call.

    Args:
        provider: LLM backend
        cfg: Clustering settings (token limit, synthetic topic titles)
        logger: Logger for clustering events
    """

    def __init__(
        self,
        provider: CompletionProvider,
        cfg: ClusterConfig | None = None,
        logger: logging.Logger | None = None,
    ):
        self.provider = provider
        self.cfg = cfg or ClusterConfig()
        self.logger = logger or logging.getLogger("podcast_briefing")

    def cluster(self, stories: list[Story]) -> list[Topic]:
        """Partition stories into topics.

        Every story appears in exactly one returned topic. No retry is made;
        a failed call falls back immediately.
        """
        if not stories:
            return []
        if len(stories) == 1:
            return [Topic(title=self.cfg.single_topic_title, stories=list(stories))]

        try:
            response = self.provider.complete(
                build_cluster_prompt(stories),
                self.cfg.max_output_tokens,
                purpose="cluster",
            )
            topics = self.assign_topics(response, stories)
        except (ProviderError, ValueError) as exc:
            log_event(
                self.logger,
                "Clustering failed, using single-topic fallback",
                level=logging.WARNING,
                event="cluster_fallback",
                error=str(exc),
                stories=len(stories),
            )
            return self.fallback(stories)

        log_event(self.logger, "Clustering done", event="cluster_done", topics=len(topics))
        return topics

    def fallback(self, stories: list[Story]) -> list[Topic]:
        return [Topic(title=self.cfg.fallback_topic_title, stories=list(stories))]

    def assign_topics(self, response: str, stories: list[Story]) -> list[Topic]:
        """Build topics from a clustering reply.

        Raises:
            ValueError: The reply holds no usable JSON or yields no topics
        """
        clusters = parse_clusters(response)
        used: set[int] = set()
        topics: list[Topic] = []

        for title, indices in clusters:
            members: list[int] = []
            for idx in indices:
                # bool is an int subclass; reject it along with floats and strings
                if not isinstance(idx, int) or isinstance(idx, bool):
                    continue
                if idx < 0 or idx >= len(stories) or idx in used:
                    continue
                used.add(idx)
                members.append(idx)
            if not members:
                continue
            members.sort()
            topics.append(Topic(title=title, stories=[stories[i] for i in members]))

        if not topics:
            raise ValueError("No topics generated from clustering")

        leftovers = [story for idx, story in enumerate(stories) if idx not in used]
        if leftovers:
            log_event(
                self.logger,
                "Clustering left stories unassigned",
                level=logging.DEBUG,
                event="cluster_leftovers",
                count=len(leftovers),
            )
            topics.append(Topic(title=self.cfg.leftover_topic_title, stories=leftovers))
        return topics


def extract_json_object(text: str) -> str:
    """Return the span from the first ``{`` to the last ``}``.

    Raises:
        ValueError: No such span exists
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise ValueError("No JSON object found in clustering response")
    return text[start : end + 1]


def parse_clusters(text: str) -> list[tuple[str, list[Any]]]:
    """Read (title, indices) pairs from a clustering reply.

    Accepts ``{"topics": [{"title": ..., "article_indices": [...]}]}`` as
    requested in the prompt, and also a flat ``{"Title": [indices]}`` map.

    Raises:
        ValueError: Invalid JSON or an unrecognized shape
    """
    try:
        obj = json.loads(extract_json_object(text or ""))
    except RecursionError as exc:
        raise ValueError("Clustering response is nested too deeply") from exc
    if not isinstance(obj, dict):
        raise ValueError("Clustering response is not a JSON object")

    clusters: list[tuple[str, list[Any]]] = []
    if "topics" in obj:
        items = obj["topics"]
        if not isinstance(items, list):
            raise ValueError("'topics' must be a list")
        for item in items:
            if not isinstance(item, dict):
                continue
            title = str(item.get("title") or "").strip()
            indices = item.get("article_indices", item.get("indices"))
            if title and isinstance(indices, list):
                clusters.append((title, indices))
        return clusters

    for title, indices in obj.items():
        if isinstance(indices, list) and str(title).strip():
            clusters.append((str(title).strip(), indices))
    return clusters
