"""Saving and loading briefing JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..core.types import BRIEFING_VERSION, BriefingData

logger = logging.getLogger(__name__)


def save_briefing(data: BriefingData, path: Path) -> Path:
    """Write a briefing as pretty-printed JSON, creating parent folders."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def load_briefing(path: Path) -> BriefingData:
    """Load and validate a briefing JSON file.

    Raises:
        FileNotFoundError: The file does not exist
        ValueError: The file is not valid briefing JSON, has an unsupported
            version, or contains no topics
    """
    if not path.exists():
        raise FileNotFoundError(f"Story file not found: {path}")

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        data = BriefingData.from_dict(raw)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ValueError(
            f"Failed to parse story JSON from {path}. "
            "The file may be corrupted or not a valid story file."
        ) from exc

    if data.version != BRIEFING_VERSION:
        raise ValueError(
            f"Unsupported story file version: {data.version}. Expected {BRIEFING_VERSION}. "
            "Please regenerate the story file."
        )
    if not data.topics:
        raise ValueError(f"Story file {path} contains no topics. The file may be incomplete.")
    return data


def list_briefings(directory: Path) -> list[tuple[Path, BriefingData]]:
    """Load every valid briefing in a directory, newest first.

    Unreadable files are skipped with a warning.
    """
    found: list[tuple[Path, BriefingData]] = []
    if not directory.exists():
        return found
    for path in sorted(directory.glob("*.json")):
        try:
            found.append((path, load_briefing(path)))
        except (OSError, ValueError) as exc:
            logger.warning("Could not load %s: %s", path, exc)
    found.sort(key=lambda item: item[1].created_at, reverse=True)
    return found
