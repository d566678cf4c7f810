"""
Run logging.

The ``podcast_briefing`` logger writes to the Rich console and to a per-run
file in the briefing's output folder. Pipeline code logs through
``log_event`` so every record carries an ``event`` name plus fields such as
``url`` or ``attempt``, which the JSONL file keeps as top-level keys.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
import re
from typing import Any

from rich.logging import RichHandler

from ..config import LoggingConfig

LOGGER_NAME = "podcast_briefing"

_URL_RE = re.compile(r"https?://\S+")

# Attributes every LogRecord has; anything else came in through ``extra``.
_RESERVED = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


def setup_logging(cfg: LoggingConfig, run_output_dir: Path | None) -> logging.Logger:
    level = _level(cfg.level)
    logger = _reset(logging.getLogger(LOGGER_NAME), level)

    if cfg.console:
        console_handler = RichHandler(rich_tracebacks=True, show_time=False)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console_handler)

    if cfg.file and run_output_dir is not None:
        formatter = JsonlFormatter() if cfg.format == "jsonl" else logging.Formatter(
            "%(asctime)s %(levelname)s %(message)s"
        )
        logger.addHandler(_file_handler(run_output_dir / cfg.filename, level, formatter))

    return logger


def setup_llm_logger(cfg: LoggingConfig, run_output_dir: Path | None) -> logging.Logger | None:
    """Separate JSONL log of raw model replies, off unless enabled."""
    if not cfg.llm_log_enabled or run_output_dir is None:
        return None
    level = _level(cfg.level)
    logger = _reset(logging.getLogger(f"{LOGGER_NAME}.llm"), level)
    logger.addHandler(_file_handler(run_output_dir / cfg.llm_log_file, level, JsonlFormatter()))
    return logger


def log_event(logger: logging.Logger | None, message: str, level: int = logging.INFO, **fields: Any) -> None:
    if logger is not None:
        logger.log(level, message, extra=fields)


def redact_text(text: str, mode: str) -> str:
    if mode == "redact_content":
        return ""
    if mode == "redact_urls":
        return _URL_RE.sub("[REDACTED_URL]", text)
    return text


def truncate_text(text: str, max_chars: int = 20000) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "...(truncated)"


class JsonlFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update((k, v) for k, v in record.__dict__.items() if k not in _RESERVED)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def _reset(logger: logging.Logger, level: int) -> logging.Logger:
    # setup may run more than once per process (tests, repeated CLI calls)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []
    logger.setLevel(level)
    logger.propagate = False
    return logger


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)
