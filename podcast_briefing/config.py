"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ProviderConfig: LLM provider settings
- FetchConfig: HTTP fetching, concurrency and retry settings
- ExtractConfig: Content extraction settings
- SummaryConfig: LLM summarization concurrency and retry settings
- ClusterConfig: Topic clustering settings
- OutputConfig: Output document settings
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- RaindropConfig: Raindrop.io bookmark source settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml


@dataclass
class ProviderConfig:
    """Configuration for the LLM provider.

    Attributes:
        name: Provider name ("anthropic" or "gemini")
        model: Model identifier
        api_key_env: Environment variable name containing the API key
        base_url: Base URL for the provider API
        api_key: Optional inline API key (overrides env var)
        trust_env: Whether to respect system proxy settings for API requests
        timeout_seconds: Timeout applied to every summarize/cluster request
    """

    name: str = "anthropic"
    model: str = "claude-3-5-haiku-20241022"
    api_key_env: str = "ANTHROPIC_API_KEY"
    base_url: str = "https://api.anthropic.com"
    api_key: str | None = None
    trust_env: bool = True
    timeout_seconds: float = 60.0


@dataclass
class FetchConfig:
    """Configuration for article fetching.

    Attributes:
        concurrency: Maximum number of fetches in flight
        max_attempts: Attempts per URL before the outcome becomes failed
        backoff_base_seconds: Base delay for exponential backoff between attempts
        timeout_seconds: HTTP request timeout
        min_text_chars: Shortest extracted text accepted as a real article
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
        cookie_file: Optional Netscape cookies.txt, Firefox cookies.sqlite or Chrome Cookies path
        use_browser_cookies: Whether to look for browser cookies at all
    """

    concurrency: int = 10
    max_attempts: int = 3
    backoff_base_seconds: float = 0.5
    timeout_seconds: float = 30.0
    min_text_chars: int = 100
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (X11; Linux x86_64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    )
    cookie_file: str | None = None
    use_browser_cookies: bool = True


@dataclass
class ExtractConfig:
    """Configuration for HTML content extraction.

    Attributes:
        primary: Primary extraction method ("trafilatura", "readability", or "bs4")
        fallback: List of fallback methods to try if primary fails
    """

    primary: str = "trafilatura"
    fallback: list[str] = field(default_factory=lambda: ["readability", "bs4"])


@dataclass
class SummaryConfig:
    """Configuration for LLM summarization.

    Attributes:
        concurrency: Worker pool size; kept low because the provider enforces
            a token-rate budget shared by all calls
        max_attempts: Attempts per article before the outcome becomes failed
        backoff_base_seconds: Base delay for exponential backoff on ordinary errors
        rate_limit_backoff_seconds: Delay unit for rate-limit errors, scaled by attempt
        settle_delay_seconds: Pause after each successful call before freeing the worker
        max_input_bytes: Article text budget sent to the model (UTF-8 bytes)
        bullet_count: Exact number of bullets a summary must contain
        max_output_tokens: Token limit for the summary response
    """

    concurrency: int = 2
    max_attempts: int = 5
    backoff_base_seconds: float = 1.0
    rate_limit_backoff_seconds: float = 15.0
    settle_delay_seconds: float = 0.5
    max_input_bytes: int = 10000
    bullet_count: int = 5
    max_output_tokens: int = 512


@dataclass
class ClusterConfig:
    """Configuration for topic clustering.

    Attributes:
        max_output_tokens: Token limit for the clustering response
        single_topic_title: Title used when there is only one story
        fallback_topic_title: Title of the synthetic topic used on failure
        leftover_topic_title: Title for stories the model did not assign
    """

    max_output_tokens: int = 2048
    single_topic_title: str = "News"
    fallback_topic_title: str = "News Stories"
    leftover_topic_title: str = "Other News"


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        show_name: Show the briefing is prepared for
        html: Whether to render the HTML briefing
        links_csv: Whether to render the links CSV
        org: Whether to render the org-mode outline
        extra_org_sections: Empty sections appended to the org outline
    """

    show_name: str = "This Week in Tech"
    html: bool = True
    links_csv: bool = True
    org: bool = True
    extra_org_sections: list[str] = field(
        default_factory=lambda: ["In Other News", "Picks", "In Memoriam"]
    )


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = False
    llm_log_redaction: str = "redact_urls"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    redaction: str = "redact_urls"
    max_text_chars: int = 20000


@dataclass
class RaindropConfig:
    """Configuration for the Raindrop.io bookmark source.

    Attributes:
        api_token_env: Environment variable name containing the API token
        api_token: Optional inline API token (overrides env var)
        base_url: Raindrop REST API base URL
        per_page: Bookmarks requested per page
        page_delay_seconds: Pause between page requests
        timeout_seconds: HTTP request timeout
        days: How many days back to collect bookmarks
    """

    api_token_env: str = "RAINDROP_API_TOKEN"
    api_token: str | None = None
    base_url: str = "https://api.raindrop.io/rest/v1"
    per_page: int = 50
    page_delay_seconds: float = 0.5
    timeout_seconds: float = 30.0
    days: int = 7


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)
    raindrop: RaindropConfig = field(default_factory=RaindropConfig)


_SECTIONS: dict[str, type] = {
    "provider": ProviderConfig,
    "fetch": FetchConfig,
    "extract": ExtractConfig,
    "summary": SummaryConfig,
    "cluster": ClusterConfig,
    "output": OutputConfig,
    "logging": LoggingConfig,
    "langfuse": LangfuseConfig,
    "raindrop": RaindropConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if not isinstance(value, dict):
            raise ValueError(f"Config section '{key}' must be a mapping")
        known = {k: v for k, v in value.items() if k in data[key]}
        data[key].update(known)
    return AppConfig(**{name: cls(**data[name]) for name, cls in _SECTIONS.items()})


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)


def get_raindrop_token(cfg: RaindropConfig) -> str | None:
    """Get the Raindrop API token from inline config or environment variable."""
    if cfg.api_token:
        return cfg.api_token
    return os.getenv(cfg.api_token_env)
