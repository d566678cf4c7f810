"""Provider factory and registry for hot-swappable LLM backends."""

from __future__ import annotations

import logging

from ...config import LoggingConfig, ProviderConfig, get_api_key
from .anthropic import AnthropicProvider
from .base import HTTPProvider
from .gemini import GeminiProvider


_PROVIDER_REGISTRY: dict[str, type[HTTPProvider]] = {
    "anthropic": AnthropicProvider,
    "claude": AnthropicProvider,
    "gemini": GeminiProvider,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(
    provider_cfg: ProviderConfig,
    log_cfg: LoggingConfig | None = None,
    llm_logger: logging.Logger | None = None,
) -> HTTPProvider:
    """Build a provider instance from runtime config."""
    name = provider_cfg.name.lower().strip()
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ValueError(f"Unsupported provider: {provider_cfg.name}. Supported: {supported}")
    redaction = log_cfg.llm_log_redaction if log_cfg else "redact_urls"
    return builder(provider_cfg, get_api_key(provider_cfg), llm_logger=llm_logger, redaction=redaction)
