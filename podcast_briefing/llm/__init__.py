"""LLM providers, prompts and observability."""

from .providers import (
    AnthropicProvider,
    CompletionProvider,
    GeminiProvider,
    ProviderError,
    RateLimitError,
    available_providers,
    create_provider,
)
from .tracing import flush, llm_span, record_span_error, set_span_output, setup_langfuse, stage_span

__all__ = [
    "AnthropicProvider",
    "CompletionProvider",
    "GeminiProvider",
    "ProviderError",
    "RateLimitError",
    "available_providers",
    "create_provider",
    "setup_langfuse",
    "flush",
    "stage_span",
    "llm_span",
    "set_span_output",
    "record_span_error",
]
