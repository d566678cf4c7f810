from .anthropic import AnthropicProvider
from .base import CompletionProvider, HTTPProvider, ProviderError, RateLimitError
from .factory import available_providers, create_provider
from .gemini import GeminiProvider

__all__ = [
    "AnthropicProvider",
    "CompletionProvider",
    "GeminiProvider",
    "HTTPProvider",
    "ProviderError",
    "RateLimitError",
    "available_providers",
    "create_provider",
]
