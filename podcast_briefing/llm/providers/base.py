"""
Abstract base class for LLM providers.

Providers expose a single text-completion call. Summarization and
clustering build their own prompts and interpret the raw text; providers
only translate HTTP failures into ProviderError / RateLimitError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import Any

import httpx

from ...config import ProviderConfig
from ...core.retry import is_rate_limit_signal
from ...utils.logging import log_event, redact_text, truncate_text
from ..tracing import llm_span, record_span_error, set_span_output


class ProviderError(Exception):
    """The provider call failed (network, timeout, HTTP error, bad payload)."""


class RateLimitError(ProviderError):
    """The provider rejected the call because of its rate budget."""


class CompletionProvider(ABC):
    """Interface shared by all LLM backends."""

    @abstractmethod
    def complete(self, prompt: str, max_tokens: int, purpose: str = "completion") -> str:
        """Send a single-turn prompt and return the response text.

        Args:
            prompt: The full user prompt
            max_tokens: Upper bound for the response length
            purpose: Short label used for logging and tracing

        Raises:
            RateLimitError: The provider signalled a rate limit
            ProviderError: Any other failure
        """
        raise NotImplementedError


class HTTPProvider(CompletionProvider):
    """Shared plumbing for providers reached over a JSON HTTP API.

    Subclasses describe the request (`_build_request`) and how to read the
    text out of the response body (`_extract_text`); this class handles the
    timeout, status mapping, tracing and the optional LLM log.
    """

    provider_name = "http"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        llm_logger: logging.Logger | None = None,
        redaction: str = "redact_urls",
        transport: httpx.BaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError(f"Missing API key for provider '{cfg.name}' (set {cfg.api_key_env})")
        self.cfg = cfg
        self.api_key = api_key
        self.llm_logger = llm_logger
        self.redaction = redaction
        self.transport = transport

    def complete(self, prompt: str, max_tokens: int, purpose: str = "completion") -> str:
        url, headers, params, payload = self._build_request(prompt, max_tokens)
        with llm_span(self.provider_name, purpose, self.cfg.model, prompt) as span:
            try:
                data = self._post(url, headers, params, payload)
                content = self._extract_text(data)
            except ProviderError as exc:
                record_span_error(span, exc)
                self._log_llm_response(purpose, "error", str(exc))
                raise
            set_span_output(span, content)
            self._log_llm_response(purpose, "ok", content)
            return content

    def _post(
        self,
        url: str,
        headers: dict[str, str],
        params: dict[str, str],
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            with httpx.Client(
                timeout=self.cfg.timeout_seconds,
                trust_env=self.cfg.trust_env,
                transport=self.transport,
            ) as client:
                resp = client.post(url, headers=headers, params=params, json=payload)
        except httpx.HTTPError as exc:
            raise ProviderError(f"{type(exc).__name__}: {exc}") from exc

        if resp.status_code >= 400:
            body = resp.text
            message = f"{self.provider_name} API error ({resp.status_code}): {body[:500]}"
            if is_rate_limit_signal(resp.status_code, body):
                raise RateLimitError(message)
            raise ProviderError(message)

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError(f"Invalid JSON from {self.provider_name}: {exc}") from exc
        if not isinstance(data, dict):
            raise ProviderError(f"Unexpected {self.provider_name} response: expected a JSON object")
        return data

    @abstractmethod
    def _build_request(
        self, prompt: str, max_tokens: int
    ) -> tuple[str, dict[str, str], dict[str, str], dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def _extract_text(self, data: dict[str, Any]) -> str:
        raise NotImplementedError

    def _log_llm_response(self, purpose: str, status: str, content: str) -> None:
        log_event(
            self.llm_logger,
            "LLM response",
            event=f"llm_{purpose}",
            status=status,
            provider=self.provider_name,
            model=self.cfg.model,
            raw_response=truncate_text(redact_text(content, self.redaction)),
        )
