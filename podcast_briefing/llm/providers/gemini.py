"""Google Gemini provider."""

from __future__ import annotations

from typing import Any

from .base import HTTPProvider


class GeminiProvider(HTTPProvider):
    provider_name = "gemini"

    def _build_request(
        self, prompt: str, max_tokens: int
    ) -> tuple[str, dict[str, str], dict[str, str], dict[str, Any]]:
        url = f"{self.cfg.base_url.rstrip('/')}/v1beta/models/{self.cfg.model}:generateContent"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": 0.2,
                "maxOutputTokens": max_tokens,
            },
        }
        return url, {}, {"key": self.api_key}, payload

    def _extract_text(self, data: dict[str, Any]) -> str:
        return _extract_text(data)


def _extract_text(data: dict[str, Any]) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""

    if not isinstance(parts, list):
        return ""

    non_thought_chunks: list[str] = []
    all_chunks: list[str] = []
    for part in parts:
        if not isinstance(part, dict):
            continue
        text = part.get("text")
        if not text:
            continue
        chunk = str(text)
        all_chunks.append(chunk)
        if not bool(part.get("thought")):
            non_thought_chunks.append(chunk)

    if non_thought_chunks:
        return "".join(non_thought_chunks)
    return "".join(all_chunks)
