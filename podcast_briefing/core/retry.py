"""
Failure classification and retry/backoff policy.

Classification is a pure function of the error signal and is kept apart
from the retry loops in the fetch and summarize stages, so the policy can
be exercised without any I/O.

Failure classes:
- structural: the source denied access (HTTP 403); never retried
- transient: network errors, timeouts, 4xx/5xx other than 403
- rate_limited: the AI provider rejected the call for rate reasons
- content: the response arrived but its content is unusable
"""

from __future__ import annotations

from dataclasses import dataclass

STRUCTURAL = "structural"
TRANSIENT = "transient"
RATE_LIMITED = "rate_limited"
CONTENT = "content"


def classify_http_status(status_code: int) -> str | None:
    """Classify an HTTP status for article fetching.

    Returns:
        None for 2xx/3xx, "structural" for 403, "transient" otherwise
    """
    if status_code < 400:
        return None
    if status_code == 403:
        return STRUCTURAL
    return TRANSIENT


def is_rate_limit_signal(status_code: int | None, body: str | None) -> bool:
    """Return True when a provider response indicates a rate limit."""
    if status_code == 429:
        return True
    return bool(body) and "rate_limit" in body.lower()


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt counter × failure class → delay before the next attempt.

    Attempts are numbered from 0. ``next_delay`` returns the number of
    seconds to wait before retrying, or None when the failure is terminal.

    Attributes:
        max_attempts: Total attempts allowed, including the first
        base_delay: Exponential backoff base; attempt n waits base * 2**n
        rate_limit_delay: When set, rate-limited failures wait
            rate_limit_delay * (attempt + 1) instead
    """

    max_attempts: int
    base_delay: float
    rate_limit_delay: float | None = None

    def next_delay(self, attempt: int, failure: str) -> float | None:
        if failure == STRUCTURAL:
            return None
        if attempt + 1 >= self.max_attempts:
            return None
        if failure == RATE_LIMITED and self.rate_limit_delay is not None:
            return self.rate_limit_delay * (attempt + 1)
        return self.base_delay * (2**attempt)
