"""Settings for the paced, non-retrying HTTP client used against the GitHub API."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class RateLimit:
    """At most ``max_calls`` requests in any window of ``per_seconds``."""

    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    """One timeout ceiling per request and optional pacing; failures are never retried.

    ``write_ratelimit`` applies only to mutating methods, on top of ``ratelimit``.
    """

    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    ratelimit: RateLimit | None = None
    write_ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
