"""GitHub API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_TIMEOUT_SECONDS = 30.0
USER_AGENT = "registry-manager"

TOKEN_PREFIX = "github_pat_"
TOKEN_LENGTH = 93


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """Holds the GitHub token and the HTTP client settings derived from it."""

    token: str
    resilience: ResilienceConfig


def validate_token(token: str) -> str:
    if not token.startswith(TOKEN_PREFIX) or len(token) != TOKEN_LENGTH:
        raise ConfigurationError(
            "The provided personal access token is invalid, "
            f"expected a fine-grained token ({TOKEN_PREFIX}..., {TOKEN_LENGTH} characters)"
        )
    return token


def github_resilience(token: str, *, base_url: str = GITHUB_API_URL) -> ResilienceConfig:
    return ResilienceConfig(
        name="github",
        base_url=base_url,
        timeout_seconds=GITHUB_TIMEOUT_SECONDS,
        # Content-creating requests are paced to stay clear of secondary rate limits.
        write_ratelimit=RateLimit(max_calls=1, per_seconds=0.25),
        default_headers={
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "Authorization": f"Bearer {token}",
        },
    )


def get_github_config(*, resilience: ResilienceConfig | None = None) -> GitHubConfig:
    token = validate_token(require_env_vars(("PAT",))["PAT"])
    return GitHubConfig(token=token, resilience=resilience or github_resilience(token))
