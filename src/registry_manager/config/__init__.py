"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .github import GitHubConfig, get_github_config, github_resilience
from .http_resilience import RateLimit, ResilienceConfig
from .logging import configure_logging
from .publish import PublishConfig, default_commit_message, get_publish_config

__all__ = [
    "ConfigurationError",
    "GitHubConfig",
    "MissingConfigurationError",
    "PublishConfig",
    "RateLimit",
    "ResilienceConfig",
    "configure_logging",
    "default_commit_message",
    "get_github_config",
    "get_publish_config",
    "github_resilience",
    "optional_env_var",
    "require_env_vars",
]
