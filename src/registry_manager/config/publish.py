"""Publish run configuration values."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError

DEFAULT_REGISTRY_REPOSITORY = "paperback-community/extensions"
DEFAULT_REGISTRY_BRANCH = "master"
DEFAULT_PUBLISHING_BRANCH = "gh-pages"
DEFAULT_AUTHOR_NAME = "github-actions[bot]"
DEFAULT_AUTHOR_EMAIL = "github-actions[bot]@users.noreply.github.com"

_REPOSITORY_PATTERN = re.compile(r"^(?P<owner>[A-Za-z0-9_.-]+)/(?P<name>[A-Za-z0-9_.-]+)$")
_BRANCH_PATTERN = re.compile(r"^\d+\.\d+/(stable|testing)$")


@dataclass(frozen=True, slots=True)
class PublishConfig:
    repository: str
    branch: str
    registry_repository: str = DEFAULT_REGISTRY_REPOSITORY
    registry_branch: str = DEFAULT_REGISTRY_BRANCH
    publishing_branch: str = DEFAULT_PUBLISHING_BRANCH
    commit_message: str | None = None
    author_name: str = DEFAULT_AUTHOR_NAME
    author_email: str = DEFAULT_AUTHOR_EMAIL

    @property
    def effective_commit_message(self) -> str:
        return self.commit_message or default_commit_message(self.repository, self.branch)


def default_commit_message(repository: str, branch: str) -> str:
    return f"Update {branch} extensions from {repository}"


def validate_repository(repository: str, *, registry_repository: str) -> str:
    match = _REPOSITORY_PATTERN.match(repository)
    registry_match = _REPOSITORY_PATTERN.match(registry_repository)
    if registry_match is None:
        raise ConfigurationError(f"Invalid registry repository: {registry_repository}")
    owner = registry_match.group("owner")
    if match is None or match.group("owner") != owner:
        raise ConfigurationError(
            f"The provided repository {repository!r} is invalid, "
            f"it should be of the structure \"{owner}/<repository_name>\""
        )
    if repository == registry_repository:
        raise ConfigurationError("The source repository cannot be the registry itself")
    return repository


def validate_branch(branch: str) -> str:
    if not _BRANCH_PATTERN.match(branch):
        raise ConfigurationError(
            f"The provided branch {branch!r} is invalid, "
            "it should be of the structure \"<major>.<minor>/<stable|testing>\""
        )
    return branch


def get_publish_config(
    *,
    repository: str | None = None,
    branch: str | None = None,
    commit_message: str | None = None,
) -> PublishConfig:
    overrides = {"REPOSITORY": repository, "BRANCH": branch}
    required = [name for name, value in overrides.items() if not value]
    values = require_env_vars(required) if required else {}
    registry_repository = optional_env_var("REGISTRY_REPOSITORY", DEFAULT_REGISTRY_REPOSITORY)

    return PublishConfig(
        repository=validate_repository(
            repository or values["REPOSITORY"], registry_repository=registry_repository
        ),
        branch=validate_branch(branch or values["BRANCH"]),
        registry_repository=registry_repository,
        registry_branch=optional_env_var("REGISTRY_BRANCH", DEFAULT_REGISTRY_BRANCH),
        publishing_branch=optional_env_var("PUBLISHING_BRANCH", DEFAULT_PUBLISHING_BRANCH),
        commit_message=commit_message or optional_env_var("COMMIT_MESSAGE", "") or None,
        author_name=optional_env_var("COMMIT_AUTHOR_NAME", DEFAULT_AUTHOR_NAME),
        author_email=optional_env_var("COMMIT_AUTHOR_EMAIL", DEFAULT_AUTHOR_EMAIL),
    )
