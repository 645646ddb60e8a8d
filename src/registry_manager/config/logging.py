"""Logging set-up for the command line entry point."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import ConfigurationError


def configure_logging(*, level: int | str | None = None, force: bool = False) -> None:
    """Set up root logging for a publish run.

    ``level`` falls back to ``$LOG_LEVEL`` and then INFO. The httpx logger
    never goes below WARNING.
    """

    if level is None:
        level = optional_env_var("LOG_LEVEL", "INFO")
    resolved = resolve_log_level(level)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    logging.getLogger("httpx").setLevel(max(resolved, logging.WARNING))


def resolve_log_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelNamesMapping().get(level.strip().upper())
    if resolved is None:
        raise ConfigurationError(f"Unknown log level: {level}")
    return resolved
