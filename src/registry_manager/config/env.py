"""Environment variable access for the publish settings."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable


def _read(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


def require_env_vars(names: Iterable[str]) -> dict[str, str]:
    """Return stripped values for ``names``; report every missing one at once."""

    values = {name: _read(name) for name in names}
    missing = sorted(name for name, value in values.items() if value is None)
    if missing:
        raise MissingConfigurationError(f"Missing configuration for: {', '.join(missing)}")
    return {name: value for name, value in values.items() if value is not None}


def optional_env_var(name: str, default: str) -> str:
    return _read(name) or default
