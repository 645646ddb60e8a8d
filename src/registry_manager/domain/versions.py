"""Semantic version parsing for toolchain and extension versions.

Versions follow semver 2.0.0 ordering, so ``1.0.0-1 < 1.0.0`` and
``1.0.0-alpha < 1.0.0-alpha.1 < 1.0.0``. Two policies exist and callers pick
one explicitly:

* :func:`parse_version` is strict and raises :class:`DecodeError`.
* :func:`parse_version_or` falls back to a fixed baseline and reports whether it did.
"""

from __future__ import annotations

from typing import Final

from semver import Version

from .errors import DecodeError

REGISTRY_TYPES_BASELINE: Final[str] = "0.9.0"
UNVERSIONED: Final[str] = "0.0.0"


def _parse(value: str) -> Version:
    return Version.parse(value.strip())


def parse_version(value: str, *, label: str = "version") -> Version:
    try:
        return _parse(value)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Invalid {label} {value!r}") from exc


def parse_version_or(value: str, fallback: str) -> tuple[Version, bool]:
    """Return the parsed version and ``True`` when ``fallback`` had to be used."""

    try:
        return _parse(value), False
    except (TypeError, ValueError):
        return Version.parse(fallback), True
