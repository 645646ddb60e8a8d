"""Errors raised while assembling publish settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is present but unusable (bad token, branch or repository)."""


class MissingConfigurationError(ConfigurationError):
    """One or more required environment variables are unset or blank."""
