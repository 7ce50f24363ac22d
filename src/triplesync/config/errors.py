"""Failures raised while loading triple store settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when the triple store configuration is invalid."""


class MissingConfigurationError(ConfigurationError):
    """A required ``TRIPLESYNC_*`` variable is unset or blank."""
