"""Errors raised while reading midata settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A MIDATA_* setting is present but unusable."""


class MissingConfigurationError(ConfigurationError):
    """A required MIDATA_* setting is absent or blank."""
