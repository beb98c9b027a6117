"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http import HttpConfig
from .midata import (
    DEFAULT_BATCH_WIDTH,
    DEFAULT_CACHE_SIZE,
    DEFAULT_MIDATA_BASE_URL,
    MiDataConfig,
    get_midata_config,
)

__all__ = [
    "DEFAULT_BATCH_WIDTH",
    "DEFAULT_CACHE_SIZE",
    "DEFAULT_MIDATA_BASE_URL",
    "ConfigurationError",
    "HttpConfig",
    "MiDataConfig",
    "MissingConfigurationError",
    "env_float",
    "env_int",
    "get_midata_config",
    "optional_env_var",
    "require_env_vars",
]
