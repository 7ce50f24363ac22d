"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .pool import PoolConfig
from .repository import RepositoryConfig, get_repository_config

__all__ = [
    "ConfigurationError",
    "MissingConfigurationError",
    "PoolConfig",
    "RepositoryConfig",
    "get_repository_config",
    "require_env_vars",
]
