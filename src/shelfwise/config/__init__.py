"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, optional_env
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .lookup import LookupConfig, get_lookup_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "LookupConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_lookup_config",
    "get_storage_config",
    "env_float",
    "env_int",
    "optional_env",
]
