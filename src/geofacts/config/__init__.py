"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_int, optional_env_var
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .sources import SourcesConfig, SourceUrls, get_sources_config
from .storage import StorageConfig, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SourceUrls",
    "SourcesConfig",
    "StorageConfig",
    "configure_logging",
    "get_sources_config",
    "get_storage_config",
    "optional_env_int",
    "optional_env_var",
]
