"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .registry import RegistryConfig, get_registry_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, get_sync_config, validate_cron_expression

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "RegistryConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "env_float",
    "env_int",
    "get_database_config",
    "get_registry_config",
    "get_storage_config",
    "get_sync_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
    "validate_cron_expression",
]
