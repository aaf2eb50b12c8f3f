"""Application configuration helpers."""

from __future__ import annotations

from .authorization import AuthorizationConfig, get_authorization_config
from .entitlements import EntitlementConfig, get_entitlement_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .linkage import LinkageConfig, get_linkage_config
from .logging import LOG_SOURCE, configure_logging, source_extra
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "LOG_SOURCE",
    "AuthorizationConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "EntitlementConfig",
    "LinkageConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_authorization_config",
    "get_database_config",
    "get_entitlement_config",
    "get_linkage_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
    "source_extra",
]
