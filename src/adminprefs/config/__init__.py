"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .identity import IdentityConfig, default_identity_resilience, get_identity_config
from .logging import configure_logging
from .mail import MailConfig, SiteConfig, SmtpConfig, get_mail_config, get_site_config
from .saga import SagaConfig, get_saga_config
from .storage import (
    DatabaseConfig,
    ObjectStorageConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_object_storage_config,
    get_storage_config,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "IdentityConfig",
    "MailConfig",
    "MissingConfigurationError",
    "ObjectStorageConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SagaConfig",
    "SiteConfig",
    "SmtpConfig",
    "StorageConfig",
    "configure_logging",
    "default_identity_resilience",
    "env_flag",
    "get_database_config",
    "get_database_uri",
    "get_identity_config",
    "get_mail_config",
    "get_object_storage_config",
    "get_saga_config",
    "get_site_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
