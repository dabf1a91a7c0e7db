"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .remote import RemoteConfig, get_remote_config

__all__ = [
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "RemoteConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "get_remote_config",
    "require_env_vars",
]
