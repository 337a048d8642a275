"""Application configuration helpers."""

from __future__ import annotations

from .dokploy import (
    API_KEY_HEADER,
    DeletePolicy,
    DokployConfig,
    MergePolicy,
    build_resilience,
    get_dokploy_config,
)
from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging

__all__ = [
    "API_KEY_HEADER",
    "ConfigurationError",
    "DeletePolicy",
    "DokployConfig",
    "MergePolicy",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "build_resilience",
    "configure_logging",
    "get_dokploy_config",
    "require_env_vars",
]
