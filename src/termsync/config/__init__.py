"""Application configuration helpers."""

from __future__ import annotations

from .authentication import (
    AuthenticationConfiguration,
    BasicAuthConfiguration,
    CentraxxAuthConfiguration,
    NoOpAuthenticationConfiguration,
    OAuthConfiguration,
)
from .env import require_env_vars, resolve_settings
from .errors import ConfigurationError, MissingConfigurationError, MissingEndpointError
from .http_resilience import RateLimit, ResilienceConfig, join_url
from .logging import configure_logging
from .mdr import (
    DEFAULT_CATALOG_TYPE,
    CentraxxConfiguration,
    MdrConfiguration,
    Ql4MdrConfiguration,
    get_centraxx_config,
    get_ql4mdr_config,
)
from .sources import (
    DEFAULT_PACKAGE_REGISTRY_URL,
    DEFAULT_SNOMED_CT_EDITION,
    SNOMED_CT_SYSTEM,
)

__all__ = [
    "DEFAULT_CATALOG_TYPE",
    "DEFAULT_PACKAGE_REGISTRY_URL",
    "DEFAULT_SNOMED_CT_EDITION",
    "SNOMED_CT_SYSTEM",
    "AuthenticationConfiguration",
    "BasicAuthConfiguration",
    "CentraxxAuthConfiguration",
    "CentraxxConfiguration",
    "ConfigurationError",
    "MdrConfiguration",
    "MissingConfigurationError",
    "MissingEndpointError",
    "NoOpAuthenticationConfiguration",
    "OAuthConfiguration",
    "Ql4MdrConfiguration",
    "RateLimit",
    "ResilienceConfig",
    "configure_logging",
    "get_centraxx_config",
    "get_ql4mdr_config",
    "join_url",
    "require_env_vars",
    "resolve_settings",
]
