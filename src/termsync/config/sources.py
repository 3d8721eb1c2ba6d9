"""Defaults for terminology sources."""

from __future__ import annotations

from .http_resilience import RateLimit, ResilienceConfig

DEFAULT_PACKAGE_REGISTRY_URL = "https://packages.simplifier.net"
DEFAULT_SNOMED_CT_EDITION = "900000000000207008"
SNOMED_CT_SYSTEM = "http://snomed.info/sct"


def terminology_server_resilience(name: str = "terminology-server") -> ResilienceConfig:
    return ResilienceConfig(
        name=name,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        default_headers={"Accept": "application/json"},
    )


def package_registry_resilience() -> ResilienceConfig:
    return ResilienceConfig(name="package-registry")


def mdr_resilience(name: str) -> ResilienceConfig:
    return ResilienceConfig(name=name)
