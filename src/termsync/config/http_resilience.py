"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_CONNECT_TIMEOUT_SECONDS = 20.0


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    """Transport settings shared by every networked component.

    ``timeout_seconds`` of ``None`` leaves read/write/pool timeouts unbounded;
    only connecting is bounded by ``connect_timeout_seconds``.
    """

    name: str
    base_url: str | None = None
    timeout_seconds: float | None = None
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    follow_redirects: bool = True
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None


def join_url(base: str, path: str) -> str:
    """Join ``base`` and ``path`` with exactly one slash between them."""

    return f"{base.rstrip('/')}/{path.lstrip('/')}"
