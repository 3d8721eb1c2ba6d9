"""Shared transport for MDR backends reached over HTTP."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx

from termsync.adapters.http_resilience import (
    ClientFactory,
    default_client_factory,
    http_request_resilient,
)
from termsync.config.sources import mdr_resilience
from termsync.domain.errors import SynchronizationError
from termsync.domain.ports.synchronization import MdrSynchronization

if TYPE_CHECKING:
    from termsync.config.http_resilience import ResilienceConfig
    from termsync.config.mdr import MdrConfiguration
    from termsync.domain.ports.authentication import AuthenticationDriver, Credential

log = getLogger(__name__)

UNAUTHORIZED_STATUSES = frozenset({httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN})


class HttpMdrSynchronization(MdrSynchronization):
    """Base for drivers that send authenticated requests to an MDR API."""

    def __init__(
        self,
        config: MdrConfiguration,
        authentication: AuthenticationDriver[Credential],
        *,
        resilience: ResilienceConfig | None = None,
        client_factory: ClientFactory = default_client_factory,
    ) -> None:
        self.config = config
        self.authentication = authentication
        self.resilience = resilience or mdr_resilience(type(self).__name__)
        self.client_factory = client_factory

    def _request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> httpx.Response:
        # resolved before entering the event loop, login may run its own
        request_headers = {**self.authentication.authorization_headers(), **(headers or {})}
        url = self.config.build_api_url(path) if path else self.config.api_endpoint
        log.debug(f"{method} {url}")
        try:
            return asyncio.run(
                http_request_resilient(
                    self.resilience,
                    method,
                    url,
                    client_factory=self.client_factory,
                    headers=request_headers,
                    **kwargs,
                )
            )
        except httpx.HTTPError as exc:
            raise SynchronizationError(f"{method} {url} failed: {exc}") from exc


def raise_for_lookup_failure(response: httpx.Response) -> None:
    """Lookups that fail for reasons other than absence must not look like absence."""

    if response.status_code in UNAUTHORIZED_STATUSES or response.is_server_error:
        raise SynchronizationError(
            f"lookup {response.request.url} failed with HTTP {response.status_code}"
        )
