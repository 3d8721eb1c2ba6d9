"""Password grant against the CentraXX token endpoint."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from termsync.adapters.http_resilience import default_client_factory, http_request_resilient
from termsync.config.sources import mdr_resilience
from termsync.domain.errors import AuthenticationError
from termsync.domain.ports.authentication import AuthenticationDriver, utcnow

from .basic import BasicCredential
from .tokens import BearerCredential, parse_token_response

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from termsync.adapters.http_resilience import ClientFactory
    from termsync.config.authentication import CentraxxAuthConfiguration
    from termsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

TOKEN_PATH = "oauth/token"
TOKEN_SCOPE = "anyscope"


class CentraxxAuthenticationDriver(AuthenticationDriver[BearerCredential]):
    def __init__(
        self,
        config: CentraxxAuthConfiguration,
        *,
        clock: Callable[[], datetime] = utcnow,
        resilience: ResilienceConfig | None = None,
        client_factory: ClientFactory = default_client_factory,
    ) -> None:
        super().__init__(clock=clock)
        self.config = config
        self.resilience = resilience or mdr_resilience("centraxx-auth")
        self.client_factory = client_factory

    def login(self) -> BearerCredential:
        client = self.config.client_basic_auth
        url = self.config.build_auth_url(TOKEN_PATH)
        log.info(f"Requesting CentraXX token for user {self.config.user_name}")
        try:
            response = asyncio.run(
                http_request_resilient(
                    self.resilience,
                    "POST",
                    url,
                    client_factory=self.client_factory,
                    headers={
                        "Authorization": BasicCredential(
                            username=client.username, password=client.password
                        ).authorization_header,
                        "Accept": "application/json",
                    },
                    data={
                        "grant_type": "password",
                        "scope": TOKEN_SCOPE,
                        "username": self.config.user_name,
                        "password": self.config.password,
                    },
                )
            )
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"CentraXX token request failed: {exc}") from exc
        token = parse_token_response(response)
        return BearerCredential.from_token_response(token, issued_at=self._clock())
