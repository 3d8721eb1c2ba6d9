"""Credentials that never expire: anonymous access and HTTP basic auth."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import TYPE_CHECKING

from termsync.domain.ports.authentication import AuthenticationDriver, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from termsync.config.authentication import BasicAuthConfiguration


@dataclass(slots=True, frozen=True)
class AnonymousCredential:
    @property
    def authorization_header(self) -> str | None:
        return None

    def is_expired(self, now: datetime) -> bool:  # noqa: ARG002
        return False


@dataclass(slots=True, frozen=True)
class BasicCredential:
    username: str
    password: str

    @property
    def authorization_header(self) -> str:
        token = base64.b64encode(f"{self.username}:{self.password}".encode()).decode("ascii")
        return f"Basic {token}"

    def is_expired(self, now: datetime) -> bool:  # noqa: ARG002
        return False


class NoOpAuthenticationDriver(AuthenticationDriver[AnonymousCredential]):
    def login(self) -> AnonymousCredential:
        return AnonymousCredential()


class BasicAuthenticationDriver(AuthenticationDriver[BasicCredential]):
    def __init__(
        self,
        config: BasicAuthConfiguration,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(clock=clock)
        self.config = config

    def login(self) -> BasicCredential:
        return BasicCredential(username=self.config.username, password=self.config.password)
