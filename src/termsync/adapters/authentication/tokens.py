"""Bearer tokens issued by OAuth token endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from termsync.domain.errors import AuthenticationError

if TYPE_CHECKING:
    from typing import Self


class TokenResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    expires_in: int
    token_type: str = "bearer"
    scope: str | None = None
    refresh_token: str | None = None


@dataclass(slots=True, frozen=True)
class BearerCredential:
    """Token valid for ``lifetime`` after ``issued_at``."""

    access_token: str
    token_type: str
    issued_at: datetime
    lifetime: timedelta
    refresh_token: str | None = None

    @property
    def authorization_header(self) -> str:
        return f"{self.token_type} {self.access_token}"

    @property
    def expires_at(self) -> datetime:
        return self.issued_at + self.lifetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    @classmethod
    def from_token_response(cls, token: TokenResponse, *, issued_at: datetime) -> Self:
        return cls(
            access_token=token.access_token,
            token_type=token.token_type,
            issued_at=issued_at,
            lifetime=timedelta(seconds=token.expires_in),
            refresh_token=token.refresh_token,
        )


def parse_token_response(response: httpx.Response) -> TokenResponse:
    if response.status_code != httpx.codes.OK:
        raise AuthenticationError(
            f"token endpoint answered HTTP {response.status_code}: {response.text}"
        )
    try:
        return TokenResponse.model_validate_json(response.content)
    except ValidationError as exc:
        raise AuthenticationError(f"unexpected token response: {exc}") from exc
