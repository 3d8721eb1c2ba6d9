"""Authentication settings for MDR targets."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import MissingEndpointError
from .http_resilience import join_url


@dataclass(frozen=True, kw_only=True)
class AuthenticationConfiguration:
    auth_endpoint: str | None = None

    def build_auth_url(self, path: str) -> str:
        if self.auth_endpoint is None:
            raise MissingEndpointError(type(self).__name__, "authentication endpoint")
        return join_url(self.auth_endpoint, path)


@dataclass(frozen=True, kw_only=True)
class NoOpAuthenticationConfiguration(AuthenticationConfiguration):
    """Targets that accept anonymous requests."""


@dataclass(frozen=True, kw_only=True)
class BasicAuthConfiguration(AuthenticationConfiguration):
    username: str
    password: str


@dataclass(frozen=True, kw_only=True)
class CentraxxAuthConfiguration(AuthenticationConfiguration):
    """Password grant against the CentraXX token endpoint.

    The client credentials are sent as HTTP basic auth, the user credentials
    in the form body.
    """

    auth_endpoint: str
    user_name: str
    password: str
    client_id: str
    client_secret: str

    @property
    def client_basic_auth(self) -> BasicAuthConfiguration:
        return BasicAuthConfiguration(username=self.client_id, password=self.client_secret)


DEFAULT_OAUTH_CALLBACK_HOST = "127.0.0.1"
DEFAULT_OAUTH_CALLBACK_PORT = 8081
DEFAULT_OAUTH_CALLBACK_PATH = "/"


@dataclass(frozen=True, kw_only=True)
class OAuthConfiguration(AuthenticationConfiguration):
    auth_endpoint: str
    client_id: str
    client_secret: str
    callback_host: str = DEFAULT_OAUTH_CALLBACK_HOST
    callback_port: int = DEFAULT_OAUTH_CALLBACK_PORT
    callback_path: str = DEFAULT_OAUTH_CALLBACK_PATH
    scopes: tuple[str, ...] = ("openid",)

    @property
    def authorization_url(self) -> str:
        return self.build_auth_url("auth")

    @property
    def token_url(self) -> str:
        return self.build_auth_url("token")

    @property
    def redirect_uri(self) -> str:
        path = self.callback_path if self.callback_path.startswith("/") else f"/{self.callback_path}"
        return f"http://{self.callback_host}:{self.callback_port}{path}"
