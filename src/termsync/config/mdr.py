"""MDR target configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .authentication import (
    DEFAULT_OAUTH_CALLBACK_HOST,
    DEFAULT_OAUTH_CALLBACK_PATH,
    DEFAULT_OAUTH_CALLBACK_PORT,
    AuthenticationConfiguration,
    CentraxxAuthConfiguration,
    NoOpAuthenticationConfiguration,
    OAuthConfiguration,
)
from .env import resolve_settings
from .http_resilience import join_url

DEFAULT_CATALOG_TYPE = "FHIR"

CXX_ENV_VARS = (
    "CXX_ENDPOINT",
    "CXX_AUTH_ENDPOINT",
    "CXX_CLIENT_ID",
    "CXX_CLIENT_SECRET",
    "CXX_USER",
    "CXX_PASSWORD",
)
QL4MDR_ENV_VARS = (
    "QL4MDR_ENDPOINT",
    "QL4MDR_AUTH_ENDPOINT",
    "QL4MDR_CLIENT_ID",
    "QL4MDR_CLIENT_SECRET",
)


@dataclass(frozen=True, kw_only=True)
class MdrConfiguration:
    api_endpoint: str
    authentication: AuthenticationConfiguration = field(
        default_factory=NoOpAuthenticationConfiguration
    )

    def build_api_url(self, path: str) -> str:
        return join_url(self.api_endpoint, path)


@dataclass(frozen=True, kw_only=True)
class CentraxxConfiguration(MdrConfiguration):
    catalog_type: str = DEFAULT_CATALOG_TYPE


@dataclass(frozen=True, kw_only=True)
class Ql4MdrConfiguration(MdrConfiguration):
    wrap_json: bool = True


def get_centraxx_config(
    *,
    endpoint: str | None = None,
    auth_endpoint: str | None = None,
    client_id: str | None = None,
    client_secret: str | None = None,
    user: str | None = None,
    password: str | None = None,
    catalog_type: str = DEFAULT_CATALOG_TYPE,
) -> CentraxxConfiguration:
    values = resolve_settings(
        {
            "CXX_ENDPOINT": endpoint,
            "CXX_AUTH_ENDPOINT": auth_endpoint,
            "CXX_CLIENT_ID": client_id,
            "CXX_CLIENT_SECRET": client_secret,
            "CXX_USER": user,
            "CXX_PASSWORD": password,
        },
        CXX_ENV_VARS,
    )
    return CentraxxConfiguration(
        api_endpoint=values["CXX_ENDPOINT"],
        catalog_type=catalog_type,
        authentication=CentraxxAuthConfiguration(
            auth_endpoint=values["CXX_AUTH_ENDPOINT"],
            user_name=values["CXX_USER"],
            password=values["CXX_PASSWORD"],
            client_id=values["CXX_CLIENT_ID"],
            client_secret=values["CXX_CLIENT_SECRET"],
        ),
    )


def get_ql4mdr_config(
    *,
    endpoint: str | None = None,
    auth_endpoint: str | None = None,
    client_id: str | None = None,
    client_secret: str | None = None,
    callback_host: str = DEFAULT_OAUTH_CALLBACK_HOST,
    callback_port: int = DEFAULT_OAUTH_CALLBACK_PORT,
    callback_path: str = DEFAULT_OAUTH_CALLBACK_PATH,
    wrap_json: bool = True,
) -> Ql4MdrConfiguration:
    values = resolve_settings(
        {
            "QL4MDR_ENDPOINT": endpoint,
            "QL4MDR_AUTH_ENDPOINT": auth_endpoint,
            "QL4MDR_CLIENT_ID": client_id,
            "QL4MDR_CLIENT_SECRET": client_secret,
        },
        QL4MDR_ENV_VARS,
    )
    return Ql4MdrConfiguration(
        api_endpoint=values["QL4MDR_ENDPOINT"],
        wrap_json=wrap_json,
        authentication=OAuthConfiguration(
            auth_endpoint=values["QL4MDR_AUTH_ENDPOINT"],
            client_id=values["QL4MDR_CLIENT_ID"],
            client_secret=values["QL4MDR_CLIENT_SECRET"],
            callback_host=callback_host,
            callback_port=callback_port,
            callback_path=callback_path,
        ),
    )
