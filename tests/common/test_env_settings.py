from __future__ import annotations

import pytest

from termsync.config import (
    AuthenticationConfiguration,
    MissingConfigurationError,
    MissingEndpointError,
    OAuthConfiguration,
    get_centraxx_config,
    get_ql4mdr_config,
    join_url,
    require_env_vars,
    resolve_settings,
)
from termsync.config.mdr import CXX_ENV_VARS, QL4MDR_ENV_VARS


def _clear(monkeypatch: pytest.MonkeyPatch, names: tuple[str, ...]) -> None:
    for name in names:
        monkeypatch.delenv(name, raising=False)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_blank_values_count_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_vars(["EXAMPLE_VAR"])


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "from-env")

    assert resolve_settings({"EXAMPLE_VAR": "explicit"}, ["EXAMPLE_VAR"]) == {
        "EXAMPLE_VAR": "explicit"
    }
    assert resolve_settings({"EXAMPLE_VAR": None}, ["EXAMPLE_VAR"]) == {
        "EXAMPLE_VAR": "from-env"
    }


def test_centraxx_config_reports_every_missing_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear(monkeypatch, CXX_ENV_VARS)
    monkeypatch.setenv("CXX_ENDPOINT", "https://cxx.example.org/centraxx/rest")

    with pytest.raises(MissingConfigurationError) as exc:
        get_centraxx_config()

    assert exc.value.missing == sorted(CXX_ENV_VARS[1:])
    assert str(exc.value) == f"Missing configuration for: {', '.join(sorted(CXX_ENV_VARS[1:]))}"


def test_centraxx_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CXX_ENDPOINT", "https://cxx.example.org/centraxx/rest/")
    monkeypatch.setenv("CXX_AUTH_ENDPOINT", "https://cxx.example.org/centraxx/")
    monkeypatch.setenv("CXX_CLIENT_ID", "client")
    monkeypatch.setenv("CXX_CLIENT_SECRET", "secret")
    monkeypatch.setenv("CXX_USER", "user")
    monkeypatch.setenv("CXX_PASSWORD", "password")

    config = get_centraxx_config(catalog_type="LOCAL")

    assert config.catalog_type == "LOCAL"
    assert config.build_api_url("/catalogs/catalog") == (
        "https://cxx.example.org/centraxx/rest/catalogs/catalog"
    )
    assert config.authentication.build_auth_url("oauth/token") == (
        "https://cxx.example.org/centraxx/oauth/token"
    )


def test_ql4mdr_config_uses_explicit_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear(monkeypatch, QL4MDR_ENV_VARS)

    config = get_ql4mdr_config(
        endpoint="https://mdr.example.org/graphql",
        auth_endpoint="https://login.example.org/realms/mdr/protocol/openid-connect",
        client_id="termsync",
        client_secret="secret",
        callback_port=9000,
        wrap_json=False,
    )

    assert config.wrap_json is False
    authentication = config.authentication
    assert isinstance(authentication, OAuthConfiguration)
    assert authentication.token_url.endswith("/openid-connect/token")
    assert authentication.authorization_url.endswith("/openid-connect/auth")
    assert authentication.redirect_uri == "http://127.0.0.1:9000/"


def test_join_url_uses_exactly_one_slash() -> None:
    assert join_url("https://a.example/", "/b") == "https://a.example/b"
    assert join_url("https://a.example", "b") == "https://a.example/b"


def test_blank_and_unset_names_are_listed_together(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_BLANK", "")
    monkeypatch.delenv("EXAMPLE_UNSET", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        resolve_settings({"EXAMPLE_SET": "x"}, ["EXAMPLE_UNSET", "EXAMPLE_SET", "EXAMPLE_BLANK"])

    assert exc.value.missing == ["EXAMPLE_BLANK", "EXAMPLE_UNSET"]


def test_auth_url_needs_an_endpoint() -> None:
    with pytest.raises(MissingEndpointError) as exc:
        AuthenticationConfiguration().build_auth_url("token")

    assert exc.value.owner == "AuthenticationConfiguration"
    assert str(exc.value) == "AuthenticationConfiguration has no authentication endpoint"
