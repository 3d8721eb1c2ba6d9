from __future__ import annotations

import base64
from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from termsync.adapters.authentication import (
    CentraxxAuthenticationDriver,
    LocalCallbackReceiver,
    OAuthAuthenticationDriver,
)
from termsync.config import CentraxxAuthConfiguration, OAuthConfiguration
from termsync.domain.errors import AuthenticationError
from tests.support.http import json_response, make_client_factory

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def _form(request: httpx.Request) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


def test_centraxx_password_grant() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(
            200,
            {"access_token": "tok", "token_type": "bearer", "expires_in": 3600, "scope": "any"},
        )

    driver = CentraxxAuthenticationDriver(
        CentraxxAuthConfiguration(
            auth_endpoint="https://cxx.example.org/centraxx/",
            user_name="alice",
            password="wonderland",
            client_id="client",
            client_secret="secret",
        ),
        clock=lambda: NOW,
        client_factory=make_client_factory(handler),
    )

    assert driver.authorization_headers() == {"Authorization": "bearer tok"}
    credential = driver.credential
    assert credential is not None
    assert credential.expires_at == NOW + timedelta(hours=1)

    request = seen[0]
    assert str(request.url) == "https://cxx.example.org/centraxx/oauth/token"
    assert request.headers["Authorization"] == "Basic " + base64.b64encode(b"client:secret").decode()
    assert _form(request) == {
        "grant_type": "password",
        "scope": "anyscope",
        "username": "alice",
        "password": "wonderland",
    }


def test_centraxx_rejected_credentials() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return json_response(401, {"error": "invalid_grant"})

    driver = CentraxxAuthenticationDriver(
        CentraxxAuthConfiguration(
            auth_endpoint="https://cxx.example.org/centraxx",
            user_name="alice",
            password="wrong",
            client_id="client",
            client_secret="secret",
        ),
        client_factory=make_client_factory(handler),
    )

    with pytest.raises(AuthenticationError):
        driver.login()


def _oauth_config() -> OAuthConfiguration:
    return OAuthConfiguration(
        auth_endpoint="https://login.example.org/protocol/openid-connect",
        client_id="termsync",
        client_secret="secret",
        callback_port=8765,
    )


def test_oauth_authorization_code_flow_and_refresh() -> None:
    forms: list[dict[str, str]] = []
    authorization_urls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        forms.append(_form(request))
        return json_response(
            200,
            {
                "access_token": f"access-{len(forms)}",
                "token_type": "Bearer",
                "expires_in": 60,
                "refresh_token": "refresh-1" if len(forms) == 1 else None,
            },
        )

    def receiver(authorization_url: str, state: str) -> str:
        authorization_urls.append(authorization_url)
        query = parse_qs(urlsplit(authorization_url).query)
        assert query["state"] == [state]
        return "the-code"

    now = [NOW]
    driver = OAuthAuthenticationDriver(
        _oauth_config(),
        clock=lambda: now[0],
        authorization_code_receiver=receiver,
        client_factory=make_client_factory(handler),
    )

    assert driver.authorization_headers() == {"Authorization": "Bearer access-1"}
    query = parse_qs(urlsplit(authorization_urls[0]).query)
    assert authorization_urls[0].startswith(
        "https://login.example.org/protocol/openid-connect/auth?"
    )
    assert query["redirect_uri"] == ["http://127.0.0.1:8765/"]
    assert query["response_type"] == ["code"]
    assert forms[0]["grant_type"] == "authorization_code"
    assert forms[0]["code"] == "the-code"

    now[0] = NOW + timedelta(seconds=61)
    assert driver.authorization_headers() == {"Authorization": "Bearer access-2"}
    assert forms[1]["grant_type"] == "refresh_token"
    assert forms[1]["refresh_token"] == "refresh-1"
    assert len(authorization_urls) == 1
    assert driver.credential is not None
    assert driver.credential.refresh_token == "refresh-1"


def test_oauth_falls_back_to_authorization_when_refresh_fails() -> None:
    responses = iter(
        [
            json_response(
                200,
                {"access_token": "a", "expires_in": 1, "refresh_token": "stale"},
            ),
            json_response(400, {"error": "invalid_grant"}),
            json_response(200, {"access_token": "b", "expires_in": 60}),
        ]
    )
    codes: list[str] = []

    def receiver(authorization_url: str, state: str) -> str:
        del authorization_url, state
        codes.append("code")
        return "code"

    now = [NOW]
    driver = OAuthAuthenticationDriver(
        _oauth_config(),
        clock=lambda: now[0],
        authorization_code_receiver=receiver,
        client_factory=make_client_factory(lambda request: next(responses)),
    )

    driver.current_credential()
    now[0] = NOW + timedelta(seconds=5)

    assert driver.authorization_headers() == {"Authorization": "bearer b"}
    assert len(codes) == 2


class _FakeCallbackServer:
    """Stand-in for ``HTTPServer`` that delivers one prepared callback."""

    query: dict[str, str] = {}

    def __init__(self, address: tuple[str, int], handler: type) -> None:
        del address
        self.received = handler.received
        self.timeout = None

    def __enter__(self) -> _FakeCallbackServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def handle_request(self) -> None:
        self.received.update(self.query)


@pytest.fixture
def fake_callback(monkeypatch: pytest.MonkeyPatch) -> type[_FakeCallbackServer]:
    from termsync.adapters.authentication import oauth

    def handler_factory(path: str, received: dict[str, str]) -> type:
        del path
        return type("Handler", (), {"received": received})

    monkeypatch.setattr(oauth, "_callback_handler", handler_factory)
    monkeypatch.setattr(oauth, "HTTPServer", _FakeCallbackServer)
    return _FakeCallbackServer


@pytest.mark.parametrize(
    ("query", "message"),
    [
        ({"state": "other", "code": "c"}, "state"),
        ({"error": "access_denied"}, "access_denied"),
        ({"state": "expected"}, "no code"),
    ],
)
def test_local_callback_receiver_rejects_bad_callbacks(
    fake_callback: type[_FakeCallbackServer],
    monkeypatch: pytest.MonkeyPatch,
    query: dict[str, str],
    message: str,
) -> None:
    monkeypatch.setattr(fake_callback, "query", query)
    receiver = LocalCallbackReceiver("127.0.0.1", 0, "/", open_browser=lambda url: None)

    with pytest.raises(AuthenticationError, match=message):
        receiver("https://login.example.org/auth", "expected")


def test_local_callback_receiver_returns_code(
    fake_callback: type[_FakeCallbackServer],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    opened: list[str] = []
    monkeypatch.setattr(fake_callback, "query", {"state": "expected", "code": "the-code"})
    receiver = LocalCallbackReceiver("127.0.0.1", 0, "callback", open_browser=opened.append)

    assert receiver("https://login.example.org/auth", "expected") == "the-code"
    assert opened == ["https://login.example.org/auth"]
    assert receiver.path == "/callback"
