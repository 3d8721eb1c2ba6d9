"""Authorization code flow for QL4MDR, with a local redirect listener."""

from __future__ import annotations

import asyncio
import secrets
import webbrowser
from dataclasses import replace
from http.server import BaseHTTPRequestHandler, HTTPServer
from logging import getLogger
from time import monotonic
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, urlencode, urlsplit

import httpx

from termsync.adapters.http_resilience import default_client_factory, http_request_resilient
from termsync.config.sources import mdr_resilience
from termsync.domain.errors import AuthenticationError
from termsync.domain.ports.authentication import AuthenticationDriver, utcnow

from .tokens import BearerCredential, parse_token_response

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from termsync.adapters.http_resilience import ClientFactory
    from termsync.config.authentication import OAuthConfiguration
    from termsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

DEFAULT_CALLBACK_TIMEOUT_SECONDS = 300.0

type AuthorizationCodeReceiver = Callable[[str, str], str]
"""Open ``authorization_url`` and return the code delivered for ``state``."""


def _callback_handler(path: str, received: dict[str, str]) -> type[BaseHTTPRequestHandler]:
    class CallbackHandler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:  # noqa: N802
            parsed = urlsplit(self.path)
            if parsed.path != path:
                self.send_error(404)
                return
            received.update(parse_qsl(parsed.query))
            body = b"Authentication complete. You can close this window."
            self.send_response(200)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format: str, *args: object) -> None:  # noqa: A002
            log.debug(format, *args)

    return CallbackHandler


class LocalCallbackReceiver:
    """Serve the redirect URI once and hand back the authorization code."""

    def __init__(
        self,
        host: str,
        port: int,
        path: str,
        *,
        timeout_seconds: float = DEFAULT_CALLBACK_TIMEOUT_SECONDS,
        open_browser: Callable[[str], object] = webbrowser.open,
    ) -> None:
        self.host = host
        self.port = port
        self.path = path if path.startswith("/") else f"/{path}"
        self.timeout_seconds = timeout_seconds
        self.open_browser = open_browser

    def __call__(self, authorization_url: str, state: str) -> str:
        received: dict[str, str] = {}
        handler = _callback_handler(self.path, received)
        with HTTPServer((self.host, self.port), handler) as server:
            server.timeout = 1.0
            log.info(f"Opening browser for login, waiting on {self.host}:{self.port}{self.path}")
            self.open_browser(authorization_url)
            deadline = monotonic() + self.timeout_seconds
            while not received and monotonic() < deadline:
                server.handle_request()

        if not received:
            raise AuthenticationError("timed out waiting for the authorization callback")
        if "error" in received:
            description = received.get("error_description", "")
            raise AuthenticationError(f"authorization failed: {received['error']} {description}")
        if received.get("state") != state:
            raise AuthenticationError("authorization callback state does not match")
        code = received.get("code")
        if not code:
            raise AuthenticationError("authorization callback carried no code")
        return code


class OAuthAuthenticationDriver(AuthenticationDriver[BearerCredential]):
    """Refresh when a refresh token is held, otherwise run the interactive flow."""

    def __init__(
        self,
        config: OAuthConfiguration,
        *,
        clock: Callable[[], datetime] = utcnow,
        authorization_code_receiver: AuthorizationCodeReceiver | None = None,
        resilience: ResilienceConfig | None = None,
        client_factory: ClientFactory = default_client_factory,
    ) -> None:
        super().__init__(clock=clock)
        self.config = config
        self.receive_authorization_code = authorization_code_receiver or LocalCallbackReceiver(
            config.callback_host,
            config.callback_port,
            config.callback_path,
        )
        self.resilience = resilience or mdr_resilience("ql4mdr-auth")
        self.client_factory = client_factory

    def login(self) -> BearerCredential:
        previous = self._credential
        if previous is not None and previous.refresh_token:
            try:
                return self._refresh(previous.refresh_token)
            except AuthenticationError as exc:
                log.warning(f"Token refresh failed, logging in again: {exc}")
        return self._authorize()

    def authorization_request_url(self, state: str) -> str:
        query = urlencode(
            {
                "response_type": "code",
                "client_id": self.config.client_id,
                "redirect_uri": self.config.redirect_uri,
                "scope": " ".join(self.config.scopes),
                "state": state,
            }
        )
        return f"{self.config.authorization_url}?{query}"

    def _authorize(self) -> BearerCredential:
        state = secrets.token_urlsafe(16)
        code = self.receive_authorization_code(self.authorization_request_url(state), state)
        return self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.config.redirect_uri,
            }
        )

    def _refresh(self, refresh_token: str) -> BearerCredential:
        credential = self._token_request(
            {"grant_type": "refresh_token", "refresh_token": refresh_token}
        )
        if credential.refresh_token is None:
            return replace(credential, refresh_token=refresh_token)
        return credential

    def _token_request(self, form: dict[str, str]) -> BearerCredential:
        data = {
            **form,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }
        try:
            response = asyncio.run(
                http_request_resilient(
                    self.resilience,
                    "POST",
                    self.config.token_url,
                    client_factory=self.client_factory,
                    data=data,
                    headers={"Accept": "application/json"},
                )
            )
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"token request failed: {exc}") from exc
        token = parse_token_response(response)
        return BearerCredential.from_token_response(token, issued_at=self._clock())
