from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

import httpx

from termsync.adapters.fhir_server import TerminologyServerClient
from termsync.adapters.http_resilience import ResilientClient, http_request_resilient
from termsync.config import RateLimit, ResilienceConfig
from termsync.config.sources import terminology_server_resilience
from termsync.fhir import ValueSet
from tests.support.http import json_response, make_client_factory
from tests.support.resources import value_set

if TYPE_CHECKING:
    from termsync.fhir import FhirParser


def test_connect_timeout_is_bounded_and_redirects_are_followed() -> None:
    client = ResilientClient(ResilienceConfig(name="default"))
    http_client = client._client  # noqa: SLF001  # type: ignore[reportPrivateUsage]

    assert http_client.timeout == httpx.Timeout(None, connect=20.0)
    assert http_client.follow_redirects is True
    asyncio.run(client.aclose())


def test_redirect_is_followed_to_its_target() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        if request.url.path == "/fhir/old":
            return httpx.Response(302, headers={"Location": "https://tx.example.org/fhir/new"})
        return json_response(200, {"moved": True})

    response = asyncio.run(
        http_request_resilient(
            ResilienceConfig(name="redirects"),
            "GET",
            "https://tx.example.org/fhir/old",
            client_factory=make_client_factory(handler),
        )
    )

    assert response.status_code == 200
    assert response.json() == {"moved": True}
    assert seen == ["/fhir/old", "/fhir/new"]


def test_terminology_server_defaults_to_ten_requests_per_second() -> None:
    assert terminology_server_resilience().ratelimit == RateLimit(max_calls=10, per_seconds=1.0)


def test_rate_limit_holds_across_requests_of_one_client(parser: FhirParser) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return json_response(200, value_set())

    client = TerminologyServerClient(
        endpoint="https://tx.example.org/fhir",
        parser=parser,
        resilience=ResilienceConfig(
            name="throttled",
            ratelimit=RateLimit(max_calls=1, per_seconds=0.2),
        ),
        client_factory=make_client_factory(handler),
    )

    started = time.monotonic()
    for _ in range(3):
        client.fetch_resource("ValueSet/example", ValueSet)
    elapsed = time.monotonic() - started

    # One call passes at once, each further call waits for the bucket to drain.
    assert elapsed >= 0.35
