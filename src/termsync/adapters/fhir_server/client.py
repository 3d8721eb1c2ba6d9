"""HTTP client for FHIR terminology servers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx

from termsync.adapters.http_resilience import (
    ClientFactory,
    default_client_factory,
    http_request_resilient,
    rate_limiter,
)
from termsync.config.http_resilience import join_url
from termsync.config.sources import SNOMED_CT_SYSTEM, terminology_server_resilience
from termsync.domain.errors import RemoteServerError
from termsync.fhir import (
    CapabilityStatement,
    FhirParseError,
    FhirParser,
    OperationOutcome,
    Parameters,
    ParametersParameter,
    ValueSet,
)

if TYPE_CHECKING:
    from aiolimiter import AsyncLimiter

    from termsync.config.http_resilience import ResilienceConfig
    from termsync.fhir import Resource

log = getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"
POST_COORDINATION_DOCS = "https://ontoserver.csiro.au/docs/6/postcoordination.html"


class KnownFhirServer(StrEnum):
    ONTOSERVER = "ontoserver"
    SNOWSTORM = "snowstorm"
    HAPI = "hapi"
    VONK = "vonk"
    REFERENCE = "reference"
    OTHER = "other"

    @classmethod
    def from_software_name(cls, name: str | None) -> KnownFhirServer:
        lowered = (name or "").lower()
        for server in cls:
            if server is not cls.OTHER and server.value in lowered:
                return server
        return cls.OTHER


def is_absolute_url(url: str) -> bool:
    return url.startswith(("http://", "https://"))


def has_post_coordinated_expressions(value_set: ValueSet) -> bool:
    if value_set.compose is None:
        return False
    return any(
        ":" in concept.code or "+" in concept.code
        for include in value_set.compose.include or []
        if include.system == SNOMED_CT_SYSTEM
        for concept in include.concept or []
    )


@dataclass(slots=True)
class TerminologyServerClient:
    """Blocking facade over a FHIR terminology server.

    The server software is looked up once per client through the ``metadata``
    endpoint; known limitations are logged when it is first classified.
    """

    endpoint: str
    parser: FhirParser
    resilience: ResilienceConfig = field(default_factory=terminology_server_resilience)
    client_factory: ClientFactory = field(default=default_client_factory)
    _server_kind: KnownFhirServer | None = field(default=None, init=False, repr=False)
    # Shared by every request of this client; each request runs in its own event loop.
    _limiter: AsyncLimiter | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self._limiter = rate_limiter(self.resilience)

    def url_for(self, path: str) -> str:
        if is_absolute_url(path):
            return path
        return join_url(self.endpoint, path)

    def server_kind(self) -> KnownFhirServer:
        if self._server_kind is None:
            capabilities = self.fetch_resource("metadata", CapabilityStatement)
            software = capabilities.software.name if capabilities.software else None
            self._server_kind = KnownFhirServer.from_software_name(software)
            _log_server_limitations(self._server_kind, software, self.endpoint)
        return self._server_kind

    def fetch_resource[R: Resource](
        self,
        path: str,
        resource_type: type[R],
        *,
        params: dict[str, str] | None = None,
    ) -> R:
        url = self.url_for(path)
        log.debug(f"GET {url}")
        response = self._request("GET", url, params=params, headers={"Accept": JSON_MEDIA_TYPE})
        return self._parse_response(response, resource_type)

    def expand(self, value_set: ValueSet) -> ValueSet:
        server = self.server_kind()
        if has_post_coordinated_expressions(value_set):
            _log_post_coordination(server, value_set)

        body: Resource = value_set
        if server is KnownFhirServer.SNOWSTORM:
            body = Parameters(parameter=[ParametersParameter(name="valueSet", resource=value_set)])

        url = self.url_for("ValueSet/$expand")
        log.debug(f"POST {url} for ValueSet '{value_set.name}'")
        response = self._request(
            "POST",
            url,
            content=self.parser.encode_json(body),
            headers={"Accept": JSON_MEDIA_TYPE, "Content-Type": JSON_MEDIA_TYPE},
        )
        return self._parse_response(response, ValueSet)

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:  # noqa: ANN401
        try:
            return asyncio.run(
                http_request_resilient(
                    self.resilience,
                    method,
                    url,
                    client_factory=self.client_factory,
                    limiter=self._limiter,
                    **kwargs,
                )
            )
        except httpx.HTTPError as exc:
            raise RemoteServerError(f"request to {url} failed: {exc}") from exc

    def _parse_response[R: Resource](self, response: httpx.Response, resource_type: type[R]) -> R:
        url = str(response.request.url)
        if response.is_success:
            try:
                return self.parser.parse_as(response.content, resource_type)
            except FhirParseError as exc:
                log.debug(f"response from {url} is not a {resource_type.__name__}: {exc}")

        try:
            outcome = self.parser.parse_as(response.content, OperationOutcome)
        except FhirParseError:
            log.error(
                f"Response from {url} (HTTP {response.status_code}) is not a FHIR resource, "
                "likely not a FHIR server (did you forget '/fhir'?)"
            )
            raise RemoteServerError(
                f"unexpected response from {url} (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from None

        diagnostics = "; ".join(
            issue.diagnostics for issue in outcome.issue or [] if issue.diagnostics
        )
        log.error(f"Terminology server returned an OperationOutcome: {diagnostics or 'no diagnostics'}")
        raise RemoteServerError(
            f"HTTP {response.status_code} from {url}: {diagnostics or 'OperationOutcome'}",
            outcome=outcome,
            status_code=response.status_code,
        )


def _log_server_limitations(server: KnownFhirServer, software: str | None, endpoint: str) -> None:
    if server is KnownFhirServer.SNOWSTORM:
        log.warning(f"{endpoint} runs Snowstorm, which only supports SNOMED CT expansion")
    elif server in {KnownFhirServer.HAPI, KnownFhirServer.VONK}:
        log.warning(f"{endpoint} runs {software}, which has limited support for terminology operations")
    elif server is KnownFhirServer.REFERENCE:
        log.warning(f"{endpoint} runs a reference server, which is likely not suited as a terminology server")
    else:
        log.info(f"{endpoint} runs {software or 'unknown software'}")


def _log_post_coordination(server: KnownFhirServer, value_set: ValueSet) -> None:
    prefix = f"ValueSet '{value_set.name}' contains post-coordinated SNOMED CT expressions"
    if server is KnownFhirServer.ONTOSERVER:
        log.warning(
            f"{prefix}; Ontoserver needs a CodeSystem supplement for them, "
            f"see {POST_COORDINATION_DOCS}"
        )
    elif server is KnownFhirServer.SNOWSTORM:
        log.warning(f"{prefix}; Snowstorm expansion results may be incomplete")
    elif server in {KnownFhirServer.HAPI, KnownFhirServer.VONK}:
        log.error(f"{prefix}; {server.value} does not support them")
    else:
        log.warning(f"{prefix}; the terminology server may not fully support them")


__all__ = [
    "KnownFhirServer",
    "TerminologyServerClient",
    "has_post_coordinated_expressions",
    "is_absolute_url",
]
