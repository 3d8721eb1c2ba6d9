"""Synchronization against a QL4MDR GraphQL endpoint."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from termsync.adapters.http_resilience import ClientFactory, default_client_factory
from termsync.adapters.rendering import Ql4MdrRenderer
from termsync.adapters.rendering.graphql import render
from termsync.adapters.rendering.ql4mdr import concept_system_query, concept_systems_query
from termsync.domain.errors import AuthenticationError, SynchronizationError

from .http import UNAUTHORIZED_STATUSES, HttpMdrSynchronization, raise_for_lookup_failure

if TYPE_CHECKING:
    import httpx

    from termsync.config.http_resilience import ResilienceConfig
    from termsync.config.mdr import Ql4MdrConfiguration
    from termsync.domain.model import TerminologyResourceExpansion
    from termsync.domain.ports.authentication import AuthenticationDriver, Credential

log = getLogger(__name__)


def _json_object(response: httpx.Response) -> dict[str, object]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise SynchronizationError(f"QL4MDR response is not JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise SynchronizationError("QL4MDR response is not a JSON object")
    return payload


class Ql4MdrSynchronization(HttpMdrSynchronization):
    """Presence and currency are one query for the concept system by URI and version."""

    config: Ql4MdrConfiguration

    def __init__(
        self,
        config: Ql4MdrConfiguration,
        authentication: AuthenticationDriver[Credential],
        *,
        renderer: Ql4MdrRenderer | None = None,
        resilience: ResilienceConfig | None = None,
        client_factory: ClientFactory = default_client_factory,
    ) -> None:
        super().__init__(
            config,
            authentication,
            resilience=resilience,
            client_factory=client_factory,
        )
        self.renderer = renderer or Ql4MdrRenderer()

    def send_query(self, document: str) -> httpx.Response:
        if self.config.wrap_json:
            content = json.dumps({"query": document.strip()})
            content_type = "application/json"
        else:
            content = document.strip()
            content_type = "application/graphql"
        return self._request(
            "POST",
            "",
            content=content.encode("utf-8"),
            headers={"Content-Type": content_type, "Accept": "application/json"},
        )

    def is_present(self, expansion: TerminologyResourceExpansion) -> bool:
        query = concept_system_query(expansion.canonical_url, expansion.business_version)
        response = self.send_query(render(query))
        if not response.is_success:
            raise_for_lookup_failure(response)
            return False
        payload = _json_object(response)
        if "errors" in payload:
            log.warning(f"QL4MDR lookup of {expansion.label} returned errors: {payload['errors']}")
            return False
        data = payload.get("data")
        return isinstance(data, dict) and data.get("conceptSystem") is not None

    def is_current(self, expansion: TerminologyResourceExpansion) -> bool:
        return self.is_present(expansion)

    def create(self, expansion: TerminologyResourceExpansion) -> bool:
        return self._submit(expansion)

    def update(self, expansion: TerminologyResourceExpansion) -> bool:
        return self._submit(expansion)

    def validate_endpoint(self) -> bool:
        try:
            response = self.send_query(render(concept_systems_query()))
        except (SynchronizationError, AuthenticationError) as exc:
            log.error(f"QL4MDR endpoint {self.config.api_endpoint} is not usable: {exc}")
            return False
        if response.status_code in UNAUTHORIZED_STATUSES:
            log.error("Unauthorized - check your credentials")
            return False
        if not response.is_success:
            log.error(f"QL4MDR endpoint answered HTTP {response.status_code}")
            return False
        try:
            return "data" in _json_object(response)
        except SynchronizationError as exc:
            log.error(str(exc))
            return False

    def _submit(self, expansion: TerminologyResourceExpansion) -> bool:
        rendered = self.renderer.render_catalog(expansion)
        if not rendered.success:
            return False
        response = self.send_query(rendered.content)
        if not response.is_success:
            log.error(f"QL4MDR mutation for {expansion.label} failed with HTTP {response.status_code}")
            return False
        payload = _json_object(response)
        if "errors" in payload:
            log.error(f"QL4MDR mutation for {expansion.label} returned errors: {payload['errors']}")
            return False
        return True
