"""Synchronization against the CentraXX MDR REST API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from termsync.adapters.http_resilience import ClientFactory, default_client_factory
from termsync.adapters.rendering import CentraxxRestRenderer
from termsync.domain.errors import AuthenticationError, SynchronizationError

from .http import UNAUTHORIZED_STATUSES, HttpMdrSynchronization, raise_for_lookup_failure

if TYPE_CHECKING:
    from termsync.config.http_resilience import ResilienceConfig
    from termsync.config.mdr import CentraxxConfiguration
    from termsync.domain.model import TerminologyResourceExpansion
    from termsync.domain.ports.authentication import AuthenticationDriver, Credential
    from termsync.domain.ports.rendering import OutputRenderer

log = getLogger(__name__)

CATALOG_PATH = "catalogs/catalog"
CATALOG_CONTENT_TYPE = "application/json;charset=UTF-8"


class CentraxxMdrSynchronization(HttpMdrSynchronization):
    """Catalogs are looked up, created and replaced by ``code`` + ``version``."""

    def __init__(
        self,
        config: CentraxxConfiguration,
        authentication: AuthenticationDriver[Credential],
        *,
        renderer: OutputRenderer | None = None,
        resilience: ResilienceConfig | None = None,
        client_factory: ClientFactory = default_client_factory,
    ) -> None:
        super().__init__(
            config,
            authentication,
            resilience=resilience,
            client_factory=client_factory,
        )
        self.renderer = renderer or CentraxxRestRenderer(catalog_type=config.catalog_type)

    def is_present(self, expansion: TerminologyResourceExpansion) -> bool:
        response = self._request(
            "GET",
            CATALOG_PATH,
            params=self._catalog_key(expansion),
            headers={"Accept": "application/json"},
        )
        if response.is_success:
            return True
        raise_for_lookup_failure(response)
        return False

    def is_current(self, expansion: TerminologyResourceExpansion) -> bool:
        return self.is_present(expansion)

    def create(self, expansion: TerminologyResourceExpansion) -> bool:
        return self._write("POST", expansion, params=None)

    def update(self, expansion: TerminologyResourceExpansion) -> bool:
        return self._write("PUT", expansion, params=self._catalog_key(expansion))

    def validate_endpoint(self) -> bool:
        try:
            response = self._request("GET", "/")
        except (SynchronizationError, AuthenticationError) as exc:
            log.error(f"CentraXX endpoint {self.config.api_endpoint} is not usable: {exc}")
            return False
        if response.status_code == httpx.codes.OK:
            return True
        if response.status_code in UNAUTHORIZED_STATUSES:
            log.error("Unauthorized - check your credentials")
        else:
            log.error(
                f"CentraXX endpoint {self.config.api_endpoint} answered HTTP {response.status_code}"
            )
        return False

    def _write(
        self,
        method: str,
        expansion: TerminologyResourceExpansion,
        *,
        params: dict[str, str] | None,
    ) -> bool:
        rendered = self.renderer.render_catalog(expansion)
        if not rendered.success:
            return False
        response = self._request(
            method,
            CATALOG_PATH,
            params=params,
            content=rendered.content.encode("utf-8"),
            headers={"Content-Type": CATALOG_CONTENT_TYPE},
        )
        if not response.is_success:
            log.error(f"{method} of {expansion.label} failed with HTTP {response.status_code}: {response.text}")
        return response.is_success

    @staticmethod
    def _catalog_key(expansion: TerminologyResourceExpansion) -> dict[str, str]:
        return {"code": expansion.name, "version": expansion.business_version}
