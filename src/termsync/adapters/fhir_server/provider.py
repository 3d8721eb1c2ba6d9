"""Ingest provider reading a collection bundle from a FHIR server."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from termsync.domain.errors import RemoteServerError, ResourceNotFoundError, SourceUnavailableError
from termsync.domain.ports.ingest import BundleLinkRelation, IngestProvider, validate_bundle
from termsync.fhir import Bundle, CodeSystem, ValueSet, link_url

if TYPE_CHECKING:
    from termsync.fhir import BundleEntry, Resource

    from .client import TerminologyServerClient

log = getLogger(__name__)


class FhirServerProvider(IngestProvider):
    def __init__(self, client: TerminologyServerClient, bundle_id: str) -> None:
        self.client = client
        self.bundle_id = bundle_id

    def retrieve_resource_collection(self) -> Bundle:
        try:
            self.client.server_kind()
            bundle = self.client.fetch_resource(f"Bundle/{self.bundle_id}", Bundle)
        except RemoteServerError as exc:
            raise SourceUnavailableError(
                f"cannot retrieve Bundle/{self.bundle_id} from {self.client.endpoint}: {exc}"
            ) from exc
        log.info(f"Retrieved Bundle/{self.bundle_id} from {self.client.endpoint}")
        validate_bundle(bundle)
        return bundle

    def get_resource_by_link(self, entry: BundleEntry, bundle: Bundle) -> Resource:  # noqa: ARG002
        if entry.resource is not None:
            return entry.resource
        code_system_url = link_url(entry, BundleLinkRelation.CODE_SYSTEM)
        if code_system_url is not None:
            return self.client.fetch_resource(code_system_url, CodeSystem)
        value_set_url = link_url(entry, BundleLinkRelation.VALUE_SET)
        if value_set_url is not None:
            return self.client.fetch_resource(value_set_url, ValueSet)
        raise ResourceNotFoundError("bundle entry has neither an inline resource nor a resource link")

    def supports_expansion(self) -> bool:
        return True

    def expand_value_set(self, value_set: ValueSet) -> ValueSet:
        return self.client.expand(value_set)
