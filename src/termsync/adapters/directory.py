"""Ingest provider scanning a local directory for terminology resources."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from termsync.domain.errors import (
    ExpansionNotSupportedError,
    ResourceNotFoundError,
    SourceUnavailableError,
)
from termsync.domain.ports.ingest import (
    COLLECTION_BUNDLE_TYPE,
    BundleLinkRelation,
    IngestProvider,
    validate_bundle,
)
from termsync.fhir import (
    Bundle,
    BundleEntry,
    BundleLink,
    CodeSystem,
    FhirParseError,
    UnsupportedDocumentError,
    ValueSet,
    collection_bundle,
    link_url,
    resource_type_of,
)
from termsync.fhir.parser import SUPPORTED_SUFFIXES

if TYPE_CHECKING:
    from termsync.fhir import FhirParser, Resource

    from .fhir_server import TerminologyServerClient

log = getLogger(__name__)


class FhirDirectoryProvider(IngestProvider):
    """Read CodeSystem, ValueSet and Bundle files from one directory (not recursive).

    A Bundle file is used as the collection verbatim; otherwise a collection is
    synthesised with one entry per CodeSystem/ValueSet file. Expansion is only
    available when an ``expansion_client`` is configured.
    """

    def __init__(
        self,
        directory: Path,
        parser: FhirParser,
        *,
        expansion_client: TerminologyServerClient | None = None,
    ) -> None:
        self.directory = directory
        self.parser = parser
        self.expansion_client = expansion_client

    def retrieve_resource_collection(self) -> Bundle:
        bundle = self._find_bundle_or_build()
        validate_bundle(bundle)
        return bundle

    def get_resource_by_link(self, entry: BundleEntry, bundle: Bundle) -> Resource:  # noqa: ARG002
        location = link_url(entry, BundleLinkRelation.CODE_SYSTEM) or link_url(
            entry, BundleLinkRelation.VALUE_SET
        )
        path = self._resolve_path(location) if location else None
        if path is not None:
            try:
                return self.parser.parse_file(path)
            except FhirParseError as exc:
                raise ResourceNotFoundError(f"cannot parse {path}: {exc}") from exc
        if entry.resource is not None:
            return entry.resource
        raise ResourceNotFoundError(f"no readable file for bundle entry (link: {location})")

    def supports_expansion(self) -> bool:
        return self.expansion_client is not None

    def expand_value_set(self, value_set: ValueSet) -> ValueSet:
        if self.expansion_client is None:
            raise ExpansionNotSupportedError(
                "expansion using a terminology server is not supported for this instance"
            )
        return self.expansion_client.expand(value_set)

    def resource_files(self) -> list[Path]:
        if not self.directory.is_dir():
            raise SourceUnavailableError(f"{self.directory} is not a readable directory")
        log.info(f"retrieving files from {self.directory.absolute()}")
        try:
            return sorted(
                path
                for path in self.directory.iterdir()
                if path.is_file() and path.suffix.lower() in SUPPORTED_SUFFIXES
            )
        except OSError as exc:
            raise SourceUnavailableError(f"cannot list {self.directory}: {exc}") from exc

    def _find_bundle_or_build(self) -> Bundle:
        discovered: list[tuple[Path, CodeSystem | ValueSet]] = []
        for path in self.resource_files():
            try:
                resource = self.parser.parse_file(path)
            except UnsupportedDocumentError as exc:
                log.debug(f"skipping {path.name}: {exc}")
                continue
            except FhirParseError as exc:
                log.warning(f"file {path} is not a valid FHIR resource, skipping it: {exc}")
                continue
            if isinstance(resource, Bundle):
                log.info(f"using the bundle in {path.name}")
                return resource
            if isinstance(resource, CodeSystem | ValueSet):
                discovered.append((path, resource))
            else:
                kind = resource_type_of(resource)
                log.debug(f"the resource {path.name} is of type {kind}, skipping")
        return build_collection(discovered)

    def _resolve_path(self, location: str) -> Path | None:
        path = Path(location.removeprefix("file://"))
        if not path.is_absolute():
            path = self.directory / path
        return path if path.is_file() else None


def build_collection(resources: list[tuple[Path, CodeSystem | ValueSet]]) -> Bundle:
    """Collection bundle linking each resource by canonical URL and file path."""

    entries: list[BundleEntry] = []
    for path, resource in resources:
        canonical_url = resource.url or path.absolute().as_uri()
        entries.append(
            BundleEntry(
                link=[
                    BundleLink(relation=BundleLinkRelation.CANONICAL.value, url=canonical_url),
                    BundleLink(relation=resource_type_of(resource), url=str(path.absolute())),
                ],
                resource=resource,
            )
        )
    return collection_bundle(COLLECTION_BUNDLE_TYPE, entries)
