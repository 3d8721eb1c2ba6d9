"""Ingest provider expanding a SNOMED CT expression constraint (ECL) query."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from termsync.config.sources import DEFAULT_SNOMED_CT_EDITION, SNOMED_CT_SYSTEM
from termsync.domain.errors import ResourceNotFoundError, TerminologyConversionError
from termsync.domain.ports.authentication import utcnow
from termsync.domain.ports.ingest import COLLECTION_BUNDLE_TYPE, BundleLinkRelation, IngestProvider
from termsync.fhir import BundleEntry, BundleLink, ValueSet, collection_bundle

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from pathlib import Path

    from termsync.fhir import Bundle, Resource

    from .fhir_server import TerminologyServerClient

log = getLogger(__name__)


@dataclass(slots=True)
class EclQuery:
    """An ECL expression plus the metadata stamped on its expansion."""

    ecl: str
    client: TerminologyServerClient
    value_set_name: str
    value_set_title: str
    value_set_version: str
    snomed_ct_edition: str = DEFAULT_SNOMED_CT_EDITION
    snomed_ct_version: str | None = None
    output_directory: Path | None = None
    clock: Callable[[], datetime] = field(default=utcnow)

    @property
    def edition_url(self) -> str:
        qualifier = f"/version/{self.snomed_ct_version}" if self.snomed_ct_version else ""
        return f"{SNOMED_CT_SYSTEM}/{self.snomed_ct_edition}{qualifier}"

    @property
    def implicit_value_set_url(self) -> str:
        return f"{self.edition_url}?fhir_vs=ecl/{self.ecl.strip()}"

    def request_expansion(self) -> ValueSet:
        log.info(f"Expanding ECL expression at {self.client.endpoint}: {self.ecl.strip()}")
        value_set = self.client.fetch_resource(
            "ValueSet/$expand",
            ValueSet,
            params={"url": self.implicit_value_set_url},
        )
        value_set.url = value_set.url or self.implicit_value_set_url
        value_set.name = self.value_set_name
        value_set.title = self.value_set_title
        value_set.version = self.value_set_version
        value_set.date = self.clock().replace(microsecond=0)
        value_set.experimental = True
        self.write_value_set(value_set)
        return value_set

    def write_value_set(self, value_set: ValueSet) -> Path | None:
        if self.output_directory is None:
            log.info("No FHIR output directory was specified, not writing expanded file.")
            return None
        target = (
            self.output_directory
            / f"ValueSet-ECL_{self.value_set_name}_{self.value_set_version}.json"
        )
        try:
            self.output_directory.mkdir(parents=True, exist_ok=True)
            target.write_text(self.client.parser.encode_json(value_set, pretty=True), encoding="utf-8")
        except OSError as exc:
            log.error(f"Error writing expanded ECL expression to {target}: {exc}")
            return None
        log.info(f"Wrote expanded FHIR ValueSet to {target.absolute()}")
        return target


class SnomedCtEclProvider(IngestProvider):
    """One-entry collection holding the already expanded result of an ``EclQuery``."""

    def __init__(self, query: EclQuery) -> None:
        self.query = query

    def retrieve_resource_collection(self) -> Bundle | None:
        try:
            value_set = self.query.request_expansion()
        except TerminologyConversionError as exc:
            log.error(f"Error expanding ECL expression '{self.query.ecl}': {exc}")
            return None
        url = value_set.url or self.query.implicit_value_set_url
        entry = BundleEntry(
            fullUrl=url,
            link=[
                BundleLink(relation=BundleLinkRelation.CANONICAL.value, url=url),
                BundleLink(relation=BundleLinkRelation.VALUE_SET.value, url=url),
            ],
            resource=value_set,
        )
        return collection_bundle(COLLECTION_BUNDLE_TYPE, [entry])

    def get_resource_by_link(self, entry: BundleEntry, bundle: Bundle) -> Resource:  # noqa: ARG002
        if entry.resource is None:
            raise ResourceNotFoundError(
                f"There is no expanded ValueSet {entry.fullUrl} that has been requested via ECL"
            )
        return entry.resource

    def supports_expansion(self) -> bool:
        return True

    def expand_value_set(self, value_set: ValueSet) -> ValueSet:
        return value_set
