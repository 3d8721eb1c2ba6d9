"""R4B resource models the pipeline reads and writes.

The models come from ``fhir.resources``; this module only fixes the FHIR
release and adds helpers for the link relations collection entries carry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fhir.resources.R4B.bundle import Bundle, BundleEntry, BundleLink
from fhir.resources.R4B.capabilitystatement import (
    CapabilityStatement,
    CapabilityStatementSoftware,
)
from fhir.resources.R4B.codesystem import CodeSystem, CodeSystemConcept
from fhir.resources.R4B.meta import Meta
from fhir.resources.R4B.operationoutcome import OperationOutcome, OperationOutcomeIssue
from fhir.resources.R4B.parameters import Parameters, ParametersParameter
from fhir.resources.R4B.resource import Resource
from fhir.resources.R4B.valueset import (
    ValueSet,
    ValueSetCompose,
    ValueSetComposeInclude,
    ValueSetComposeIncludeConcept,
    ValueSetExpansion,
    ValueSetExpansionContains,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

FHIR_RELEASE = "R4B"

# Top-level documents the parser accepts; nested resources are dispatched by fhir.resources.
RESOURCE_TYPES: dict[str, type[Resource]] = {
    model.get_resource_type(): model
    for model in (
        Bundle,
        CapabilityStatement,
        CodeSystem,
        OperationOutcome,
        Parameters,
        ValueSet,
    )
}


def resource_type_of(resource: Resource) -> str:
    return resource.get_resource_type()


def link_url(entry: BundleEntry, relation: str) -> str | None:
    """URL of the first entry link whose relation matches, case-insensitively."""

    wanted = relation.lower()
    for link in entry.link or []:
        if link.relation is not None and link.relation.lower() == wanted:
            return link.url
    return None


def entries(bundle: Bundle) -> list[BundleEntry]:
    return list(bundle.entry or [])


def collection_bundle(bundle_type: str, items: Iterable[BundleEntry]) -> Bundle:
    """Bundle of ``bundle_type`` holding ``items``; an empty bundle carries no entry element."""

    collected = list(items)
    return Bundle(type=bundle_type, entry=collected or None)


__all__ = [
    "FHIR_RELEASE",
    "RESOURCE_TYPES",
    "Bundle",
    "BundleEntry",
    "BundleLink",
    "CapabilityStatement",
    "CapabilityStatementSoftware",
    "CodeSystem",
    "CodeSystemConcept",
    "Meta",
    "OperationOutcome",
    "OperationOutcomeIssue",
    "Parameters",
    "ParametersParameter",
    "Resource",
    "ValueSet",
    "ValueSetCompose",
    "ValueSetComposeInclude",
    "ValueSetComposeIncludeConcept",
    "ValueSetExpansion",
    "ValueSetExpansionContains",
    "collection_bundle",
    "entries",
    "link_url",
    "resource_type_of",
]
