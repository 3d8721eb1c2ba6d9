"""Terminology resource wire format."""

from __future__ import annotations

from .models import (
    FHIR_RELEASE,
    Bundle,
    BundleEntry,
    BundleLink,
    CapabilityStatement,
    CapabilityStatementSoftware,
    CodeSystem,
    CodeSystemConcept,
    Meta,
    OperationOutcome,
    OperationOutcomeIssue,
    Parameters,
    ParametersParameter,
    Resource,
    ValueSet,
    ValueSetCompose,
    ValueSetComposeInclude,
    ValueSetComposeIncludeConcept,
    ValueSetExpansion,
    ValueSetExpansionContains,
    collection_bundle,
    entries,
    link_url,
    resource_type_of,
)
from .parser import FhirParseError, FhirParser, UnsupportedDocumentError

__all__ = [
    "FHIR_RELEASE",
    "Bundle",
    "BundleEntry",
    "BundleLink",
    "CapabilityStatement",
    "CapabilityStatementSoftware",
    "CodeSystem",
    "CodeSystemConcept",
    "FhirParseError",
    "FhirParser",
    "Meta",
    "OperationOutcome",
    "OperationOutcomeIssue",
    "Parameters",
    "ParametersParameter",
    "Resource",
    "UnsupportedDocumentError",
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
