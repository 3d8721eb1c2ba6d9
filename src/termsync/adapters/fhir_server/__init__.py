"""FHIR terminology server adapter."""

from __future__ import annotations

from .client import KnownFhirServer, TerminologyServerClient, has_post_coordinated_expressions
from .provider import FhirServerProvider

__all__ = [
    "FhirServerProvider",
    "KnownFhirServer",
    "TerminologyServerClient",
    "has_post_coordinated_expressions",
]
