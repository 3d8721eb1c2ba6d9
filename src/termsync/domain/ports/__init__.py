"""Ports implemented by adapters and consumed by the pipeline."""

from __future__ import annotations

from .authentication import AuthenticationDriver, Credential
from .ingest import BundleLinkRelation, IngestProvider, validate_bundle
from .rendering import OutputRenderer
from .synchronization import MdrSynchronization

__all__ = [
    "AuthenticationDriver",
    "BundleLinkRelation",
    "Credential",
    "IngestProvider",
    "MdrSynchronization",
    "OutputRenderer",
    "validate_bundle",
]
