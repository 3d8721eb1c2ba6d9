"""Port for sources of terminology resources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from termsync.domain.errors import BundleValidationError, ResourceNotFoundError
from termsync.fhir import entries, link_url

if TYPE_CHECKING:
    from termsync.fhir import Bundle, BundleEntry, Resource, ValueSet

log = getLogger(__name__)

COLLECTION_BUNDLE_TYPE = "collection"


class BundleLinkRelation(StrEnum):
    CANONICAL = "canonical"
    CODE_SYSTEM = "CodeSystem"
    VALUE_SET = "ValueSet"


def validate_bundle(bundle: Bundle) -> None:
    """Check the structural requirements of an ingest collection.

    Every violation is collected before raising ``BundleValidationError``.
    """

    errors: list[str] = []
    if bundle.type is None:
        errors.append("missing type for bundle")
    elif bundle.type != COLLECTION_BUNDLE_TYPE:
        errors.append(f"bundle type must be {COLLECTION_BUNDLE_TYPE}, got {bundle.type}")
    bundle_entries = entries(bundle)
    if not bundle_entries:
        errors.append("bundle must have entries")
    for index, entry in enumerate(bundle_entries):
        if not entry.link:
            errors.append(f"no links in the bundle entry at index {index}")
        elif (
            link_url(entry, BundleLinkRelation.CODE_SYSTEM) is None
            and link_url(entry, BundleLinkRelation.VALUE_SET) is None
        ):
            errors.append(
                f"bundle entry at index {index} is neither CodeSystem nor ValueSet - unsupported"
            )
    if errors:
        raise BundleValidationError(errors)


def find_entry_by_canonical(bundle: Bundle, canonical_url: str) -> BundleEntry:
    for entry in entries(bundle):
        if link_url(entry, BundleLinkRelation.CANONICAL) == canonical_url:
            return entry
    raise ResourceNotFoundError(f"no entry with canonical link {canonical_url} in the bundle")


class IngestProvider(ABC):
    """A source of terminology resources.

    ``retrieve_resource_collection`` returns ``None`` when the source produced
    nothing to convert, and raises ``SourceError`` for unreachable sources or
    malformed collections.
    """

    @abstractmethod
    def retrieve_resource_collection(self) -> Bundle | None:
        """Obtain the collection of resource references to convert."""
        ...

    @abstractmethod
    def get_resource_by_link(self, entry: BundleEntry, bundle: Bundle) -> Resource:
        """Load the resource an entry points at (inline or via its kind link)."""
        ...

    def resolve_by_canonical_link(self, canonical_url: str, bundle: Bundle) -> Resource:
        entry = find_entry_by_canonical(bundle, canonical_url)
        return self.get_resource_by_link(entry, bundle)

    @abstractmethod
    def supports_expansion(self) -> bool:
        ...

    @abstractmethod
    def expand_value_set(self, value_set: ValueSet) -> ValueSet:
        """Expand ``value_set`` remotely; only valid when ``supports_expansion()``."""
        ...

    def cleanup_temporary_artifacts(self) -> None:  # noqa: B027
        return None


__all__ = [
    "COLLECTION_BUNDLE_TYPE",
    "BundleLinkRelation",
    "IngestProvider",
    "find_entry_by_canonical",
    "validate_bundle",
]
