"""In-memory ports for exercising the domain without adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from termsync.domain.errors import ExpansionNotSupportedError, SynchronizationError
from termsync.domain.ports import IngestProvider, MdrSynchronization
from termsync.fhir import Bundle, BundleEntry, Resource, ValueSet

if TYPE_CHECKING:
    from termsync.domain.model import TerminologyResourceExpansion


class InMemoryProvider(IngestProvider):
    def __init__(
        self,
        bundle: Bundle | None,
        *,
        expansions: dict[str, ValueSet] | None = None,
    ) -> None:
        self.bundle = bundle
        self.expansions = expansions
        self.resolved: list[str] = []
        self.cleaned_up = False

    def retrieve_resource_collection(self) -> Bundle | None:
        return self.bundle

    def get_resource_by_link(self, entry: BundleEntry, bundle: Bundle) -> Resource:
        del bundle
        assert entry.resource is not None
        self.resolved.append(entry.fullUrl or "")
        return entry.resource

    def supports_expansion(self) -> bool:
        return self.expansions is not None

    def expand_value_set(self, value_set: ValueSet) -> ValueSet:
        if self.expansions is None:
            raise ExpansionNotSupportedError("no terminology server")
        return self.expansions[value_set.url or ""]

    def cleanup_temporary_artifacts(self) -> None:
        self.cleaned_up = True


class InMemoryMdr(MdrSynchronization):
    """Stores catalogs by ``(name, version)`` with the concept codes as content."""

    requires_authentication = False

    def __init__(self, *, valid: bool = True, fail_writes: bool = False) -> None:
        self.catalogs: dict[tuple[str, str], tuple[str, ...]] = {}
        self.valid = valid
        self.fail_writes = fail_writes
        self.writes: list[str] = []

    def _key(self, expansion: TerminologyResourceExpansion) -> tuple[str, str]:
        return expansion.name, expansion.business_version

    def _content(self, expansion: TerminologyResourceExpansion) -> tuple[str, ...]:
        return tuple(concept.code for concept in expansion.concepts)

    def is_present(self, expansion: TerminologyResourceExpansion) -> bool:
        return self._key(expansion) in self.catalogs

    def is_current(self, expansion: TerminologyResourceExpansion) -> bool:
        return self.catalogs[self._key(expansion)] == self._content(expansion)

    def create(self, expansion: TerminologyResourceExpansion) -> bool:
        if self.fail_writes:
            raise SynchronizationError("write rejected")
        self.writes.append(f"create {expansion.name}")
        self.catalogs[self._key(expansion)] = self._content(expansion)
        return True

    def update(self, expansion: TerminologyResourceExpansion) -> bool:
        self.writes.append(f"update {expansion.name}")
        self.catalogs[self._key(expansion)] = self._content(expansion)
        return True

    def validate_endpoint(self) -> bool:
        return self.valid
