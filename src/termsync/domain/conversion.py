"""Turn the entries of an ingest collection into expansions, one at a time."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from termsync.fhir import CodeSystem, ValueSet, entries, link_url, resource_type_of

from .errors import (
    IncompleteResourceError,
    MissingExpansionError,
    MissingImplicitValueSetError,
    MissingLinkError,
    RemoteServerError,
    TerminologyConversionError,
    UnsupportedResourceTypeError,
)
from .model import DEFAULT_META_VERSION, Concept, ConversionOutcome, TerminologyResourceExpansion
from .ports.ingest import BundleLinkRelation

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from termsync.fhir import (
        Bundle,
        BundleEntry,
        CodeSystemConcept,
        Resource,
        ValueSetExpansionContains,
    )

    from .ports.ingest import IngestProvider

log = getLogger(__name__)

_KIND_RELATIONS = {
    BundleLinkRelation.CODE_SYSTEM.lower(): BundleLinkRelation.CODE_SYSTEM,
    BundleLinkRelation.VALUE_SET.lower(): BundleLinkRelation.VALUE_SET,
}


def resource_kind(entry: BundleEntry) -> BundleLinkRelation:
    """Resource kind an entry declares through its link relations."""

    if not entry.link:
        raise MissingLinkError("no link for bundle entry")
    kinds = {
        _KIND_RELATIONS[relation]
        for relation in (link.relation.lower() for link in entry.link if link.relation)
        if relation in _KIND_RELATIONS
    }
    if not kinds:
        raise MissingLinkError("no link codesystem/valueset in bundle entry")
    if len(kinds) > 1:
        raise UnsupportedResourceTypeError("bundle entry links to both a CodeSystem and a ValueSet")
    return kinds.pop()


def _entry_label(entry: BundleEntry, index: int) -> str:
    return (
        link_url(entry, BundleLinkRelation.CANONICAL)
        or entry.fullUrl
        or f"bundle entry at index {index}"
    )


class ResourceConverter:
    """Convert a single collection entry into a ``ConversionOutcome``."""

    def __init__(self, provider: IngestProvider) -> None:
        self.provider = provider

    def convert_entry(self, entry: BundleEntry, bundle: Bundle, *, index: int = 0) -> ConversionOutcome:
        label = _entry_label(entry, index)
        try:
            return self._convert(entry, bundle)
        except TerminologyConversionError as exc:
            log.error(f"Conversion of {label} failed: {exc}")
            return ConversionOutcome.failure(label, exc)

    def _convert(self, entry: BundleEntry, bundle: Bundle) -> ConversionOutcome:
        kind = resource_kind(entry)
        canonical_url = link_url(entry, BundleLinkRelation.CANONICAL)
        if canonical_url is None:
            raise MissingLinkError("no canonical link for bundle entry")
        resource = self.provider.resolve_by_canonical_link(canonical_url, bundle)
        _require_kind(resource, kind)
        if isinstance(resource, CodeSystem):
            return self._convert_code_system(resource)
        if isinstance(resource, ValueSet):
            return self._convert_value_set(resource, canonical_url)
        raise UnsupportedResourceTypeError(
            f"the resource type {resource_type_of(resource)} is not supported"
        )

    def _convert_value_set(self, value_set: ValueSet, canonical_url: str) -> ConversionOutcome:
        url = value_set.url or canonical_url
        if value_set.expansion is None:
            if not self.provider.supports_expansion():
                raise MissingExpansionError(
                    f"there is no expansion for ValueSet '{value_set.name}' (canonical: {url})"
                )
            try:
                value_set = self.provider.expand_value_set(value_set)
            except TerminologyConversionError as exc:
                log.error(f"Error when expanding ValueSet '{value_set.name}': {exc}")
                if isinstance(exc, RemoteServerError):
                    message = "; ".join(exc.diagnostics) or "unknown error"
                    log.error(f"Error message(-s) from terminology server: {message}")
                return ConversionOutcome.failure(url, exc)
            log.debug(f"expanded ValueSet '{value_set.name}'")
        else:
            log.debug(f"ValueSet '{value_set.name}' is already expanded")

        contains = (value_set.expansion.contains if value_set.expansion else None) or []
        expansion = _build_expansion(
            value_set,
            canonical_url=url,
            concepts=tuple(_concepts_from_contains(contains, url)),
        )
        return ConversionOutcome.success(expansion)

    def _convert_code_system(self, code_system: CodeSystem) -> ConversionOutcome:
        if code_system.valueSet is None:
            raise MissingImplicitValueSetError(
                f"CodeSystem '{code_system.name}' does not have the valueSet parameter set, "
                "this is unsupported!"
            )
        system = code_system.url or ""
        expansion = _build_expansion(
            code_system,
            canonical_url=code_system.valueSet,
            concepts=tuple(
                Concept(system=system, code=concept.code, display=concept.display or concept.code)
                for concept in _flatten_code_system_concepts(code_system.concept or [])
            ),
        )
        return ConversionOutcome.success(expansion)


class BundleConverter:
    """Lazily convert every entry of a collection, in collection order."""

    def __init__(self, provider: IngestProvider) -> None:
        self._converter = ResourceConverter(provider)

    def convert_bundle(self, bundle: Bundle) -> Iterator[ConversionOutcome]:
        for index, entry in enumerate(entries(bundle)):
            yield self._converter.convert_entry(entry, bundle, index=index)


def _require_kind(resource: Resource, kind: BundleLinkRelation) -> None:
    if resource_type_of(resource) != kind.value:
        raise UnsupportedResourceTypeError(
            f"entry is linked as {kind.value} but resolved to {resource_type_of(resource)}"
        )


def _build_expansion(
    resource: CodeSystem | ValueSet,
    *,
    canonical_url: str,
    concepts: tuple[Concept, ...],
) -> TerminologyResourceExpansion:
    if not resource.name:
        raise IncompleteResourceError(f"{resource_type_of(resource)} {canonical_url} has no name")
    if not resource.version:
        raise IncompleteResourceError(
            f"{resource_type_of(resource)} '{resource.name}' ({canonical_url}) has no version"
        )
    meta_version = resource.meta.versionId if resource.meta else None
    return TerminologyResourceExpansion(
        canonical_url=canonical_url,
        name=resource.name,
        title=resource.title or resource.name,
        description=resource.description,
        meta_version=meta_version or DEFAULT_META_VERSION,
        business_version=resource.version,
        concepts=concepts,
    )


def _concepts_from_contains(
    contains: Iterable[ValueSetExpansionContains],
    canonical_url: str,
) -> Iterator[Concept]:
    for item in contains:
        if item.code is None:
            if not item.contains:
                log.warning(f"skipping expansion entry without code in {canonical_url}")
        else:
            yield Concept(
                system=item.system or "",
                code=item.code,
                display=item.display or item.code,
            )
        yield from _concepts_from_contains(item.contains or [], canonical_url)


def _flatten_code_system_concepts(
    concepts: Iterable[CodeSystemConcept],
) -> Iterator[CodeSystemConcept]:
    for concept in concepts:
        yield concept
        yield from _flatten_code_system_concepts(concept.concept or [])


__all__ = ["BundleConverter", "ResourceConverter", "resource_kind"]
