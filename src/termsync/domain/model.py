"""Terminology resource model shared by every pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING
from urllib.parse import quote_plus

if TYPE_CHECKING:
    from .errors import TerminologyConversionError

DEFAULT_META_VERSION = "1"


def url_encode(value: str) -> str:
    """Form-style percent encoding as MDR keys are written: spaces become ``+``.

    Only letters, digits and ``.-*_`` are kept, so ``~`` is encoded.
    """

    return quote_plus(value, safe="*").replace("~", "%7E")


@dataclass(slots=True, frozen=True)
class Concept:
    system: str
    code: str
    display: str

    @property
    def encoded_code(self) -> str:
        return url_encode(self.code)


@dataclass(slots=True, frozen=True)
class TerminologyResourceExpansion:
    """A fully expanded value set, the unit every renderer and driver works on.

    ``name``/``title`` together with ``business_version`` form the natural key at
    the target MDR.
    """

    canonical_url: str
    name: str
    title: str
    business_version: str
    meta_version: str = DEFAULT_META_VERSION
    description: str | None = None
    concepts: tuple[Concept, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.canonical_url:
            raise ValueError("canonical_url must not be empty")

    @property
    def encoded_name(self) -> str:
        return url_encode(self.name)

    @property
    def encoded_business_version(self) -> str:
        return url_encode(self.business_version)

    @property
    def label(self) -> str:
        return f"'{self.title}' v'{self.business_version}'"


@dataclass(slots=True, frozen=True)
class ConversionOutcome:
    """Either an expansion or the error that prevented it, keyed by canonical URL."""

    canonical_url: str
    expansion: TerminologyResourceExpansion | None = None
    error: TerminologyConversionError | None = None

    def __post_init__(self) -> None:
        if (self.expansion is None) == (self.error is None):
            raise ValueError("exactly one of expansion or error must be set")

    @property
    def succeeded(self) -> bool:
        return self.expansion is not None

    @property
    def label(self) -> str:
        if self.expansion is not None:
            return self.expansion.label
        return self.canonical_url

    @classmethod
    def success(cls, expansion: TerminologyResourceExpansion) -> ConversionOutcome:
        return cls(canonical_url=expansion.canonical_url, expansion=expansion)

    @classmethod
    def failure(cls, canonical_url: str, error: TerminologyConversionError) -> ConversionOutcome:
        return cls(canonical_url=canonical_url, error=error)


class SynchronizationOutcome(StrEnum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    NO_ACTION_NEEDED = "NO_ACTION_NEEDED"
    ERROR = "ERROR"


class MimeType(StrEnum):
    XML = "application/xml"
    JSON = "application/json"
    GRAPHQL = "application/graphql"

    @property
    def file_extension(self) -> str:
        return _FILE_EXTENSIONS[self]


_FILE_EXTENSIONS = {
    MimeType.XML: ".xml",
    MimeType.JSON: ".json",
    MimeType.GRAPHQL: ".graphql",
}


@dataclass(slots=True, frozen=True)
class RenderedDocument:
    content: str
    mime_type: MimeType
    success: bool = True


__all__ = [
    "DEFAULT_META_VERSION",
    "Concept",
    "ConversionOutcome",
    "MimeType",
    "RenderedDocument",
    "SynchronizationOutcome",
    "TerminologyResourceExpansion",
    "url_encode",
]
