"""Port for MDR catalog renderers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from termsync.domain.model import MimeType, RenderedDocument, TerminologyResourceExpansion


@runtime_checkable
class OutputRenderer(Protocol):
    """Serialise an expansion into one MDR document format.

    Implementations must be deterministic: equal input renders to equal text.
    """

    @property
    def mime_type(self) -> MimeType: ...

    def render_catalog(self, expansion: TerminologyResourceExpansion) -> RenderedDocument: ...


__all__ = ["OutputRenderer"]
