"""QL4MDR renderer: a ``createConceptSystem`` GraphQL mutation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from termsync.domain.model import MimeType, RenderedDocument

from .graphql import ListAttribute, MutationNode, Operation, QueryNode, ScalarAttribute, render

if TYPE_CHECKING:
    from termsync.domain.model import Concept, TerminologyResourceExpansion


def concept_uri(concept: Concept) -> str:
    return f"{concept.system}#{concept.code}"


def create_concept_system_mutation(expansion: TerminologyResourceExpansion) -> Operation:
    concepts = ListAttribute(
        "concepts",
        tuple(
            (
                ScalarAttribute("uri", concept_uri(concept)),
                ScalarAttribute("prefLabel", concept.code),
                ScalarAttribute("altLabel", ""),
                ScalarAttribute("definition", concept.display),
            )
            for concept in expansion.concepts
        ),
    )
    return Operation(
        "mutation",
        (
            MutationNode(
                "createConceptSystem",
                attributes=(
                    ScalarAttribute("name", expansion.name),
                    ScalarAttribute("uri", expansion.canonical_url),
                    ScalarAttribute("version", expansion.business_version),
                    concepts,
                ),
                results=("name",),
            ),
        ),
    )


def concept_system_query(uri: str, version: str) -> Operation:
    return Operation(
        "query",
        (
            QueryNode(
                "conceptSystem",
                arguments=(ScalarAttribute("uri", uri), ScalarAttribute("version", version)),
                selections=("name",),
            ),
        ),
    )


def concept_systems_query() -> Operation:
    return Operation("query", (QueryNode("conceptSystems", selections=("name",)),))


@dataclass(slots=True, frozen=True)
class Ql4MdrRenderer:
    mime_type: ClassVar[MimeType] = MimeType.GRAPHQL

    def render_catalog(self, expansion: TerminologyResourceExpansion) -> RenderedDocument:
        return RenderedDocument(
            content=render(create_concept_system_mutation(expansion)),
            mime_type=self.mime_type,
        )
