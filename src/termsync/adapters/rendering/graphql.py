"""Small GraphQL document builder: a tree of nodes and one rendering function."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Literal

INDENT = "  "


@dataclass(slots=True, frozen=True)
class ScalarAttribute:
    name: str
    value: str


@dataclass(slots=True, frozen=True)
class ListAttribute:
    """A list of input objects, each given as its scalar attributes."""

    name: str
    items: tuple[tuple[ScalarAttribute, ...], ...] = ()


@dataclass(slots=True, frozen=True)
class MutationNode:
    name: str
    attributes: tuple[ScalarAttribute | ListAttribute, ...] = ()
    results: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class QueryNode:
    name: str
    arguments: tuple[ScalarAttribute, ...] = ()
    selections: tuple[str | QueryNode, ...] = ()


@dataclass(slots=True, frozen=True)
class Operation:
    kind: Literal["query", "mutation"]
    nodes: tuple[MutationNode | QueryNode, ...] = ()


type GraphQlNode = Operation | MutationNode | QueryNode | ListAttribute | ScalarAttribute


def quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def render(node: GraphQlNode) -> str:
    return "\n".join(_render_lines(node, 0))


def _render_lines(node: GraphQlNode, depth: int) -> list[str]:
    pad = INDENT * depth
    if isinstance(node, ScalarAttribute):
        return [f"{pad}{node.name}: {quote(node.value)}"]

    if isinstance(node, ListAttribute):
        if not node.items:
            return [f"{pad}{node.name}: []"]
        lines = [f"{pad}{node.name}: ["]
        for item in node.items:
            lines.append(f"{pad}{INDENT}{{")
            for attribute in item:
                lines.extend(_render_lines(attribute, depth + 2))
            lines.append(f"{pad}{INDENT}}}")
        lines.append(f"{pad}]")
        return lines

    if isinstance(node, MutationNode):
        lines = [f"{pad}{node.name}("]
        for attribute in node.attributes:
            lines.extend(_render_lines(attribute, depth + 1))
        lines.append(f"{pad}) {{")
        lines.extend(f"{pad}{INDENT}{result}" for result in node.results)
        lines.append(f"{pad}}}")
        return lines

    if isinstance(node, QueryNode):
        arguments = ", ".join(f"{arg.name}: {quote(arg.value)}" for arg in node.arguments)
        lines = [f"{pad}{node.name}({arguments}) {{" if arguments else f"{pad}{node.name} {{"]
        for selection in node.selections:
            if isinstance(selection, str):
                lines.append(f"{pad}{INDENT}{selection}")
            else:
                lines.extend(_render_lines(selection, depth + 1))
        lines.append(f"{pad}}}")
        return lines

    lines = [f"{pad}{node.kind} {{"]
    for child in node.nodes:
        lines.extend(_render_lines(child, depth + 1))
    lines.append(f"{pad}}}")
    return lines


__all__ = [
    "GraphQlNode",
    "ListAttribute",
    "MutationNode",
    "Operation",
    "QueryNode",
    "ScalarAttribute",
    "quote",
    "render",
]
