"""Samply common-schema catalog renderer."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from termsync.domain.model import MimeType, RenderedDocument

if TYPE_CHECKING:
    from termsync.domain.model import TerminologyResourceExpansion

SAMPLY_NAMESPACE = "http://schema.samply.de/mdr/common"
URL_SLOT_KEY = "fhir.ValueSet.url"
VERSION_SLOT_KEY = "fhir.ValueSet.version"


def _definitions(parent: ET.Element, designation: str, definition: str | None) -> None:
    block = ET.SubElement(ET.SubElement(parent, "definitions"), "definition", {"lang": "en"})
    ET.SubElement(block, "designation").text = designation
    if definition is not None:
        ET.SubElement(block, "definition").text = definition


def _slot(parent: ET.Element, key: str, value: str) -> None:
    slot = ET.SubElement(parent, "slot")
    ET.SubElement(slot, "key").text = key
    ET.SubElement(slot, "value").text = value


@dataclass(slots=True, frozen=True)
class SamplyRenderer:
    mime_type: ClassVar[MimeType] = MimeType.XML

    def render_catalog(self, expansion: TerminologyResourceExpansion) -> RenderedDocument:
        root = ET.Element("catalog", {"xmlns": SAMPLY_NAMESPACE})
        _definitions(root, expansion.title, expansion.description)
        slots = ET.SubElement(root, "slots")
        _slot(slots, URL_SLOT_KEY, expansion.canonical_url)
        _slot(slots, VERSION_SLOT_KEY, expansion.business_version)
        for concept in expansion.concepts:
            code = ET.SubElement(root, "code", {"code": concept.code, "isValid": "true"})
            _definitions(code, concept.code, concept.display)

        ET.indent(root, space="  ")
        content = f'<?xml version="1.0" encoding="UTF-8"?>\n{ET.tostring(root, encoding="unicode")}\n'
        return RenderedDocument(content=content, mime_type=self.mime_type)
