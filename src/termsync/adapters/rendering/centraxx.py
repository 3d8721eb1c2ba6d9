"""CentraXX MDR catalog renderers (XML import file and REST JSON)."""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from termsync.config.mdr import DEFAULT_CATALOG_TYPE
from termsync.domain.model import MimeType, RenderedDocument

if TYPE_CHECKING:
    from datetime import datetime

    from termsync.domain.model import Concept, TerminologyResourceExpansion

CXX_TAG_PREFIX = "tag:kairos.de,2017"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
CAPTION_LANGUAGES = ("en", "de")


def build_cxx_url(expansion: TerminologyResourceExpansion, concept: Concept | None = None) -> str:
    """Tag URI of a catalog, or of one of its entries when ``concept`` is given."""

    kind = "mdr/catentry" if concept is not None else "mdr/catalog"
    url = f"{CXX_TAG_PREFIX}:{kind}:{expansion.title}:{expansion.encoded_business_version}"
    if concept is not None:
        url += f":{concept.encoded_code}"
    return url


def format_catalog_date(value: datetime) -> str:
    """``yyyy-MM-dd'T'HH:mm:ss.SSSXXX`` as the CentraXX importer expects it."""

    offset = value.utcoffset()
    if offset is None or not offset:
        zone = "Z"
    else:
        minutes = int(offset.total_seconds()) // 60
        sign = "+" if minutes >= 0 else "-"
        hours, minutes = divmod(abs(minutes), 60)
        zone = f"{sign}{hours:02d}:{minutes:02d}"
    millis = value.microsecond // 1000
    return f"{value.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}{zone}"


def _text_element(parent: ET.Element, tag: str, text: str) -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = text
    return element


def _caption(parent: ET.Element, text: str) -> None:
    caption = ET.SubElement(parent, "Caption")
    for language in CAPTION_LANGUAGES:
        entry = ET.SubElement(caption, "Entry")
        _text_element(entry, "Language", language)
        _text_element(entry, "Name", text)


@dataclass(slots=True, frozen=True)
class CentraxxFileRenderer:
    """MDRDataExchange XML, entries sorted by code.

    ``Date`` is only written when ``catalog_date`` is fixed, so that rendering
    stays deterministic for the file currency check.
    """

    catalog_type: str = DEFAULT_CATALOG_TYPE
    catalog_date: datetime | None = None
    mime_type: ClassVar[MimeType] = MimeType.XML

    def render_catalog(self, expansion: TerminologyResourceExpansion) -> RenderedDocument:
        root = ET.Element("MDRDataExchange")
        catalog = ET.SubElement(ET.SubElement(root, "Catalogs"), "Catalog")
        _text_element(catalog, "Code", expansion.name)
        _caption(catalog, expansion.title)
        _text_element(catalog, "Uri", build_cxx_url(expansion))
        if self.catalog_date is not None:
            _text_element(catalog, "Date", format_catalog_date(self.catalog_date))
        _text_element(catalog, "Version", expansion.business_version)
        _text_element(catalog, "SystemUrl", expansion.canonical_url)
        _text_element(catalog, "CatalogType", self.catalog_type)
        entries = ET.SubElement(catalog, "Entries")
        for concept in sorted(expansion.concepts, key=lambda c: c.code):
            entry = ET.SubElement(entries, "CatalogEntry")
            _text_element(entry, "Code", concept.code)
            _caption(entry, concept.display)
            _text_element(entry, "Uri", build_cxx_url(expansion, concept))
        for tag in ("AttributeDomains", "AttributeValues", "RelationTypes"):
            ET.SubElement(root, tag)

        ET.indent(root, space="  ")
        content = f"{XML_DECLARATION}\n{ET.tostring(root, encoding='unicode')}\n"
        return RenderedDocument(content=content, mime_type=self.mime_type)


@dataclass(slots=True, frozen=True)
class CentraxxRestRenderer:
    """JSON body for the CentraXX ``catalogs/catalog`` endpoint."""

    catalog_type: str = DEFAULT_CATALOG_TYPE
    mime_type: ClassVar[MimeType] = MimeType.JSON

    def render_catalog(self, expansion: TerminologyResourceExpansion) -> RenderedDocument:
        catalog_uri = build_cxx_url(expansion)
        payload: dict[str, object] = {
            "caption": _rest_caption(expansion.title, expansion.description),
            "code": expansion.encoded_name,
            "uri": catalog_uri,
            "version": expansion.business_version,
            "systemUrl": expansion.canonical_url,
            "catalogType": self.catalog_type,
            "entries": [
                {
                    "caption": _rest_caption(concept.display, None),
                    "uri": build_cxx_url(expansion, concept),
                    "code": concept.code,
                    "parent": None,
                    "catalogUri": catalog_uri,
                    "modificationTime": None,
                }
                for concept in expansion.concepts
            ],
            "modificationTime": None,
        }
        return RenderedDocument(
            content=json.dumps(payload, indent=2, ensure_ascii=False),
            mime_type=self.mime_type,
        )


def _rest_caption(name: str, description: str | None) -> dict[str, dict[str, str | None]]:
    return {
        language: {"name": name, "description": description} for language in CAPTION_LANGUAGES
    }
