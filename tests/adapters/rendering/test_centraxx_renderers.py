from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING

import pytest

from termsync.adapters.rendering import (
    CentraxxFileRenderer,
    CentraxxRestRenderer,
    OutputFormat,
    Ql4MdrRenderer,
    SamplyRenderer,
    build_cxx_url,
    renderer_for,
)
from termsync.adapters.rendering.centraxx import format_catalog_date
from termsync.domain.model import MimeType

if TYPE_CHECKING:
    from termsync.domain.model import TerminologyResourceExpansion


def test_file_renderer_sorts_entries_by_code(expansion: TerminologyResourceExpansion) -> None:
    document = CentraxxFileRenderer().render_catalog(expansion)

    assert document.mime_type is MimeType.XML
    assert document.content.startswith(
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n<MDRDataExchange>'
    )
    root = ET.fromstring(document.content.split("\n", 1)[1])  # noqa: S314
    catalog = root.find("Catalogs/Catalog")
    assert catalog is not None
    assert catalog.findtext("Code") == "ExampleCodes"
    assert catalog.findtext("Version") == "1.0.0"
    assert catalog.findtext("SystemUrl") == "http://example.org/vs1"
    assert catalog.findtext("CatalogType") == "FHIR"
    assert catalog.find("Date") is None
    assert [e.findtext("Code") for e in catalog.iter("CatalogEntry")] == ["A", "B"]
    languages = [e.findtext("Language") for e in catalog.findall("Caption/Entry")]
    assert languages == ["en", "de"]
    assert [child.tag for child in root] == [
        "Catalogs",
        "AttributeDomains",
        "AttributeValues",
        "RelationTypes",
    ]


def test_file_renderer_is_deterministic(expansion: TerminologyResourceExpansion) -> None:
    renderer = CentraxxFileRenderer(catalog_type="LOCAL")

    assert renderer.render_catalog(expansion) == renderer.render_catalog(expansion)


def test_rest_renderer_is_deterministic(expansion: TerminologyResourceExpansion) -> None:
    first = CentraxxRestRenderer().render_catalog(expansion)
    second = CentraxxRestRenderer().render_catalog(expansion)

    assert first.content == second.content
    assert first == second


def test_fixed_catalog_date_is_rendered(expansion: TerminologyResourceExpansion) -> None:
    renderer = CentraxxFileRenderer(catalog_date=datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=UTC))

    root = ET.fromstring(renderer.render_catalog(expansion).content.split("\n", 1)[1])  # noqa: S314

    assert root.findtext("Catalogs/Catalog/Date") == "2024-05-06T07:08:09.123Z"


def test_catalog_date_with_offset() -> None:
    value = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-5, minutes=-30)))

    assert format_catalog_date(value) == "2024-01-01T12:00:00.000-05:30"


def test_catalog_and_entry_uris(expansion: TerminologyResourceExpansion) -> None:
    assert build_cxx_url(expansion) == "tag:kairos.de,2017:mdr/catalog:Example Codes:1.0.0"
    assert build_cxx_url(expansion, expansion.concepts[0]) == (
        "tag:kairos.de,2017:mdr/catentry:Example Codes:1.0.0:B"
    )


def test_rest_renderer_payload(expansion: TerminologyResourceExpansion) -> None:
    document = CentraxxRestRenderer(catalog_type="FHIR").render_catalog(expansion)

    assert document.mime_type is MimeType.JSON
    payload = json.loads(document.content)
    assert payload["code"] == "ExampleCodes"
    assert payload["version"] == "1.0.0"
    assert payload["caption"]["de"] == {
        "name": "Example Codes",
        "description": "Codes used in tests",
    }
    assert [entry["code"] for entry in payload["entries"]] == ["B", "A"]
    assert payload["entries"][0]["catalogUri"] == payload["uri"]


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("CXX", OutputFormat.CENTRAXX),
        ("centraxx", OutputFormat.CENTRAXX),
        ("CXX-REST", OutputFormat.CENTRAXX_REST),
        ("CentraXX-REST", OutputFormat.CENTRAXX_REST),
        ("Samply", OutputFormat.SAMPLY),
        ("ql4mdr", OutputFormat.QL4MDR),
    ],
)
def test_output_format_aliases(value: str, expected: OutputFormat) -> None:
    assert OutputFormat.parse(value) is expected


def test_unknown_output_format() -> None:
    with pytest.raises(ValueError, match="Unsupported output format"):
        OutputFormat.parse("csv")


def test_renderer_for_each_format() -> None:
    assert isinstance(renderer_for(OutputFormat.CENTRAXX), CentraxxFileRenderer)
    assert isinstance(renderer_for(OutputFormat.CENTRAXX_REST), CentraxxRestRenderer)
    assert isinstance(renderer_for(OutputFormat.SAMPLY), SamplyRenderer)
    assert isinstance(renderer_for(OutputFormat.QL4MDR), Ql4MdrRenderer)
    assert renderer_for(OutputFormat.QL4MDR).mime_type.file_extension == ".graphql"
