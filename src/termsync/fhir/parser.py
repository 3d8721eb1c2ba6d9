"""Explicitly constructed parser for terminology resources."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from lxml import etree

from .models import RESOURCE_TYPES, resource_type_of

if TYPE_CHECKING:
    from pathlib import Path

    from .models import Resource

log = getLogger(__name__)

FHIR_NAMESPACE = "http://hl7.org/fhir"
SUPPORTED_SUFFIXES = frozenset({".json", ".xml"})


class FhirParseError(ValueError):
    """Raised when a document is not a valid resource of the expected shape."""


class UnsupportedDocumentError(FhirParseError):
    """The document is well-formed but is not one of the resource types read here."""


class FhirParser:
    """Parse and encode resources in JSON and XML.

    One instance is created by the composition root and handed to every provider
    that reads or writes resources. Validation is delegated to the
    ``fhir.resources`` models, which also keep primitive extensions such as a
    ``data-absent-reason`` on an otherwise empty ``display``.
    """

    def parse_json(self, text: str | bytes) -> Resource:
        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise FhirParseError(f"invalid JSON: {exc}") from exc
        if not isinstance(payload, dict) or "resourceType" not in payload:
            raise UnsupportedDocumentError("document is not a resource (no resourceType)")
        model = _model_for(str(payload["resourceType"]))
        try:
            return model.model_validate(payload)
        except ValueError as exc:
            raise FhirParseError(f"invalid {model.get_resource_type()}: {exc}") from exc

    def parse_xml(self, text: str | bytes) -> Resource:
        content = text.encode("utf-8") if isinstance(text, str) else text
        try:
            root = etree.fromstring(content)  # noqa: S320
        except etree.XMLSyntaxError as exc:
            raise FhirParseError(f"invalid XML: {exc}") from exc
        name = etree.QName(root)
        if name.namespace != FHIR_NAMESPACE:
            raise UnsupportedDocumentError(f"root element {name.text} is not a FHIR resource")
        model = _model_for(name.localname)
        try:
            return model.model_validate_xml(content)
        except ValueError as exc:
            raise FhirParseError(f"invalid {model.get_resource_type()}: {exc}") from exc

    def parse_file(self, path: Path) -> Resource:
        suffix = path.suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            raise UnsupportedDocumentError(f"unsupported file type: {path.name}")
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise FhirParseError(f"cannot read {path}: {exc}") from exc
        if suffix == ".json":
            return self.parse_json(content)
        return self.parse_xml(content)

    def parse_as[R: Resource](self, text: str | bytes, resource_type: type[R]) -> R:
        resource = self.parse_json(text)
        if not isinstance(resource, resource_type):
            raise FhirParseError(
                f"expected {resource_type.get_resource_type()}, got {resource_type_of(resource)}"
            )
        return resource

    def encode_json(self, resource: Resource, *, pretty: bool = False) -> str:
        encoded = resource.model_dump_json(by_alias=True, exclude_none=True)
        if not pretty:
            return encoded
        return json.dumps(json.loads(encoded), indent=2, ensure_ascii=False)


def _model_for(resource_type: str) -> type[Resource]:
    model = RESOURCE_TYPES.get(resource_type)
    if model is None:
        raise UnsupportedDocumentError(f"resources of type {resource_type} are not read")
    return model
