"""MDR catalog renderers."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from termsync.config.mdr import DEFAULT_CATALOG_TYPE

from .centraxx import CentraxxFileRenderer, CentraxxRestRenderer, build_cxx_url
from .ql4mdr import Ql4MdrRenderer
from .samply import SamplyRenderer

if TYPE_CHECKING:
    from termsync.domain.ports.rendering import OutputRenderer


class OutputFormat(StrEnum):
    CENTRAXX = "CENTRAXX"
    CENTRAXX_REST = "CENTRAXX-REST"
    SAMPLY = "SAMPLY"
    QL4MDR = "QL4MDR"

    @classmethod
    def parse(cls, value: str) -> OutputFormat:
        """Case-insensitive lookup; ``CXX`` is an alias of ``CentraXX``."""

        normalized = value.strip().upper()
        normalized = _ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            choices = ", ".join(FORMAT_CHOICES)
            raise ValueError(f"Unsupported output format {value!r} (choose from {choices})") from None


_ALIASES = {"CXX": "CENTRAXX", "CXX-REST": "CENTRAXX-REST"}
FORMAT_CHOICES = ("CXX", "CentraXX", "CXX-REST", "CentraXX-REST", "Samply", "QL4MDR")


def renderer_for(
    output_format: OutputFormat,
    *,
    catalog_type: str = DEFAULT_CATALOG_TYPE,
) -> OutputRenderer:
    if output_format is OutputFormat.CENTRAXX:
        return CentraxxFileRenderer(catalog_type=catalog_type)
    if output_format is OutputFormat.CENTRAXX_REST:
        return CentraxxRestRenderer(catalog_type=catalog_type)
    if output_format is OutputFormat.SAMPLY:
        return SamplyRenderer()
    return Ql4MdrRenderer()


__all__ = [
    "FORMAT_CHOICES",
    "CentraxxFileRenderer",
    "CentraxxRestRenderer",
    "OutputFormat",
    "Ql4MdrRenderer",
    "SamplyRenderer",
    "build_cxx_url",
    "renderer_for",
]
