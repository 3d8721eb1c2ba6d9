from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from termsync.domain.model import Concept, TerminologyResourceExpansion
from termsync.fhir import FhirParser

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def parser() -> FhirParser:
    return FhirParser()


@pytest.fixture
def expansion() -> TerminologyResourceExpansion:
    return TerminologyResourceExpansion(
        canonical_url="http://example.org/vs1",
        name="ExampleCodes",
        title="Example Codes",
        business_version="1.0.0",
        description="Codes used in tests",
        concepts=(
            Concept(system="http://example.org/cs1", code="B", display="Beta"),
            Concept(system="http://example.org/cs1", code="A", display="Alpha"),
        ),
    )


@pytest.fixture
def source_directory(tmp_path: Path) -> Path:
    directory = tmp_path / "source"
    directory.mkdir()
    return directory


@pytest.fixture
def output_directory(tmp_path: Path) -> Path:
    return tmp_path / "output"
