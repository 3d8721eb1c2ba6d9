from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
import pytest

from termsync.adapters.fhir_server import (
    FhirServerProvider,
    KnownFhirServer,
    TerminologyServerClient,
    has_post_coordinated_expressions,
)
from termsync.domain.errors import RemoteServerError, SourceUnavailableError
from termsync.domain.pipeline import IngestPipeline
from termsync.fhir import CodeSystem, ValueSet
from tests.support.http import RecordingHandler, json_response, make_client_factory
from tests.support.resources import (
    capability_statement,
    code_system,
    collection,
    collection_entry,
    operation_outcome,
    value_set,
)

if TYPE_CHECKING:
    from termsync.fhir import FhirParser

ENDPOINT = "https://tx.example.org/fhir"


def _client(parser: FhirParser, handler: RecordingHandler) -> TerminologyServerClient:
    return TerminologyServerClient(
        endpoint=ENDPOINT,
        parser=parser,
        client_factory=make_client_factory(handler),
    )


@pytest.mark.parametrize(
    ("software", "expected"),
    [
        ("Ontoserver", KnownFhirServer.ONTOSERVER),
        ("Snowstorm", KnownFhirServer.SNOWSTORM),
        ("HAPI FHIR Server", KnownFhirServer.HAPI),
        ("Firely Server (Vonk)", KnownFhirServer.VONK),
        ("Reference Server", KnownFhirServer.REFERENCE),
        ("Something else", KnownFhirServer.OTHER),
        (None, KnownFhirServer.OTHER),
    ],
)
def test_server_classification(software: str | None, expected: KnownFhirServer) -> None:
    assert KnownFhirServer.from_software_name(software) is expected


def test_server_kind_is_fetched_once(parser: FhirParser) -> None:
    handler = RecordingHandler(
        {("GET", "/fhir/metadata"): json_response(200, capability_statement("Ontoserver"))}
    )
    client = _client(parser, handler)

    assert client.server_kind() is KnownFhirServer.ONTOSERVER
    assert client.server_kind() is KnownFhirServer.ONTOSERVER
    assert len(handler.requests) == 1
    assert handler.requests[0].headers["Accept"] == "application/json"


def test_expand_posts_the_value_set(parser: FhirParser) -> None:
    expanded = value_set(contains=[{"system": "http://loinc.org", "code": "1-8"}])
    handler = RecordingHandler(
        {
            ("GET", "/fhir/metadata"): json_response(200, capability_statement("Ontoserver")),
            ("POST", "/fhir/ValueSet/$expand"): json_response(200, expanded),
        }
    )

    result = _client(parser, handler).expand(ValueSet.model_validate(value_set()))

    assert result.expansion is not None
    assert result.expansion.contains is not None
    assert result.expansion.contains[0].code == "1-8"
    body = json.loads(handler.requests[-1].content)
    assert body["resourceType"] == "ValueSet"
    assert handler.requests[-1].headers["Content-Type"] == "application/json"


def test_snowstorm_receives_a_parameters_body(parser: FhirParser) -> None:
    handler = RecordingHandler(
        {
            ("GET", "/fhir/metadata"): json_response(200, capability_statement("Snowstorm")),
            ("POST", "/fhir/ValueSet/$expand"): json_response(200, value_set(contains=[])),
        }
    )

    _client(parser, handler).expand(ValueSet.model_validate(value_set()))

    body = json.loads(handler.requests[-1].content)
    assert body["resourceType"] == "Parameters"
    assert body["parameter"][0]["name"] == "valueSet"
    assert body["parameter"][0]["resource"]["url"] == "http://example.org/vs2"


def test_operation_outcome_becomes_remote_server_error(parser: FhirParser) -> None:
    handler = RecordingHandler(
        {
            ("GET", "/fhir/metadata"): json_response(200, capability_statement("Ontoserver")),
            ("POST", "/fhir/ValueSet/$expand"): json_response(
                422, operation_outcome("Unable to find CodeSystem", "second issue")
            ),
        }
    )

    with pytest.raises(RemoteServerError) as exc:
        _client(parser, handler).expand(ValueSet.model_validate(value_set()))

    assert exc.value.status_code == 422
    assert exc.value.diagnostics == ["Unable to find CodeSystem", "second issue"]


def test_non_fhir_response_is_reported(parser: FhirParser, caplog: pytest.LogCaptureFixture) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(200, text="<html>welcome</html>")

    client = TerminologyServerClient(
        endpoint=ENDPOINT,
        parser=parser,
        client_factory=make_client_factory(handler),
    )

    with caplog.at_level("ERROR"), pytest.raises(RemoteServerError):
        client.fetch_resource("metadata", CodeSystem)
    assert "did you forget '/fhir'?" in caplog.text


def test_transport_errors_become_remote_server_errors(parser: FhirParser) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = TerminologyServerClient(
        endpoint=ENDPOINT,
        parser=parser,
        client_factory=make_client_factory(handler),
    )

    with pytest.raises(RemoteServerError):
        client.fetch_resource("CodeSystem/x", CodeSystem)


def test_post_coordinated_snomed_codes_are_detected() -> None:
    plain = ValueSet.model_validate(
        value_set(include=[{"system": "http://snomed.info/sct", "concept": [{"code": "123"}]}])
    )
    expression = ValueSet.model_validate(
        value_set(
            include=[
                {"system": "http://snomed.info/sct", "concept": [{"code": "123:456=789"}]}
            ]
        )
    )
    other_system = ValueSet.model_validate(
        value_set(include=[{"system": "http://example.org", "concept": [{"code": "a:b"}]}])
    )

    assert not has_post_coordinated_expressions(plain)
    assert has_post_coordinated_expressions(expression)
    assert not has_post_coordinated_expressions(other_system)


def test_provider_reads_bundle_and_linked_resources(parser: FhirParser) -> None:
    entry = collection_entry(code_system(), inline=False)
    entry["link"][1]["url"] = f"{ENDPOINT}/CodeSystem/example"  # type: ignore[index]
    handler = RecordingHandler(
        {
            ("GET", "/fhir/metadata"): json_response(200, capability_statement("Ontoserver")),
            ("GET", "/fhir/Bundle/terminology"): json_response(200, collection(entry)),
            ("GET", "/fhir/CodeSystem/example"): json_response(200, code_system()),
        }
    )
    provider = FhirServerProvider(_client(parser, handler), "terminology")

    outcomes = IngestPipeline(provider).run_streaming()

    assert outcomes is not None
    converted = list(outcomes)
    assert [o.canonical_url for o in converted] == ["http://example.org/vs1"]
    assert converted[0].succeeded
    assert provider.supports_expansion()


def test_relative_resource_links_resolve_against_the_endpoint(parser: FhirParser) -> None:
    handler = RecordingHandler(
        {("GET", "/fhir/ValueSet/example"): json_response(200, value_set())}
    )

    resource = _client(parser, handler).fetch_resource("ValueSet/example", ValueSet)

    assert resource.name == "ExampleValues"
    assert str(handler.requests[0].url) == f"{ENDPOINT}/ValueSet/example"


def test_provider_reports_missing_bundle_as_unavailable(parser: FhirParser) -> None:
    handler = RecordingHandler(
        {
            ("GET", "/fhir/metadata"): json_response(200, capability_statement("HAPI FHIR")),
            ("GET", "/fhir/Bundle/missing"): json_response(
                404, operation_outcome("Resource Bundle/missing is not known")
            ),
        }
    )

    with pytest.raises(SourceUnavailableError):
        FhirServerProvider(_client(parser, handler), "missing").retrieve_resource_collection()
