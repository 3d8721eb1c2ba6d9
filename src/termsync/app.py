"""Application composition: configuration to providers, drivers and a pipeline run."""

from __future__ import annotations

from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from termsync.adapters.authentication import (
    BasicAuthenticationDriver,
    CentraxxAuthenticationDriver,
    NoOpAuthenticationDriver,
    OAuthAuthenticationDriver,
)
from termsync.adapters.directory import FhirDirectoryProvider
from termsync.adapters.fhir_server import FhirServerProvider, TerminologyServerClient
from termsync.adapters.http_resilience import ClientFactory, default_client_factory
from termsync.adapters.package_registry import PackageRegistryProvider
from termsync.adapters.rendering import renderer_for
from termsync.adapters.snomed_ecl import EclQuery, SnomedCtEclProvider
from termsync.adapters.synchronization import (
    CentraxxMdrSynchronization,
    FileMdrSynchronization,
    Ql4MdrSynchronization,
)
from termsync.adapters.synchronization.http import HttpMdrSynchronization
from termsync.config import (
    DEFAULT_CATALOG_TYPE,
    DEFAULT_PACKAGE_REGISTRY_URL,
    DEFAULT_SNOMED_CT_EDITION,
    BasicAuthConfiguration,
    CentraxxAuthConfiguration,
    NoOpAuthenticationConfiguration,
    OAuthConfiguration,
)
from termsync.domain.pipeline import ConversionPipeline, IngestPipeline, SynchronizationPipeline
from termsync.fhir import FhirParser

if TYPE_CHECKING:
    from pathlib import Path

    from termsync.adapters.authentication.oauth import AuthorizationCodeReceiver
    from termsync.adapters.rendering import OutputFormat
    from termsync.config import (
        AuthenticationConfiguration,
        CentraxxConfiguration,
        Ql4MdrConfiguration,
    )
    from termsync.domain.pipeline import SynchronizationSummary
    from termsync.domain.ports import IngestProvider, MdrSynchronization
    from termsync.domain.ports.authentication import AuthenticationDriver, Credential

log = getLogger(__name__)


class SynchronizationTarget(StrEnum):
    FILE = "file"
    CENTRAXX = "centraxx"
    QL4MDR = "ql4mdr"


def build_terminology_server_client(
    endpoint: str,
    *,
    parser: FhirParser,
    client_factory: ClientFactory = default_client_factory,
) -> TerminologyServerClient:
    return TerminologyServerClient(endpoint=endpoint, parser=parser, client_factory=client_factory)


def build_directory_provider(
    directory: Path,
    *,
    parser: FhirParser | None = None,
    terminology_server: str | None = None,
    client_factory: ClientFactory = default_client_factory,
) -> FhirDirectoryProvider:
    parser = parser or FhirParser()
    expansion_client = (
        build_terminology_server_client(
            terminology_server,
            parser=parser,
            client_factory=client_factory,
        )
        if terminology_server
        else None
    )
    return FhirDirectoryProvider(directory, parser, expansion_client=expansion_client)


def build_fhir_server_provider(
    endpoint: str,
    bundle_id: str,
    *,
    parser: FhirParser | None = None,
    client_factory: ClientFactory = default_client_factory,
) -> FhirServerProvider:
    client = build_terminology_server_client(
        endpoint,
        parser=parser or FhirParser(),
        client_factory=client_factory,
    )
    return FhirServerProvider(client, bundle_id)


def build_package_provider(
    package_name: str,
    *,
    package_version: str | None = None,
    registry_url: str = DEFAULT_PACKAGE_REGISTRY_URL,
    terminology_server: str | None = None,
    parser: FhirParser | None = None,
    client_factory: ClientFactory = default_client_factory,
) -> PackageRegistryProvider:
    parser = parser or FhirParser()
    expansion_client = (
        build_terminology_server_client(
            terminology_server,
            parser=parser,
            client_factory=client_factory,
        )
        if terminology_server
        else None
    )
    return PackageRegistryProvider(
        package_name,
        parser,
        package_version=package_version,
        registry_url=registry_url,
        expansion_client=expansion_client,
        client_factory=client_factory,
    )


def build_ecl_provider(  # noqa: PLR0913
    *,
    ecl: str,
    terminology_server: str,
    value_set_name: str,
    value_set_title: str,
    value_set_version: str,
    snomed_ct_edition: str = DEFAULT_SNOMED_CT_EDITION,
    snomed_ct_version: str | None = None,
    output_directory: Path | None = None,
    parser: FhirParser | None = None,
    client_factory: ClientFactory = default_client_factory,
) -> SnomedCtEclProvider:
    client = build_terminology_server_client(
        terminology_server,
        parser=parser or FhirParser(),
        client_factory=client_factory,
    )
    query = EclQuery(
        ecl=ecl,
        client=client,
        value_set_name=value_set_name,
        value_set_title=value_set_title,
        value_set_version=value_set_version,
        snomed_ct_edition=snomed_ct_edition,
        snomed_ct_version=snomed_ct_version,
        output_directory=output_directory,
    )
    return SnomedCtEclProvider(query)


def build_authentication_driver(
    config: AuthenticationConfiguration,
    *,
    client_factory: ClientFactory = default_client_factory,
    authorization_code_receiver: AuthorizationCodeReceiver | None = None,
) -> AuthenticationDriver[Credential]:
    if isinstance(config, CentraxxAuthConfiguration):
        return CentraxxAuthenticationDriver(config, client_factory=client_factory)
    if isinstance(config, OAuthConfiguration):
        return OAuthAuthenticationDriver(
            config,
            authorization_code_receiver=authorization_code_receiver,
            client_factory=client_factory,
        )
    if isinstance(config, BasicAuthConfiguration):
        return BasicAuthenticationDriver(config)
    return NoOpAuthenticationDriver()


def build_file_target(
    output_directory: Path,
    output_format: OutputFormat,
    *,
    catalog_type: str = DEFAULT_CATALOG_TYPE,
) -> FileMdrSynchronization:
    return FileMdrSynchronization(
        output_directory,
        renderer_for(output_format, catalog_type=catalog_type),
    )


def build_centraxx_target(
    config: CentraxxConfiguration,
    *,
    client_factory: ClientFactory = default_client_factory,
) -> CentraxxMdrSynchronization:
    return CentraxxMdrSynchronization(
        config,
        build_authentication_driver(config.authentication, client_factory=client_factory),
        client_factory=client_factory,
    )


def build_ql4mdr_target(
    config: Ql4MdrConfiguration,
    *,
    client_factory: ClientFactory = default_client_factory,
    authorization_code_receiver: AuthorizationCodeReceiver | None = None,
) -> Ql4MdrSynchronization:
    return Ql4MdrSynchronization(
        config,
        build_authentication_driver(
            config.authentication,
            client_factory=client_factory,
            authorization_code_receiver=authorization_code_receiver,
        ),
        client_factory=client_factory,
    )


def run_pipeline(
    provider: IngestProvider,
    driver: MdrSynchronization,
    *,
    authentication: AuthenticationConfiguration | None = None,
    cleanup: bool = False,
    validate_endpoint: bool = True,
) -> SynchronizationSummary | None:
    """Run one conversion and log the per-resource summary.

    File targets need no authentication configuration; for other drivers the
    configuration carried by the driver's MDR settings is used when none is given.
    """

    if authentication is None:
        if isinstance(driver, HttpMdrSynchronization):
            authentication = driver.config.authentication
        elif not driver.requires_authentication:
            authentication = NoOpAuthenticationConfiguration()
    pipeline = ConversionPipeline(
        ingest=IngestPipeline(provider, cleanup=cleanup),
        synchronization=SynchronizationPipeline(driver),
        authentication=authentication,
    )
    summary = pipeline.run(validate_endpoint=validate_endpoint)
    if summary is not None:
        log_summary(summary)
    return summary


def log_summary(summary: SynchronizationSummary) -> None:
    log.info("Synchronization is complete. Here is the summary:")
    for label, outcome in summary:
        log.info(f"{label} -> {outcome.name}")


__all__ = [
    "SynchronizationTarget",
    "build_authentication_driver",
    "build_centraxx_target",
    "build_directory_provider",
    "build_ecl_provider",
    "build_fhir_server_provider",
    "build_file_target",
    "build_package_provider",
    "build_ql4mdr_target",
    "build_terminology_server_client",
    "log_summary",
    "run_pipeline",
]
