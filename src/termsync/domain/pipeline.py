"""Ingest, synchronization and the end-to-end conversion pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from termsync.fhir import entries

from .conversion import BundleConverter
from .errors import EndpointValidationError, PipelineNotConfiguredError
from .model import SynchronizationOutcome

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from termsync.config.authentication import AuthenticationConfiguration

    from .model import ConversionOutcome
    from .ports.ingest import IngestProvider
    from .ports.synchronization import MdrSynchronization

log = getLogger(__name__)

type SynchronizationSummary = list[tuple[str, SynchronizationOutcome]]


class IngestPipeline:
    def __init__(self, provider: IngestProvider, *, cleanup: bool = False) -> None:
        self.provider = provider
        self.cleanup_enabled = cleanup
        self._converter = BundleConverter(provider)

    def run_streaming(self) -> Iterator[ConversionOutcome] | None:
        """Retrieve the collection and return the lazy conversion sequence.

        ``None`` means the provider produced no collection at all.
        """

        bundle = self.provider.retrieve_resource_collection()
        if bundle is None:
            return None
        log.info(f"Retrieved a collection with {len(entries(bundle))} entries")
        return self._converter.convert_bundle(bundle)

    def cleanup(self) -> None:
        if self.cleanup_enabled:
            log.warning("cleaning up temporary artifacts")
            self.provider.cleanup_temporary_artifacts()


class SynchronizationPipeline:
    def __init__(self, driver: MdrSynchronization) -> None:
        self.driver = driver

    def run_synchronization(
        self,
        outcomes: Iterable[ConversionOutcome],
    ) -> Iterator[tuple[str, SynchronizationOutcome]]:
        for outcome in outcomes:
            if outcome.expansion is None:
                yield outcome.label, SynchronizationOutcome.ERROR
                continue
            yield outcome.label, self.driver.synchronize(outcome.expansion)

    def validate_endpoint(self) -> bool:
        return self.driver.validate_endpoint()


@dataclass(slots=True)
class ConversionPipeline:
    """Single-run wiring of one ingest stage, one synchronization stage and auth."""

    ingest: IngestPipeline | None = None
    synchronization: SynchronizationPipeline | None = None
    authentication: AuthenticationConfiguration | None = None

    def is_configured(self) -> bool:
        if self.ingest is None or self.synchronization is None:
            return False
        return (
            self.authentication is not None
            or not self.synchronization.driver.requires_authentication
        )

    def run(self, *, validate_endpoint: bool = True) -> SynchronizationSummary | None:
        """Convert and synchronize every resource, in collection order.

        Returns ``None`` when ingest produced no collection. Raises
        ``PipelineNotConfiguredError`` before any I/O if a stage is missing and
        ``EndpointValidationError`` when the target rejects the reachability check.
        """

        if not self.is_configured() or self.ingest is None or self.synchronization is None:
            raise PipelineNotConfiguredError(
                "the pipeline needs an ingest stage, a synchronization stage "
                "and an authentication configuration for non-file targets"
            )
        ingest = self.ingest
        synchronization = self.synchronization

        if validate_endpoint and not synchronization.validate_endpoint():
            raise EndpointValidationError(
                f"endpoint validation failed for {type(synchronization.driver).__name__}"
            )

        try:
            outcomes = ingest.run_streaming()
            if outcomes is None:
                log.error("An error occurred during conversion (see above for details)")
                return None
            return list(synchronization.run_synchronization(outcomes))
        finally:
            ingest.cleanup()


__all__ = [
    "ConversionPipeline",
    "IngestPipeline",
    "SynchronizationPipeline",
    "SynchronizationSummary",
]
