"""Error taxonomy of the conversion pipeline.

Run-level errors (configuration, source, endpoint validation) abort a run.
Per-resource errors are caught by the converter or the synchronization driver
and become an ``ERROR`` outcome for that resource only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from termsync.fhir import OperationOutcome


class PipelineNotConfiguredError(RuntimeError):
    """Raised when a pipeline is run before all of its stages are set."""


class EndpointValidationError(RuntimeError):
    """Raised when the synchronization target rejects the reachability check."""


class SourceError(RuntimeError):
    """Raised when the ingest collection cannot be obtained."""


class SourceUnavailableError(SourceError):
    """Network or filesystem failure while retrieving the collection."""


class BundleValidationError(SourceError):
    """The retrieved collection does not satisfy the structural requirements."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class TerminologyConversionError(RuntimeError):
    """Base class for errors that only affect a single resource."""


class RemoteServerError(TerminologyConversionError):
    """A terminology server answered with an error or an unparsable payload."""

    def __init__(
        self,
        message: str,
        *,
        outcome: OperationOutcome | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.outcome = outcome
        self.status_code = status_code

    @property
    def diagnostics(self) -> list[str]:
        if self.outcome is None:
            return []
        return [issue.diagnostics for issue in self.outcome.issue or [] if issue.diagnostics]


class ResourceNotFoundError(TerminologyConversionError):
    """A referenced resource could not be located."""


class ExpansionNotSupportedError(TerminologyConversionError):
    """Expansion was requested from a provider without a terminology endpoint."""


class MissingLinkError(TerminologyConversionError):
    """A collection entry lacks a recognizable link relation."""


class UnsupportedResourceTypeError(TerminologyConversionError):
    """A collection entry points at a resource kind that cannot be converted."""


class MissingExpansionError(TerminologyConversionError):
    """A value set has no expansion and the provider cannot compute one."""


class MissingImplicitValueSetError(TerminologyConversionError):
    """A code system does not declare its implicit value set."""


class IncompleteResourceError(TerminologyConversionError):
    """A resource lacks an element required for the catalog natural key."""


class SynchronizationError(RuntimeError):
    """A write or lookup against the MDR target failed."""


class AuthenticationError(RuntimeError):
    """No valid credential could be obtained."""


__all__ = [
    "AuthenticationError",
    "BundleValidationError",
    "EndpointValidationError",
    "ExpansionNotSupportedError",
    "IncompleteResourceError",
    "MissingExpansionError",
    "MissingImplicitValueSetError",
    "MissingLinkError",
    "PipelineNotConfiguredError",
    "RemoteServerError",
    "ResourceNotFoundError",
    "SourceError",
    "SourceUnavailableError",
    "SynchronizationError",
    "TerminologyConversionError",
    "UnsupportedResourceTypeError",
]
