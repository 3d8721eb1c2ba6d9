"""Port for MDR synchronization backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from termsync.domain.errors import AuthenticationError, SynchronizationError
from termsync.domain.model import SynchronizationOutcome

if TYPE_CHECKING:
    from termsync.domain.model import TerminologyResourceExpansion

log = getLogger(__name__)


class MdrSynchronization(ABC):
    """Create-or-update state machine shared by every MDR backend.

    Subclasses provide the read-only ``is_present``/``is_current`` checks and the
    ``create``/``update`` writes; the decision between them lives here only.
    """

    requires_authentication: ClassVar[bool] = True

    def synchronize(self, expansion: TerminologyResourceExpansion) -> SynchronizationOutcome:
        label = expansion.label
        try:
            present = self.is_present(expansion)
            if present and self.is_current(expansion):
                log.info(f"{label} is present and current")
                return SynchronizationOutcome.NO_ACTION_NEEDED
            if present:
                log.info(f"{label} is present but stale, updating")
                return (
                    SynchronizationOutcome.UPDATED
                    if self.update(expansion)
                    else SynchronizationOutcome.ERROR
                )
            log.info(f"{label} is not present, creating")
            return (
                SynchronizationOutcome.CREATED
                if self.create(expansion)
                else SynchronizationOutcome.ERROR
            )
        except (SynchronizationError, AuthenticationError) as exc:
            log.error(f"Synchronization of {label} failed: {exc}")
            return SynchronizationOutcome.ERROR

    @abstractmethod
    def is_present(self, expansion: TerminologyResourceExpansion) -> bool:
        ...

    @abstractmethod
    def is_current(self, expansion: TerminologyResourceExpansion) -> bool:
        ...

    @abstractmethod
    def create(self, expansion: TerminologyResourceExpansion) -> bool:
        ...

    @abstractmethod
    def update(self, expansion: TerminologyResourceExpansion) -> bool:
        ...

    @abstractmethod
    def validate_endpoint(self) -> bool:
        """Check reachability and credentials of the target without writing."""
        ...


__all__ = ["MdrSynchronization"]
