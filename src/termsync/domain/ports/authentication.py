"""Port for MDR credential providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from termsync.domain.errors import AuthenticationError

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(UTC)


@runtime_checkable
class Credential(Protocol):
    @property
    def authorization_header(self) -> str | None:
        """Value for the ``Authorization`` header, ``None`` for anonymous access."""
        ...

    def is_expired(self, now: datetime) -> bool: ...


class AuthenticationDriver[C: Credential](ABC):
    """Hold one credential and reacquire it once it has expired."""

    def __init__(self, *, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._credential: C | None = None

    @property
    def credential(self) -> C | None:
        return self._credential

    def needs_reauthentication(self) -> bool:
        return self._credential is None or self._credential.is_expired(self._clock())

    def current_credential(self) -> C:
        if self.needs_reauthentication():
            log.debug(f"{type(self).__name__}: acquiring credential")
            self._credential = self.login()
        if self._credential is None:
            raise AuthenticationError("missing mdr credential")
        return self._credential

    def authorization_headers(self) -> dict[str, str]:
        header = self.current_credential().authorization_header
        return {"Authorization": header} if header else {}

    @abstractmethod
    def login(self) -> C:
        """Obtain a fresh credential or raise ``AuthenticationError``."""
        ...


__all__ = ["AuthenticationDriver", "Credential", "utcnow"]
