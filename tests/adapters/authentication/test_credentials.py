from __future__ import annotations

import base64
from datetime import UTC, datetime, timedelta

import pytest

from termsync.adapters.authentication import (
    AnonymousCredential,
    BasicAuthenticationDriver,
    BearerCredential,
    NoOpAuthenticationDriver,
)
from termsync.config import BasicAuthConfiguration
from termsync.domain.errors import AuthenticationError
from termsync.domain.ports.authentication import AuthenticationDriver, Credential

ISSUED = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def _bearer(lifetime_seconds: int = 300) -> BearerCredential:
    return BearerCredential(
        access_token="abc",
        token_type="bearer",
        issued_at=ISSUED,
        lifetime=timedelta(seconds=lifetime_seconds),
    )


def test_bearer_expires_strictly_after_its_lifetime() -> None:
    credential = _bearer()

    assert not credential.is_expired(ISSUED + timedelta(seconds=300))
    assert credential.is_expired(ISSUED + timedelta(seconds=301))
    assert credential.authorization_header == "bearer abc"


def test_basic_credential_header() -> None:
    driver = BasicAuthenticationDriver(BasicAuthConfiguration(username="user", password="pa:ss"))

    header = driver.authorization_headers()["Authorization"]

    assert header == "Basic " + base64.b64encode(b"user:pa:ss").decode()
    assert driver.credential is not None
    assert not driver.credential.is_expired(ISSUED + timedelta(days=3650))


def test_anonymous_access_sends_no_header() -> None:
    driver = NoOpAuthenticationDriver()

    assert driver.authorization_headers() == {}
    assert isinstance(driver.current_credential(), AnonymousCredential)
    assert isinstance(driver.current_credential(), Credential)


class CountingDriver(AuthenticationDriver[BearerCredential]):
    def __init__(self, now: list[datetime]) -> None:
        super().__init__(clock=lambda: now[0])
        self.logins = 0

    def login(self) -> BearerCredential:
        self.logins += 1
        return _bearer(lifetime_seconds=60)


def test_driver_logs_in_again_only_after_expiry() -> None:
    now = [ISSUED]
    driver = CountingDriver(now)

    driver.current_credential()
    now[0] = ISSUED + timedelta(seconds=60)
    driver.current_credential()
    assert driver.logins == 1

    now[0] = ISSUED + timedelta(seconds=61)
    driver.current_credential()
    assert driver.logins == 2


def test_failed_login_propagates() -> None:
    class FailingDriver(AuthenticationDriver[BearerCredential]):
        def login(self) -> BearerCredential:
            raise AuthenticationError("invalid_grant")

    with pytest.raises(AuthenticationError):
        FailingDriver().authorization_headers()
