"""Errors raised while resolving target and source settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ConfigurationError(RuntimeError):
    """Settings for a run are unusable; the CLI exits with status 2."""


class MissingConfigurationError(ConfigurationError):
    """Settings that were neither passed explicitly nor found in the environment."""

    def __init__(self, names: Sequence[str]) -> None:
        self.missing = sorted(names)
        super().__init__(f"Missing configuration for: {', '.join(self.missing)}")


class MissingEndpointError(ConfigurationError):
    def __init__(self, owner: str, endpoint: str) -> None:
        self.owner = owner
        self.endpoint = endpoint
        super().__init__(f"{owner} has no {endpoint}")
