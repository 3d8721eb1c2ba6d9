"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    return resolve_settings({}, names)


def resolve_settings(
    overrides: Mapping[str, str | None],
    names: Sequence[str],
) -> dict[str, str]:
    """Resolve each name from ``overrides`` first, then from the environment.

    Blank values count as missing. All missing names are reported together.
    """

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = overrides.get(name)
        if value is None or not value.strip():
            value = os.getenv(name)
        if value is None or not value.strip():
            missing.append(name)
            continue
        values[name] = value

    if missing:
        raise MissingConfigurationError(missing)

    return values
