"""MDR authentication drivers."""

from __future__ import annotations

from .basic import (
    AnonymousCredential,
    BasicAuthenticationDriver,
    BasicCredential,
    NoOpAuthenticationDriver,
)
from .centraxx import CentraxxAuthenticationDriver
from .oauth import LocalCallbackReceiver, OAuthAuthenticationDriver
from .tokens import BearerCredential, TokenResponse

__all__ = [
    "AnonymousCredential",
    "BasicAuthenticationDriver",
    "BasicCredential",
    "BearerCredential",
    "CentraxxAuthenticationDriver",
    "LocalCallbackReceiver",
    "NoOpAuthenticationDriver",
    "OAuthAuthenticationDriver",
    "TokenResponse",
]
