"""MDR synchronization drivers."""

from __future__ import annotations

from .centraxx import CentraxxMdrSynchronization
from .files import FileMdrSynchronization
from .ql4mdr import Ql4MdrSynchronization

__all__ = [
    "CentraxxMdrSynchronization",
    "FileMdrSynchronization",
    "Ql4MdrSynchronization",
]
