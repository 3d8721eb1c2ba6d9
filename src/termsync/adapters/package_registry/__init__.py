"""Package registry adapter."""

from __future__ import annotations

from .provider import DownloadResult, PackageRegistryProvider
from .schema import PackageDist, PackageManifest, PackageVersionInfo

__all__ = [
    "DownloadResult",
    "PackageDist",
    "PackageManifest",
    "PackageRegistryProvider",
    "PackageVersionInfo",
]
