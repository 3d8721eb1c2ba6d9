"""Ingest provider downloading a terminology package from a package registry."""

from __future__ import annotations

import asyncio
import shutil
import tarfile
import tempfile
from enum import StrEnum
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from termsync.adapters.directory import FhirDirectoryProvider
from termsync.adapters.http_resilience import ClientFactory, default_client_factory
from termsync.config.http_resilience import join_url
from termsync.config.sources import DEFAULT_PACKAGE_REGISTRY_URL, package_registry_resilience
from termsync.domain.ports.ingest import IngestProvider

from .schema import PackageManifest

if TYPE_CHECKING:
    from termsync.adapters.fhir_server import TerminologyServerClient
    from termsync.adapters.http_resilience import ResilientClient
    from termsync.config.http_resilience import ResilienceConfig
    from termsync.fhir import Bundle, BundleEntry, FhirParser, Resource, ValueSet

log = getLogger(__name__)

PACKAGE_ROOT = "package"


class DownloadResult(StrEnum):
    SUCCESS = "SUCCESS"
    NO_SUCH_PACKAGE = "NO_SUCH_PACKAGE"
    NO_SUCH_VERSION = "NO_SUCH_VERSION"
    ERROR = "ERROR"


class PackageRegistryProvider(IngestProvider):
    """Download ``name@version`` (latest when unpinned), extract it and read it as a directory.

    Both the download directory and the extraction directory are temporary and
    removed by ``cleanup_temporary_artifacts``.
    """

    def __init__(
        self,
        package_name: str,
        parser: FhirParser,
        *,
        package_version: str | None = None,
        registry_url: str = DEFAULT_PACKAGE_REGISTRY_URL,
        expansion_client: TerminologyServerClient | None = None,
        resilience: ResilienceConfig | None = None,
        client_factory: ClientFactory = default_client_factory,
    ) -> None:
        self.package_name = package_name
        self.package_version = package_version
        self.registry_url = registry_url
        self.parser = parser
        self.expansion_client = expansion_client
        self.resilience = resilience or package_registry_resilience()
        self.client_factory = client_factory
        self.download_directory: Path | None = None
        self.package_directory: Path | None = None
        self._directory_provider: FhirDirectoryProvider | None = None

    @property
    def package_label(self) -> str:
        return f"{self.package_name}@{self.package_version or 'latest'}"

    def download_package(self) -> DownloadResult:
        try:
            return asyncio.run(self._download_package_async())
        except httpx.HTTPError as exc:
            log.error(f"Error when downloading {self.package_label}: {exc}")
        except ValueError as exc:
            log.error(f"Unexpected registry response for {self.package_name}: {exc}")
        except (tarfile.TarError, OSError) as exc:
            log.error(f"Error when extracting {self.package_label}: {exc}")
        return DownloadResult.ERROR

    def retrieve_resource_collection(self) -> Bundle | None:
        result = self.download_package()
        if result is not DownloadResult.SUCCESS:
            log.error(f"Error when downloading package {self.package_label} from {self.registry_url}: {result}")
            return None
        log.info(f"Downloaded package {self.package_label} from {self.registry_url}")
        return self._delegate().retrieve_resource_collection()

    def get_resource_by_link(self, entry: BundleEntry, bundle: Bundle) -> Resource:
        return self._delegate().get_resource_by_link(entry, bundle)

    def supports_expansion(self) -> bool:
        return self.expansion_client is not None

    def expand_value_set(self, value_set: ValueSet) -> ValueSet:
        return self._delegate().expand_value_set(value_set)

    def cleanup_temporary_artifacts(self) -> None:
        for directory in (self.download_directory, self.package_directory):
            if directory is None:
                continue
            log.info(f"Deleting directory {directory}")
            shutil.rmtree(directory, ignore_errors=True)
            if directory.exists():
                log.error(f"Error deleting {directory}")
        self.download_directory = None
        self.package_directory = None

    def _delegate(self) -> FhirDirectoryProvider:
        if self._directory_provider is None:
            if self.package_directory is None:
                self.package_directory = Path(tempfile.mkdtemp(prefix=f"{self.package_name}_"))
            self._directory_provider = FhirDirectoryProvider(
                self.package_directory / PACKAGE_ROOT,
                self.parser,
                expansion_client=self.expansion_client,
            )
        return self._directory_provider

    async def _download_package_async(self) -> DownloadResult:
        async with self.client_factory(self.resilience) as client:
            manifest = await self._fetch_manifest(client)
            if manifest is None:
                return DownloadResult.NO_SUCH_PACKAGE

            latest = manifest.latest
            log.info(f"Latest version of {self.package_name} in the registry is: {latest}")
            if self.package_version is None:
                self.package_version = latest
            elif latest is not None and self.package_version != latest:
                log.warning(
                    f"Latest version of {self.package_name} is {latest}, "
                    f"newer than the requested version {self.package_version}"
                )
            if self.package_version is None:
                return DownloadResult.NO_SUCH_VERSION
            version_info = manifest.versions.get(self.package_version)
            if version_info is None:
                return DownloadResult.NO_SUCH_VERSION

            tarball_url = (
                version_info.dist.tarball
                if version_info.dist and version_info.dist.tarball
                else join_url(self.registry_url, f"{self.package_name}/{self.package_version}")
            )
            response = await client.get(tarball_url)
            response.raise_for_status()

        archive = self._write_archive(response.content)
        self._extract(archive)
        return DownloadResult.SUCCESS

    async def _fetch_manifest(self, client: ResilientClient) -> PackageManifest | None:
        response = await client.get(
            join_url(self.registry_url, self.package_name),
            headers={"Accept": "application/json"},
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        return PackageManifest.model_validate(response.json())

    def _write_archive(self, content: bytes) -> Path:
        if self.download_directory is None:
            self.download_directory = Path(tempfile.mkdtemp(prefix="termsync-download-"))
        archive = self.download_directory / f"{self.package_name}-{self.package_version}.tgz"
        archive.write_bytes(content)
        return archive

    def _extract(self, archive: Path) -> None:
        delegate = self._delegate()
        target = delegate.directory.parent
        with tarfile.open(archive, "r:gz") as tar:
            tar.extractall(target, filter="data")
        log.debug(f"extracted {archive.name} to {target}")
