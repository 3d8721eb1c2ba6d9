"""Pydantic models for NPM-style package registry manifests."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RegistryBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PackageDist(RegistryBaseModel):
    tarball: str | None = None
    shasum: str | None = None


class PackageVersionInfo(RegistryBaseModel):
    name: str | None = None
    version: str | None = None
    dist: PackageDist | None = None


class PackageManifest(RegistryBaseModel):
    name: str | None = None
    dist_tags: dict[str, str] = Field(default_factory=dict, alias="dist-tags")
    versions: dict[str, PackageVersionInfo] = Field(default_factory=dict)

    @property
    def latest(self) -> str | None:
        return self.dist_tags.get("latest")
