"""Synchronization into a local directory, one file per catalog."""

from __future__ import annotations

import os
from logging import getLogger
from typing import TYPE_CHECKING

from termsync.domain.errors import SynchronizationError
from termsync.domain.ports.synchronization import MdrSynchronization

if TYPE_CHECKING:
    from pathlib import Path

    from termsync.domain.model import RenderedDocument, TerminologyResourceExpansion
    from termsync.domain.ports.rendering import OutputRenderer

log = getLogger(__name__)


class FileMdrSynchronization(MdrSynchronization):
    """Write rendered catalogs to ``{name}_{version}{extension}``.

    A file is current when its bytes equal the freshly rendered document.
    """

    requires_authentication = False

    def __init__(self, output_directory: Path, renderer: OutputRenderer) -> None:
        if output_directory.exists() and not output_directory.is_dir():
            raise NotADirectoryError(f"{output_directory} exists and is not a directory")
        output_directory.mkdir(parents=True, exist_ok=True)
        self.output_directory = output_directory
        self.renderer = renderer

    def target_path(self, expansion: TerminologyResourceExpansion) -> Path:
        extension = self.renderer.mime_type.file_extension
        return self.output_directory / (
            f"{expansion.name}_{expansion.encoded_business_version}{extension}"
        )

    def is_present(self, expansion: TerminologyResourceExpansion) -> bool:
        return self.target_path(expansion).is_file()

    def is_current(self, expansion: TerminologyResourceExpansion) -> bool:
        path = self.target_path(expansion)
        rendered = self._render(expansion)
        try:
            return path.read_bytes() == rendered.content.encode("utf-8")
        except OSError as exc:
            raise SynchronizationError(f"cannot read {path}: {exc}") from exc

    def create(self, expansion: TerminologyResourceExpansion) -> bool:
        path = self.target_path(expansion)
        rendered = self._render(expansion)
        if not rendered.success:
            return False
        try:
            path.write_bytes(rendered.content.encode("utf-8"))
        except OSError as exc:
            raise SynchronizationError(f"cannot write {path}: {exc}") from exc
        log.info(f"Wrote {expansion.label} to {path}")
        return True

    def update(self, expansion: TerminologyResourceExpansion) -> bool:
        return self.create(expansion)

    def validate_endpoint(self) -> bool:
        if not self.output_directory.is_dir():
            log.error(f"Output directory {self.output_directory} does not exist")
            return False
        if not os.access(self.output_directory, os.W_OK):
            log.error(f"Output directory {self.output_directory} is not writable")
            return False
        return True

    def _render(self, expansion: TerminologyResourceExpansion) -> RenderedDocument:
        return self.renderer.render_catalog(expansion)
