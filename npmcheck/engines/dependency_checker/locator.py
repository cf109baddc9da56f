"""Find the nearest package.json by walking up from a start directory."""

from __future__ import annotations

import os
from pathlib import Path

import structlog

from npmcheck.engines.dependency_checker.filesystem import FileSystem, LocalFileSystem

log = structlog.get_logger("npmcheck.engine")

MANIFEST_FILENAME = "package.json"


class ManifestLocator:
    """Upward search for a manifest file.

    Only existence checks are made; file contents are never read.
    """

    def __init__(
        self,
        fs: FileSystem | None = None,
        filename: str = MANIFEST_FILENAME,
    ) -> None:
        self._fs = fs or LocalFileSystem()
        self._filename = filename

    def locate(self, start_dir: Path | str | None = None) -> Path | None:
        """Return the absolute path of the nearest manifest, or None.

        *start_dir* defaults to the current working directory. Relative paths
        are made absolute and normalised lexically (symlinks are not
        followed); the directory does not have to exist.
        """
        start = Path(os.path.abspath(start_dir if start_dir is not None else os.getcwd()))

        # start, then every ancestor up to and including the root
        for candidate in (start, *start.parents):
            manifest = candidate / self._filename
            if self._fs.is_file(manifest):
                log.debug("locator.found", start_dir=str(start), manifest=str(manifest))
                return manifest

        log.debug("locator.not_found", start_dir=str(start), filename=self._filename)
        return None

    def exists(self, start_dir: Path | str | None = None) -> bool:
        return self.locate(start_dir) is not None


def locate_manifest(start_dir: Path | str | None = None) -> Path | None:
    """Find the nearest package.json on the real filesystem."""
    return ManifestLocator().locate(start_dir)
