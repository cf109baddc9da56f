"""DependencyChecker — are requested packages declared in package.json?"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import structlog

from npmcheck.core import semver
from npmcheck.engines.dependency_checker.filesystem import FileSystem, LocalFileSystem
from npmcheck.engines.dependency_checker.locator import ManifestLocator
from npmcheck.engines.dependency_checker.models import (
    DependencyRequest,
    DependencyScope,
    SatisfactionReport,
)
from npmcheck.exceptions import ManifestNotFoundError, ManifestParseError

log = structlog.get_logger("npmcheck.engine")

# (declared_range, requested_range) -> bool
RangeMatcher = Callable[[str, str], bool]


class DependencyChecker:
    """Check declared dependencies of the nearest package.json.

    Nothing is cached: every call locates, reads and parses the manifest
    again, so results reflect the filesystem at call time.
    """

    def __init__(
        self,
        locator: ManifestLocator | None = None,
        fs: FileSystem | None = None,
        satisfies: RangeMatcher = semver.satisfies,
    ) -> None:
        self._fs = fs or LocalFileSystem()
        self._locator = locator or ManifestLocator(self._fs)
        self._satisfies = satisfies

    def check(self, requested: DependencyRequest, scope: DependencyScope) -> SatisfactionReport:
        """Report, per requested package, whether a compatible range is declared.

        Raises:
            ManifestNotFoundError: No package.json between ``scope.start_dir``
                and the filesystem root.
            ManifestParseError: The located package.json is not valid JSON.
            InvalidRangeError: A requested range is not a valid npm range.
        """
        for wanted in requested.values():
            semver.parse_range(wanted)

        manifest_path = self._locator.locate(scope.start_dir)
        if manifest_path is None:
            raise ManifestNotFoundError(scope.start_dir)

        manifest = self._load(manifest_path)
        declared = _merge_declared(manifest, scope)

        report: SatisfactionReport = {}
        for name, wanted in requested.items():
            have = declared.get(name)
            report[name] = isinstance(have, str) and self._satisfies(have, wanted)

        log.debug(
            "checker.done",
            manifest=str(manifest_path),
            requested=len(report),
            satisfied=sum(report.values()),
        )
        return report

    def check_dependencies(
        self, requested: DependencyRequest, root_dir: Path | str | None = None
    ) -> SatisfactionReport:
        return self.check(requested, DependencyScope.direct(root_dir))

    def check_dev_dependencies(
        self, requested: DependencyRequest, start_dir: Path | str | None = None
    ) -> SatisfactionReport:
        return self.check(requested, DependencyScope.dev(start_dir))

    def has_manifest(self, start_dir: Path | str | None = None) -> bool:
        return self._locator.exists(start_dir)

    def _load(self, path: Path) -> Any:
        try:
            return json.loads(self._fs.read_text(path))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            log.info(
                "checker.manifest_invalid",
                manifest=str(path),
                message=(
                    "Could not read package.json file. "
                    "Please check that the file contains valid JSON."
                ),
            )
            raise ManifestParseError(path, str(exc)) from exc


def _merge_declared(manifest: Any, scope: DependencyScope) -> dict[str, Any]:
    """Flatten the requested dependency maps; direct entries win on collision."""
    if not isinstance(manifest, dict):
        return {}

    merged: dict[str, Any] = {}
    if scope.dev_dependencies and isinstance(manifest.get("devDependencies"), dict):
        merged.update(manifest["devDependencies"])
    if scope.dependencies and isinstance(manifest.get("dependencies"), dict):
        merged.update(manifest["dependencies"])
    return merged
