"""Dependency checker engine — find package.json and check declared dependencies."""

from __future__ import annotations

from pathlib import Path

from npmcheck.engines.dependency_checker.checker import DependencyChecker
from npmcheck.engines.dependency_checker.filesystem import FileSystem, LocalFileSystem
from npmcheck.engines.dependency_checker.installer import install_dev_dependency, run_inherited
from npmcheck.engines.dependency_checker.locator import ManifestLocator, locate_manifest
from npmcheck.engines.dependency_checker.models import (
    DependencyRequest,
    DependencyScope,
    SatisfactionReport,
)


def check(requested: DependencyRequest, scope: DependencyScope) -> SatisfactionReport:
    """Check *requested* against the nearest package.json on the real filesystem."""
    return DependencyChecker().check(requested, scope)


def check_dependencies(
    requested: DependencyRequest, root_dir: Path | str | None = None
) -> SatisfactionReport:
    """Check *requested* against ``dependencies``."""
    return DependencyChecker().check_dependencies(requested, root_dir)


def check_dev_dependencies(
    requested: DependencyRequest, start_dir: Path | str | None = None
) -> SatisfactionReport:
    """Check *requested* against ``devDependencies``."""
    return DependencyChecker().check_dev_dependencies(requested, start_dir)


def has_manifest(start_dir: Path | str | None = None) -> bool:
    """Whether a package.json exists at or above *start_dir*."""
    return DependencyChecker().has_manifest(start_dir)


__all__ = [
    "DependencyChecker",
    "DependencyRequest",
    "DependencyScope",
    "FileSystem",
    "LocalFileSystem",
    "ManifestLocator",
    "SatisfactionReport",
    "check",
    "check_dependencies",
    "check_dev_dependencies",
    "has_manifest",
    "install_dev_dependency",
    "locate_manifest",
    "run_inherited",
]
