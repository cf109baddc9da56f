"""npmcheck — locate package.json and check declared npm dependencies."""

from npmcheck.engines.dependency_checker import (
    DependencyChecker,
    DependencyScope,
    ManifestLocator,
    check,
    check_dependencies,
    check_dev_dependencies,
    has_manifest,
    install_dev_dependency,
    locate_manifest,
)
from npmcheck.exceptions import (
    InvalidRangeError,
    InvalidVersionError,
    ManifestNotFoundError,
    ManifestParseError,
    NpmCheckError,
)

__version__ = "0.1.0"

__all__ = [
    "DependencyChecker",
    "DependencyScope",
    "InvalidRangeError",
    "InvalidVersionError",
    "ManifestLocator",
    "ManifestNotFoundError",
    "ManifestParseError",
    "NpmCheckError",
    "check",
    "check_dependencies",
    "check_dev_dependencies",
    "has_manifest",
    "install_dev_dependency",
    "locate_manifest",
]
