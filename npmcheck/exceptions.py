"""Custom exceptions for npmcheck."""

from __future__ import annotations

from pathlib import Path


class NpmCheckError(Exception):
    """Base exception for all npmcheck errors."""


class ManifestNotFoundError(NpmCheckError):
    """Raised when no package.json exists between the start directory and the root."""

    def __init__(self, start_dir: Path | str | None = None):
        self.start_dir = start_dir
        super().__init__("Could not find a package.json file. Run 'npm init' to create one.")


class ManifestParseError(NpmCheckError):
    """Raised when a located package.json does not contain valid JSON."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Could not parse {path}: {reason}")


class InvalidVersionError(NpmCheckError, ValueError):
    """Raised when a string is not a valid semantic version."""


class InvalidRangeError(NpmCheckError, ValueError):
    """Raised when a string is not a valid npm version range."""

    def __init__(self, spec: str):
        self.spec = spec
        super().__init__(f"Invalid version range: {spec!r}")
