"""Data models for the dependency checker engine."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

# package name -> requested version range
DependencyRequest = Mapping[str, str]

# package name -> declared range satisfies the requested one
SatisfactionReport = dict[str, bool]


@dataclass(frozen=True)
class DependencyScope:
    """Which dependency maps of package.json to consult, and where to start looking."""

    dependencies: bool = False
    dev_dependencies: bool = False
    start_dir: Path | str | None = None

    @classmethod
    def direct(cls, start_dir: Path | str | None = None) -> DependencyScope:
        return cls(dependencies=True, start_dir=start_dir)

    @classmethod
    def dev(cls, start_dir: Path | str | None = None) -> DependencyScope:
        return cls(dev_dependencies=True, start_dir=start_dir)

    @classmethod
    def both(cls, start_dir: Path | str | None = None) -> DependencyScope:
        return cls(dependencies=True, dev_dependencies=True, start_dir=start_dir)
