"""Shared pytest fixtures for npmcheck tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest


class RecordingFileSystem:
    """In-memory filesystem that records every probe and read."""

    def __init__(self, files: dict[Path, str] | None = None):
        self.files = dict(files or {})
        self.probed: list[Path] = []
        self.reads: list[Path] = []

    def is_file(self, path: Path) -> bool:
        self.probed.append(path)
        return path in self.files

    def read_text(self, path: Path) -> str:
        self.reads.append(path)
        return self.files[path]


@pytest.fixture
def write_manifest():
    """Write a package.json into a directory and return its path."""

    def _write(directory: Path, data: dict | None = None, raw: str | None = None) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "package.json"
        path.write_text(raw if raw is not None else json.dumps(data or {}), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_project(tmp_path, write_manifest):
    """Project with one direct and one dev dependency."""
    write_manifest(
        tmp_path,
        {
            "name": "sample",
            "version": "1.0.0",
            "dependencies": {"a": "^1.0.0"},
            "devDependencies": {"b": "^2.0.0"},
        },
    )
    return tmp_path


@pytest.fixture
def recording_fs():
    """Factory for an in-memory filesystem: ``recording_fs({path: text})``."""
    return RecordingFileSystem
