"""Tests for DependencyChecker and the module-level check operations."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from structlog.testing import capture_logs

from npmcheck.engines.dependency_checker import (
    DependencyChecker,
    DependencyScope,
    check,
    check_dependencies,
    check_dev_dependencies,
    has_manifest,
)
from npmcheck.engines.dependency_checker.locator import ManifestLocator
from npmcheck.exceptions import (
    InvalidRangeError,
    ManifestNotFoundError,
    ManifestParseError,
    NpmCheckError,
)

REQUEST = {"a": "^1.0.0", "b": "^2.0.0"}


# ── scope selection ──────────────────────────────────────────────────────


class TestScopes:
    def test_direct_dependencies(self, sample_project):
        assert check_dependencies(REQUEST, sample_project) == {"a": True, "b": False}

    def test_dev_dependencies(self, sample_project, monkeypatch):
        monkeypatch.chdir(sample_project)
        assert check_dev_dependencies(REQUEST) == {"a": False, "b": True}

    def test_dev_dependencies_with_start_dir(self, sample_project):
        assert check_dev_dependencies(REQUEST, sample_project) == {"a": False, "b": True}

    def test_both_scopes(self, sample_project):
        assert check(REQUEST, DependencyScope.both(sample_project)) == {"a": True, "b": True}

    def test_no_scope_selected(self, sample_project):
        assert check(REQUEST, DependencyScope(start_dir=sample_project)) == {
            "a": False,
            "b": False,
        }

    def test_direct_wins_on_collision(self, tmp_path, write_manifest):
        write_manifest(
            tmp_path,
            {"dependencies": {"x": "^1.0.0"}, "devDependencies": {"x": "^2.0.0"}},
        )
        scope = DependencyScope.both(tmp_path)
        assert check({"x": "^1.0.0"}, scope) == {"x": True}
        assert check({"x": "^2.0.0"}, scope) == {"x": False}

    def test_dev_range_used_when_only_dev_requested(self, tmp_path, write_manifest):
        write_manifest(
            tmp_path,
            {"dependencies": {"x": "^1.0.0"}, "devDependencies": {"x": "^2.0.0"}},
        )
        assert check_dev_dependencies({"x": "^2.0.0"}, tmp_path) == {"x": True}

    def test_scope_constructors(self):
        assert DependencyScope.direct("d") == DependencyScope(True, False, "d")
        assert DependencyScope.dev() == DependencyScope(False, True, None)
        assert DependencyScope.both() == DependencyScope(True, True, None)


# ── per-package results ──────────────────────────────────────────────────


class TestReport:
    def test_unknown_package_is_false(self, sample_project):
        assert check_dependencies({"c": "^1.0.0"}, sample_project) == {"c": False}

    def test_key_order_follows_request(self, sample_project):
        requested = {"z": "*", "a": "^1.0.0", "m": "*"}
        report = check_dependencies(requested, sample_project)
        assert list(report) == ["z", "a", "m"]

    def test_empty_request(self, sample_project):
        assert check_dependencies({}, sample_project) == {}

    def test_declared_range_compared_to_requested(self, tmp_path, write_manifest):
        write_manifest(tmp_path, {"dependencies": {"a": "^1.2.0", "b": "^1.0.0"}})
        report = check_dependencies({"a": "^1.0.0", "b": "^1.2.0"}, tmp_path)
        assert report == {"a": True, "b": False}

    def test_major_mismatch(self, tmp_path, write_manifest):
        write_manifest(tmp_path, {"dependencies": {"a": "^3.0.0"}})
        assert check_dependencies({"a": "^1.0.0"}, tmp_path) == {"a": False}

    def test_non_semver_declaration_is_false(self, tmp_path, write_manifest):
        write_manifest(
            tmp_path,
            {"dependencies": {"a": "github:org/a", "b": "latest", "c": "file:../c"}},
        )
        report = check_dependencies({"a": "*", "b": "*", "c": "*"}, tmp_path)
        assert report == {"a": False, "b": False, "c": False}

    def test_non_string_declaration_is_false(self, tmp_path, write_manifest):
        write_manifest(tmp_path, {"dependencies": {"a": 1, "b": None}})
        assert check_dependencies({"a": "*", "b": "*"}, tmp_path) == {"a": False, "b": False}

    def test_values_are_bools(self, sample_project):
        report = check_dependencies(REQUEST, sample_project)
        assert all(type(v) is bool for v in report.values())

    def test_invalid_requested_range_raises(self, sample_project):
        with pytest.raises(InvalidRangeError):
            check_dependencies({"a": "not a range"}, sample_project)

    def test_invalid_range_for_undeclared_package_raises(self, sample_project):
        with pytest.raises(InvalidRangeError):
            check_dependencies({"c": "not a range"}, sample_project)

    def test_invalid_range_rejected_before_reading(self, recording_fs):
        manifest = Path(os.path.abspath("/proj")) / "package.json"
        fs = recording_fs({manifest: "{}"})
        with pytest.raises(InvalidRangeError):
            DependencyChecker(fs=fs).check_dependencies({"a": "latest"}, manifest.parent)
        assert fs.reads == []

    @pytest.mark.parametrize(
        "declared, requested",
        [
            (">=1.0.0 <2.0.0", "^1.0.0"),
            (">=1.2.0 <1.3.0", "~1.2.0"),
            (">=1.0.0 <3.0.0", "^1.0.0 || ^2.0.0"),
        ],
    )
    def test_explicit_comparators_match_caret_and_tilde(
        self, tmp_path, write_manifest, declared, requested
    ):
        write_manifest(tmp_path, {"dependencies": {"a": declared}})
        assert check_dependencies({"a": requested}, tmp_path) == {"a": True}


# ── manifest shape ───────────────────────────────────────────────────────


class TestManifestShape:
    def test_missing_dependency_fields(self, tmp_path, write_manifest):
        write_manifest(tmp_path, {"name": "x"})
        assert check(REQUEST, DependencyScope.both(tmp_path)) == {"a": False, "b": False}

    @pytest.mark.parametrize("value", [["a"], "a", 3, None])
    def test_non_mapping_dependency_field_ignored(self, tmp_path, write_manifest, value):
        write_manifest(tmp_path, {"dependencies": value, "devDependencies": {"a": "^1.0.0"}})
        assert check({"a": "^1.0.0"}, DependencyScope.both(tmp_path)) == {"a": True}

    def test_top_level_array(self, tmp_path, write_manifest):
        write_manifest(tmp_path, raw="[1, 2, 3]")
        assert check_dependencies({"a": "*"}, tmp_path) == {"a": False}

    def test_manifest_found_in_ancestor(self, sample_project):
        nested = sample_project / "src" / "nested"
        nested.mkdir(parents=True)
        assert check_dependencies(REQUEST, nested) == {"a": True, "b": False}


# ── errors ───────────────────────────────────────────────────────────────


class TestErrors:
    def test_not_found_raises_without_reading(self, recording_fs):
        fs = recording_fs()
        checker = DependencyChecker(fs=fs)
        with pytest.raises(ManifestNotFoundError) as excinfo:
            checker.check(REQUEST, DependencyScope.direct("/nowhere/at/all"))
        assert fs.reads == []
        assert "npm init" in str(excinfo.value)
        assert excinfo.value.start_dir == "/nowhere/at/all"

    def test_not_found_is_npmcheck_error(self, recording_fs):
        checker = DependencyChecker(fs=recording_fs())
        with pytest.raises(NpmCheckError):
            checker.check_dependencies(REQUEST, "/nowhere")

    def test_truncated_json_raises_parse_error(self, tmp_path, write_manifest):
        manifest = write_manifest(tmp_path, raw='{"dependencies": {"a": "^1.0')
        with capture_logs() as logs:
            with pytest.raises(ManifestParseError) as excinfo:
                check_dependencies(REQUEST, tmp_path)
        assert excinfo.value.path == manifest
        assert isinstance(excinfo.value.__cause__, json.JSONDecodeError)
        infos = [e for e in logs if e["log_level"] == "info"]
        assert len(infos) == 1
        assert infos[0]["event"] == "checker.manifest_invalid"
        assert "valid JSON" in infos[0]["message"]

    def test_undecodable_manifest_raises_parse_error(self, tmp_path):
        (tmp_path / "package.json").write_bytes(b"\xff\xfe\x00{")
        with pytest.raises(ManifestParseError) as excinfo:
            check_dependencies(REQUEST, tmp_path)
        assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)

    def test_parse_error_aborts_whole_check(self, tmp_path, write_manifest):
        write_manifest(tmp_path, raw="")
        with pytest.raises(ManifestParseError):
            check(REQUEST, DependencyScope.both(tmp_path))


# ── injected collaborators ───────────────────────────────────────────────


class TestInjection:
    def test_custom_matcher_receives_declared_then_requested(self, sample_project):
        matcher = MagicMock(return_value=True)
        checker = DependencyChecker(satisfies=matcher)
        assert checker.check_dependencies({"a": "~1.0.0"}, sample_project) == {"a": True}
        matcher.assert_called_once_with("^1.0.0", "~1.0.0")

    def test_matcher_not_called_for_missing_package(self, sample_project):
        matcher = MagicMock(return_value=True)
        checker = DependencyChecker(satisfies=matcher)
        assert checker.check_dependencies({"c": "*"}, sample_project) == {"c": False}
        matcher.assert_not_called()

    def test_fake_filesystem(self, recording_fs):
        root = Path(os.path.abspath("/proj"))
        manifest = root / "package.json"
        fs = recording_fs({manifest: json.dumps({"devDependencies": {"b": "^2.1.0"}})})
        checker = DependencyChecker(fs=fs)
        assert checker.check_dev_dependencies({"b": "^2.0.0"}, root / "src") == {"b": True}
        assert fs.reads == [manifest]

    def test_every_call_rereads(self, tmp_path, write_manifest):
        write_manifest(tmp_path, {"dependencies": {"a": "^1.0.0"}})
        checker = DependencyChecker()
        assert checker.check_dependencies({"a": "^1.0.0"}, tmp_path) == {"a": True}
        write_manifest(tmp_path, {"dependencies": {}})
        assert checker.check_dependencies({"a": "^1.0.0"}, tmp_path) == {"a": False}

    def test_custom_locator(self, tmp_path, write_manifest):
        write_manifest(tmp_path, raw=json.dumps({"dependencies": {"a": "1.0.0"}}))
        (tmp_path / "bower.json").write_text(json.dumps({"dependencies": {"a": "2.0.0"}}))
        checker = DependencyChecker(locator=ManifestLocator(filename="bower.json"))
        assert checker.check_dependencies({"a": "^2.0.0"}, tmp_path) == {"a": True}


# ── has_manifest ─────────────────────────────────────────────────────────


class TestHasManifest:
    def test_true_when_present(self, sample_project):
        assert has_manifest(sample_project) is True

    def test_false_when_absent(self, recording_fs):
        fs = recording_fs()
        assert DependencyChecker(fs=fs).has_manifest("/nowhere") is False
        assert fs.reads == []

    def test_agrees_with_locator(self, sample_project):
        locator = ManifestLocator()
        nested = sample_project / "a" / "b"
        assert has_manifest(nested) == (locator.locate(nested) is not None)

    def test_does_not_read(self, sample_project, recording_fs):
        manifest = Path(os.path.abspath(sample_project)) / "package.json"
        fs = recording_fs({manifest: "not json"})
        assert DependencyChecker(fs=fs).has_manifest(sample_project) is True
        assert fs.reads == []
