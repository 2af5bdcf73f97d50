"""Tests for workspace_bump.workspace."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from workspace_bump.errors import WorkspaceError
from workspace_bump.workspace import discover_packages, get_workspace_member_globs


def _write(path: Path, content: object, indent: int | str | None = 2) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(content, indent=indent) + "\n")


class TestGetWorkspaceMemberGlobs:
    def test_list_form(self) -> None:
        assert get_workspace_member_globs({"workspaces": ["packages/*"]}) == [
            "packages/*"
        ]

    def test_object_form(self) -> None:
        manifest = {"workspaces": {"packages": ["packages/*", "apps/*"]}}
        assert get_workspace_member_globs(manifest) == ["packages/*", "apps/*"]

    def test_bolt_form(self) -> None:
        manifest = {"bolt": {"workspaces": ["utils/*"]}}
        assert get_workspace_member_globs(manifest) == ["utils/*"]

    def test_missing(self) -> None:
        with pytest.raises(WorkspaceError, match="No workspaces"):
            get_workspace_member_globs({"name": "root"})


class TestDiscoverPackages:
    def test_discovers_members(self, two_package_workspace: Path) -> None:
        packages = discover_packages(two_package_workspace)

        assert list(packages) == ["a", "b"]
        assert packages["a"].path == (two_package_workspace / "packages" / "a").resolve()
        assert packages["a"].version == "1.0.0"
        assert packages["b"].manifest.data == {"name": "b", "version": "1.0.0"}

    def test_records_file_style(self, tmp_path: Path) -> None:
        _write(tmp_path / "package.json", {"workspaces": ["packages/*"]})
        (tmp_path / "packages" / "a").mkdir(parents=True)
        (tmp_path / "packages" / "a" / "package.json").write_text(
            '{\n\t"name": "a",\n\t"version": "1.0.0"\n}'
        )

        pkg = discover_packages(tmp_path)["a"]

        assert pkg.indent == "\t"
        assert pkg.trailing_newline is False

    def test_exclusion_globs(self, tmp_path: Path) -> None:
        _write(tmp_path / "package.json", {"workspaces": ["packages/*", "!packages/b"]})
        _write(tmp_path / "packages" / "a" / "package.json", {"name": "a"})
        _write(tmp_path / "packages" / "b" / "package.json", {"name": "b"})

        assert list(discover_packages(tmp_path)) == ["a"]

    def test_directories_without_manifest_skipped(self, tmp_path: Path) -> None:
        _write(tmp_path / "package.json", {"workspaces": ["packages/*"]})
        _write(tmp_path / "packages" / "a" / "package.json", {"name": "a"})
        (tmp_path / "packages" / "docs").mkdir()

        assert list(discover_packages(tmp_path)) == ["a"]

    def test_unnamed_package_warns(self, tmp_path: Path) -> None:
        _write(tmp_path / "package.json", {"workspaces": ["packages/*"]})
        _write(tmp_path / "packages" / "a" / "package.json", {"name": "a"})
        _write(tmp_path / "packages" / "scratch" / "package.json", {"private": True})

        with pytest.warns(UserWarning, match="has no name"):
            packages = discover_packages(tmp_path)

        assert list(packages) == ["a"]

    def test_missing_root_manifest(self, tmp_path: Path) -> None:
        with pytest.raises(WorkspaceError, match="No package.json"):
            discover_packages(tmp_path)

    def test_no_matching_members(self, tmp_path: Path) -> None:
        _write(tmp_path / "package.json", {"workspaces": ["packages/*"]})
        with pytest.raises(WorkspaceError, match="No packages found"):
            discover_packages(tmp_path)

    def test_invalid_member_manifest(self, tmp_path: Path) -> None:
        _write(tmp_path / "package.json", {"workspaces": ["packages/*"]})
        (tmp_path / "packages" / "a").mkdir(parents=True)
        (tmp_path / "packages" / "a" / "package.json").write_text("{")

        with pytest.raises(WorkspaceError, match="Cannot read"):
            discover_packages(tmp_path)

    def test_duplicate_names(self, tmp_path: Path) -> None:
        _write(tmp_path / "package.json", {"workspaces": ["packages/*"]})
        _write(tmp_path / "packages" / "a" / "package.json", {"name": "same"})
        _write(tmp_path / "packages" / "b" / "package.json", {"name": "same"})

        with pytest.raises(WorkspaceError, match="used by both"):
            discover_packages(tmp_path)
