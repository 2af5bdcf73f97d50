"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from workspace_bump.models import Manifest, Package

WriteWorkspace = Callable[[dict[str, dict[str, Any]]], Path]
MakePackage = Callable[..., Package]


def _make_package(
    name: str,
    version: str = "1.0.0",
    path: Path | None = None,
    **sections: dict[str, str],
) -> Package:
    """Build an in-memory package, e.g. make_package("a", dependencies={"b": "^1.0.0"})."""
    data: dict[str, Any] = {"name": name, "version": version}
    data.update(sections)
    return Package(
        name=name,
        path=path or Path("/workspace/packages") / name,
        manifest=Manifest(data=data),
    )


@pytest.fixture
def make_package() -> MakePackage:
    """Return the in-memory package builder."""
    return _make_package


@pytest.fixture
def write_workspace(tmp_path: Path) -> WriteWorkspace:
    """Return a function that writes a workspace of package.json files.

    Each key is a directory under packages/, each value the package.json
    content for it. Returns the workspace root.
    """

    def _write(manifests: dict[str, dict[str, Any]]) -> Path:
        (tmp_path / "package.json").write_text(
            json.dumps({"private": True, "workspaces": ["packages/*"]}, indent=2)
            + "\n"
        )
        for directory, manifest in manifests.items():
            pkg_dir = tmp_path / "packages" / directory
            pkg_dir.mkdir(parents=True)
            (pkg_dir / "package.json").write_text(json.dumps(manifest, indent=2) + "\n")
        return tmp_path

    return _write


@pytest.fixture
def two_package_workspace(write_workspace: WriteWorkspace) -> Path:
    """a depends on b with a caret range; b is a leaf."""
    return write_workspace(
        {
            "a": {
                "name": "a",
                "version": "1.0.0",
                "dependencies": {"b": "^1.0.0", "left-pad": "^1.3.0"},
            },
            "b": {"name": "b", "version": "1.0.0"},
        }
    )
