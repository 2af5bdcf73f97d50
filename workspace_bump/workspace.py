"""Workspace discovery.

Finds the packages of an npm-style monorepo from the member globs of the
root package.json. Three declarations are understood::

    {"workspaces": ["packages/*"]}
    {"workspaces": {"packages": ["packages/*"]}}
    {"bolt": {"workspaces": ["packages/*"]}}

Globs starting with "!" exclude directories matched by earlier globs.
"""

from __future__ import annotations

import glob
import warnings
from pathlib import Path
from typing import Any

from .errors import WorkspaceError
from .files import load_manifest
from .models import Package


def get_workspace_member_globs(root_manifest: dict[str, Any]) -> list[str]:
    """Extract workspace member glob patterns from the root package.json.

    Raises:
        WorkspaceError: If no workspace members are defined.
    """
    members: Any = root_manifest.get("workspaces")
    if isinstance(members, dict):
        members = members.get("packages")
    if not members:
        members = (root_manifest.get("bolt") or {}).get("workspaces")
    if not members or not isinstance(members, list):
        raise WorkspaceError("No workspaces defined in root package.json")
    return [str(m) for m in members]


def _expand_member_dirs(root: Path, patterns: list[str]) -> list[Path]:
    """Expand member globs into package directories, in glob order."""
    member_dirs: list[Path] = []
    for pattern in patterns:
        if pattern.startswith("!"):
            excluded = {
                Path(m).resolve() for m in glob.glob(str(root / pattern[1:]))
            }
            member_dirs = [d for d in member_dirs if d not in excluded]
            continue
        for match in sorted(glob.glob(str(root / pattern))):
            p = Path(match).resolve()
            if (p / "package.json").exists() and p not in member_dirs:
                member_dirs.append(p)
    return member_dirs


def discover_packages(root: Path) -> dict[str, Package]:
    """Scan the workspace at root and load all of its packages.

    Reads the workspace globs from root/package.json, then loads name,
    version and dependencies from each member's package.json.

    Member directories without a "name" cannot be depended on or released;
    they are skipped with a warning.

    Returns:
        Map of package name to Package.

    Raises:
        WorkspaceError: If the root manifest is missing, declares no
            workspaces, matches no packages, or a name is used twice.
    """
    root = root.resolve()
    root_manifest_path = root / "package.json"
    if not root_manifest_path.exists():
        raise WorkspaceError(f"No package.json found in {root}")
    try:
        root_manifest, _, _ = load_manifest(root_manifest_path)
    except ValueError as exc:
        raise WorkspaceError(f"Cannot read {root_manifest_path}: {exc}") from exc

    member_dirs = _expand_member_dirs(
        root, get_workspace_member_globs(root_manifest.data)
    )
    if not member_dirs:
        raise WorkspaceError("No packages found matching workspace members")

    packages: dict[str, Package] = {}
    for d in member_dirs:
        try:
            manifest, indent, trailing_newline = load_manifest(d / "package.json")
        except ValueError as exc:
            raise WorkspaceError(f"Cannot read {d / 'package.json'}: {exc}") from exc

        name = manifest.name
        if not name:
            warnings.warn(
                f"{d / 'package.json'} has no name and is ignored", stacklevel=2
            )
            continue
        if name in packages:
            raise WorkspaceError(
                f"Package name {name} is used by both {packages[name].path} and {d}"
            )
        packages[name] = Package(
            name=name,
            path=d,
            manifest=manifest,
            indent=indent,
            trailing_newline=trailing_newline,
        )

    return packages
