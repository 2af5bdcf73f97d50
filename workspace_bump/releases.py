"""Release-set input.

The versions to release are decided elsewhere (from changesets, by hand,
or by CI) and handed over either as a JSON release file::

    {"releases": [{"name": "pkg-a", "version": "1.1.0", "type": "minor"}]}

or as ``name@version`` strings. This module turns either form into the
release set the bump works on.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ValidationError, field_validator

from .errors import WorkspaceError
from .versions import parse_version


class Release(BaseModel):
    """One package selected for release.

    Attributes:
        name: Package name.
        version: Version to release at.
        type: Bump level that produced the version, when known.
    """

    name: str
    version: str
    type: Literal["major", "minor", "patch", "none"] | None = None

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, name: str) -> str:
        if not name.strip():
            raise ValueError("release name must not be empty")
        return name

    @field_validator("version")
    @classmethod
    def _version_is_semver(cls, version: str) -> str:
        # Canonical form: "v2.0.0" and "=2.0.0" become "2.0.0"
        try:
            return str(parse_version(version))
        except (ValueError, TypeError):
            raise ValueError(f"{version!r} is not a valid semver version") from None


class ReleaseFile(BaseModel):
    releases: list[Release]


def parse_release_spec(spec: str) -> Release:
    """Parse "name@version" into a Release.

    Scoped npm names keep their leading "@":
        "@scope/pkg@1.2.0" → Release(name="@scope/pkg", version="1.2.0")

    Raises:
        WorkspaceError: If spec has no version or an invalid one.
    """
    name, sep, version = spec.rpartition("@")
    if not sep or not name:
        raise WorkspaceError(f"Invalid release {spec!r}, expected NAME@VERSION")
    try:
        return Release(name=name, version=version)
    except ValidationError as exc:
        raise WorkspaceError(f"Invalid release {spec!r}: {exc}") from exc


def load_release_file(path: Path) -> list[Release]:
    """Load releases from a JSON release file.

    Raises:
        WorkspaceError: If the file is missing, not JSON, or malformed.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise WorkspaceError(f"Release file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise WorkspaceError(f"Invalid JSON in {path}: {exc}") from exc

    try:
        return ReleaseFile.model_validate(raw).releases
    except ValidationError as exc:
        raise WorkspaceError(f"Invalid release file {path}: {exc}") from exc


def release_map(releases: Iterable[Release]) -> dict[str, str]:
    """Build the release set (name → version) from releases.

    The same package may be listed twice only with the same version.

    Raises:
        WorkspaceError: On conflicting versions for one package.
    """
    versions: dict[str, str] = {}
    for release in releases:
        existing = versions.get(release.name)
        if existing is not None and existing != release.version:
            raise WorkspaceError(
                f"Conflicting releases for {release.name}: "
                f"{existing} and {release.version}"
            )
        versions[release.name] = release.version
    return versions
