"""Data models for workspace-bump.

These Pydantic models represent the core data structures used throughout
the version bump: workspace packages and their manifests, the records the
consistency check produces, and the plan the orchestrator acts on.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class DependencyType(str, Enum):
    """The dependency categories a package.json can declare.

    Iteration order is the order categories are searched and rewritten.
    """

    DEPENDENCIES = "dependencies"
    DEV_DEPENDENCIES = "devDependencies"
    PEER_DEPENDENCIES = "peerDependencies"
    OPTIONAL_DEPENDENCIES = "optionalDependencies"


class Manifest(BaseModel):
    """A package.json document.

    The full document is kept in ``data`` so that fields this tool does
    not know about survive a rewrite, in their original order. Dependency
    sections are only ever reached through DependencyType.
    """

    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def name(self) -> str | None:
        return self.data.get("name")

    @property
    def version(self) -> str:
        return str(self.data.get("version", "0.0.0"))

    def set_version(self, version: str) -> None:
        self.data["version"] = version

    def section(self, dep_type: DependencyType) -> dict[str, str]:
        """Return the name → range mapping for one category (empty if absent)."""
        section = self.data.get(dep_type.value)
        if isinstance(section, dict):
            return section
        return {}

    def dependency_types(self, dep_name: str) -> list[DependencyType]:
        """List every category that declares dep_name."""
        return [t for t in DependencyType if dep_name in self.section(t)]

    def dependency_ranges(self, dep_name: str) -> dict[DependencyType, str]:
        """Map each category declaring dep_name to its declared range."""
        return {
            t: str(self.section(t)[dep_name]) for t in self.dependency_types(dep_name)
        }

    def declared_dependencies(self) -> list[str]:
        """All dependency names across categories, first occurrence order."""
        names: list[str] = []
        for dep_type in DependencyType:
            for name in self.section(dep_type):
                if name not in names:
                    names.append(name)
        return names

    def set_range(self, dep_type: DependencyType, dep_name: str, range_: str) -> None:
        """Overwrite an existing declaration, keeping its position."""
        section = self.data.get(dep_type.value)
        if not isinstance(section, dict) or dep_name not in section:
            raise KeyError(f"{dep_name} is not declared in {dep_type.value}")
        section[dep_name] = range_


class Package(BaseModel):
    """A single package in the workspace.

    Attributes:
        name: Package name from package.json.
        path: Absolute path to the package directory.
        manifest: Parsed package.json.
        indent: Indentation detected when the manifest was read, reused
                when it is written back.
        trailing_newline: Whether the manifest file ended with a newline.
    """

    name: str
    path: Path
    manifest: Manifest
    indent: str = "  "
    trailing_newline: bool = True

    @property
    def version(self) -> str:
        return self.manifest.version

    @property
    def manifest_path(self) -> Path:
        return self.path / "package.json"


class Violation(BaseModel):
    """A non-released package whose range would be broken by the release.

    Attributes:
        package: The package declaring the range.
        dependency: The released internal dependency.
        declared_range: The range currently declared for it.
        incoming_version: The version the dependency is being released at.
    """

    package: str
    dependency: str
    declared_range: str
    incoming_version: str

    def __str__(self) -> str:
        return (
            f"{self.package} depends on {self.dependency}@{self.declared_range}, "
            f"which {self.incoming_version} does not satisfy"
        )


class MalformedRange(BaseModel):
    """A declared range that could not be classified or parsed."""

    package: str
    dependency: str
    range: str

    def __str__(self) -> str:
        return f"{self.package} declares {self.dependency}@{self.range!r}"


class VersionBump(BaseModel):
    """Records a version change for a package.

    Used to track what versions were bumped during a release so we can
    report them and build the release commit.

    Attributes:
        old: The version before bumping.
        new: The version after bumping.
    """

    old: str
    new: str


class BumpPlan(BaseModel):
    """Outcome of validating a release set against the workspace.

    Attributes:
        releases: Release set restricted to workspace packages.
        external: Release-set names that are not workspace packages.
        violations: Ranges the release would break in unreleased packages.
        malformed: Ranges of released packages that cannot be rewritten,
                   or ranges of unreleased packages that cannot be checked.
        manifests: Rewritten manifests by package name. Only filled when
                   the plan has no violations and no malformed ranges.
        bumps: Version change per released package, filled on persist.
    """

    releases: dict[str, str] = Field(default_factory=dict)
    external: list[str] = Field(default_factory=list)
    violations: list[Violation] = Field(default_factory=list)
    malformed: list[MalformedRange] = Field(default_factory=list)
    manifests: dict[str, Manifest] = Field(default_factory=dict)
    bumps: dict[str, VersionBump] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.violations and not self.malformed
