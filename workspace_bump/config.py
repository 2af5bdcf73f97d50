"""Configuration for a version bump.

Settings are resolved from three layers, later ones winning:

1. Built-in defaults
2. ``.changeset/config.toml`` in the workspace root, if present::

       linked = [["pkg-a", "pkg-b"]]

       [version]
       commit = true
       updateChangelog = true
       skipCI = false

3. Explicit overrides (typically CLI flags); None means "not given"
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit.exceptions
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError
from .files import load_toml

CONFIG_PATH = Path(".changeset") / "config.toml"


class BumpConfig(BaseModel):
    """Options recognized by a bump run.

    Attributes:
        commit: Stage the rewritten manifests and commit them.
        update_changelog: Whether changelogs should be updated alongside
            the bump. Carried for the changelog collaborator.
        skip_ci: Mark the release commit so CI skips it.
        linked: Groups of packages whose versions move together. Consumed
            when the release set is computed, not by the bump itself.
        cwd: Workspace root.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    commit: bool = False
    update_changelog: bool = Field(default=True, alias="updateChangelog")
    skip_ci: bool = Field(default=True, alias="skipCI")
    linked: list[list[str]] = Field(default_factory=list)
    cwd: Path = Field(default_factory=Path.cwd)

    @field_validator("linked")
    @classmethod
    def _groups_are_disjoint(cls, linked: list[list[str]]) -> list[list[str]]:
        seen: set[str] = set()
        for group in linked:
            for name in group:
                if name in seen:
                    raise ValueError(f"{name} appears in more than one linked group")
                seen.add(name)
        return linked


def _read_config_file(root: Path) -> dict[str, Any]:
    path = root / CONFIG_PATH
    if not path.exists():
        return {}
    try:
        doc = load_toml(path)
    except tomlkit.exceptions.ParseError as exc:
        raise ConfigError(f"Cannot parse {path}: {exc}") from exc

    values: dict[str, Any] = {}
    if "linked" in doc:
        values["linked"] = doc["linked"]
    version_options = doc.get("version", {})
    if not isinstance(version_options, dict):
        raise ConfigError(f"[version] in {path} must be a table")
    values.update(version_options)

    unknown = set(doc) - {"linked", "version"}
    if unknown:
        raise ConfigError(f"Unknown keys in {path}: {', '.join(sorted(unknown))}")
    return values


def _alias(key: str) -> str:
    """Map a field name to the key the file uses for it."""
    field = BumpConfig.model_fields.get(key)
    if field is not None and field.alias:
        return field.alias
    return key


def load_config(root: Path, **overrides: Any) -> BumpConfig:
    """Resolve the configuration for the workspace at root.

    Args:
        root: Workspace root; also becomes the config's cwd.
        **overrides: Field values (by field name or alias) that take
            precedence over the file. None values are ignored.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    values = _read_config_file(root)
    values.update({_alias(k): v for k, v in overrides.items() if v is not None})
    values["cwd"] = root
    try:
        return BumpConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
