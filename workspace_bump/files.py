"""Manifest and config file reading and writing utilities.

package.json files are written back with the indentation they were read
with, so a version bump only shows up in diffs as the lines it changed.
TOML config files are read with tomlkit.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import tomlkit

from .models import Manifest

DEFAULT_INDENT = "  "


def detect_indent(text: str) -> str | None:
    """Return the indentation unit of a JSON document.

    The first indented line of a pretty-printed JSON object is a top-level
    key, so its leading whitespace is exactly one indentation level.
    Returns None for minified or empty documents.
    """
    for line in text.splitlines():
        stripped = line.lstrip(" \t")
        if stripped and len(stripped) != len(line):
            return line[: len(line) - len(stripped)]
    return None


def load_manifest(path: Path) -> tuple[Manifest, str, bool]:
    """Load a package.json file.

    Returns:
        Tuple of (manifest, detected indent, whether the file ended with a
        newline). The indent falls back to two spaces.
    """
    text = path.read_text(encoding="utf-8")
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    indent = detect_indent(text) or DEFAULT_INDENT
    return Manifest(data=data), indent, text.endswith("\n")


def dump_manifest(
    manifest: Manifest, indent: str = DEFAULT_INDENT, trailing_newline: bool = True
) -> str:
    """Serialize a manifest, keeping key order and non-ASCII characters."""
    text = json.dumps(manifest.data, indent=indent, ensure_ascii=False)
    return text + "\n" if trailing_newline else text


def save_manifest(
    path: Path,
    manifest: Manifest,
    indent: str = DEFAULT_INDENT,
    trailing_newline: bool = True,
) -> None:
    """Write a manifest back to disk in the style it was read."""
    path.write_text(dump_manifest(manifest, indent, trailing_newline), encoding="utf-8")


def load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file into plain Python containers."""
    return tomlkit.parse(path.read_text(encoding="utf-8")).unwrap()
