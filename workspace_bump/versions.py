"""Version parsing utilities.

Handles conversion between version strings and semver objects, with
special handling for the partial and wildcard versions that appear in
npm ranges (e.g., "1.2" or "1.x" → major 1, minor 2 / any).
"""

from __future__ import annotations

import re

import semver
from pydantic import BaseModel, ConfigDict

_PARTIAL_RE = re.compile(
    r"""
    ^v?
    (?P<major>0|[1-9]\d*|[xX*])
    (?:\.(?P<minor>0|[1-9]\d*|[xX*])
      (?:\.(?P<patch>0|[1-9]\d*|[xX*])
        (?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?
        (?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?
      )?
    )?$
    """,
    re.VERBOSE,
)

_WILDCARDS = {"x", "X", "*"}


class PartialVersion(BaseModel):
    """A version that may be missing components.

    Missing and wildcard components are stored as None, so "1.x" and "1"
    both have major=1, minor=None, patch=None.
    """

    model_config = ConfigDict(frozen=True)

    major: int | None
    minor: int | None = None
    patch: int | None = None
    prerelease: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.patch is not None

    def floor(self) -> semver.Version:
        """Lowest version matched, with missing parts padded with zeros."""
        return semver.Version(
            self.major or 0, self.minor or 0, self.patch or 0, self.prerelease
        )


def parse_version(version_str: str) -> semver.Version:
    """Parse a complete version string into a semver.Version object.

    A leading "v" or "=" is tolerated, as npm does. Raises ValueError for
    anything that is not a full major.minor.patch version.
    """
    text = version_str.strip().lstrip("=").strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    return semver.Version.parse(text)


def parse_partial(version_str: str) -> PartialVersion | None:
    """Parse a possibly-partial version used inside a range.

    Examples:
        "1.2.3" → major=1 minor=2 patch=3
        "1.2"   → major=1 minor=2 patch=None
        "1.x"   → major=1 minor=None patch=None
        "*"     → all None

    Returns None when the string is not a version at all.
    """
    match = _PARTIAL_RE.match(version_str)
    if not match:
        return None

    parts: list[int | None] = []
    wildcard_seen = False
    for key in ("major", "minor", "patch"):
        raw = match.group(key)
        # Anything after a wildcard is a wildcard too ("1.x.3" → "1.x")
        if raw is None or raw in _WILDCARDS or wildcard_seen:
            wildcard_seen = True
            parts.append(None)
        else:
            parts.append(int(raw))

    prerelease = match.group("prerelease") if parts[2] is not None else None
    return PartialVersion(
        major=parts[0], minor=parts[1], patch=parts[2], prerelease=prerelease
    )
