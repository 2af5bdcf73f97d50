"""Errors and warnings raised while bumping a workspace.

Every fatal condition is raised before any manifest is written, so none
of these require cleaning up a partially updated workspace.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import MalformedRange, Violation


class BumpError(Exception):
    """Base class for conditions that block a version bump."""


class WorkspaceError(BumpError):
    """The workspace or the release input could not be loaded."""


class ConfigError(BumpError):
    """The configuration file is invalid."""


class MalformedRangeError(BumpError):
    """One or more declared ranges cannot be classified or parsed."""

    def __init__(self, ranges: Sequence[MalformedRange]) -> None:
        self.ranges = list(ranges)
        lines = "\n".join(f"  - {r}" for r in self.ranges)
        super().__init__(
            f"Cannot interpret {len(self.ranges)} dependency range(s):\n{lines}"
        )


class ConsistencyViolationError(BumpError):
    """Unreleased packages would be left with ranges the release breaks."""

    def __init__(self, violations: Sequence[Violation]) -> None:
        self.violations = list(violations)
        lines = "\n".join(f"  - {v}" for v in self.violations)
        super().__init__(
            f"Releasing would leave {len(self.violations)} dependency range(s) "
            f"unsatisfied:\n{lines}\n\n"
            "Widen these ranges or add the dependent packages to the release."
        )


class ExternalDependencyWarning(UserWarning):
    """The release set names packages that are not in the workspace."""


class NoPendingReleasesWarning(UserWarning):
    """The release set is empty; nothing will be changed."""
