"""Consistency checking for packages left out of a release.

A package that is not being released keeps its package.json as it is.
If it declares a range on a released workspace package that the new
version no longer satisfies, the workspace would be inconsistent after
the bump. Those cases are reported as violations.
"""

from __future__ import annotations

from collections.abc import Mapping

from .errors import MalformedRangeError
from .models import MalformedRange, Package, Violation
from .ranges import satisfies


def inspect_package(
    pkg: Package,
    release_set: Mapping[str, str],
    graph: Mapping[str, set[str]],
) -> tuple[list[Violation], list[MalformedRange]]:
    """Check pkg's ranges against the release, collecting every problem.

    Released packages are skipped entirely: their ranges are rewritten and
    are correct by construction. Dependencies outside the workspace are
    never checked.

    Returns:
        Tuple of (violations, ranges that could not be parsed).
    """
    violations: list[Violation] = []
    malformed: list[MalformedRange] = []
    if pkg.name in release_set:
        return violations, malformed

    for dep_name, new_version in release_set.items():
        if dep_name not in graph:
            continue
        seen: set[str] = set()
        for declared in pkg.manifest.dependency_ranges(dep_name).values():
            if declared in seen:
                continue
            seen.add(declared)
            try:
                ok = satisfies(
                    new_version, declared, package=pkg.name, dependency=dep_name
                )
            except MalformedRangeError as exc:
                malformed.extend(exc.ranges)
                continue
            if not ok:
                violations.append(
                    Violation(
                        package=pkg.name,
                        dependency=dep_name,
                        declared_range=declared,
                        incoming_version=new_version,
                    )
                )

    return violations, malformed


def check_package(
    pkg: Package,
    release_set: Mapping[str, str],
    graph: Mapping[str, set[str]],
) -> list[Violation]:
    """Return the violations the release would cause in pkg.

    Args:
        pkg: The package to check.
        release_set: Map of package name → version being released.
        graph: Internal dependency graph; its keys are the workspace
               package names.

    Raises:
        MalformedRangeError: If a range that needs checking cannot be
            parsed. All such ranges of pkg are listed.
    """
    violations, malformed = inspect_package(pkg, release_set, graph)
    if malformed:
        raise MalformedRangeError(malformed)
    return violations
