"""Manifest rewriting.

Produces the updated package.json of a released package: its own version
is set to the release version, and every declared range on another
released workspace package is moved to that package's new version while
keeping the range operator ("^1.0.0" → "^2.0.0").
"""

from __future__ import annotations

from collections.abc import Mapping

from .errors import MalformedRangeError
from .models import MalformedRange, Manifest, Package
from .ranges import range_type, rewrite_range


def _released_dependencies(
    pkg: Package, release_set: Mapping[str, str], graph: Mapping[str, set[str]]
) -> list[str]:
    """Released workspace packages that pkg declares, in release-set order."""
    return [
        name
        for name in release_set
        if name in graph and pkg.manifest.dependency_types(name)
    ]


def rewrite_manifest(
    pkg: Package,
    release_set: Mapping[str, str],
    graph: Mapping[str, set[str]],
) -> Manifest:
    """Return pkg's manifest updated for a release.

    This function:
    1. Copies the manifest, so pkg is left untouched if anything fails
    2. Rewrites every declaration of a released workspace package, in
       every dependency category it appears in
    3. Sets the package's own version when pkg itself is released

    Rewriting is idempotent: applying it to its own output with the same
    release set changes nothing.

    Args:
        pkg: The package to rewrite.
        release_set: Map of package name → version being released.
        graph: Internal dependency graph; its keys are the workspace
               package names.

    Raises:
        MalformedRangeError: If a range that needs rewriting has no
            operator class that can be preserved.
    """
    manifest = pkg.manifest.model_copy(deep=True)

    for dep_name in _released_dependencies(pkg, release_set, graph):
        new_version = release_set[dep_name]
        for dep_type, declared in manifest.dependency_ranges(dep_name).items():
            manifest.set_range(
                dep_type,
                dep_name,
                rewrite_range(
                    declared, new_version, package=pkg.name, dependency=dep_name
                ),
            )

    if pkg.name in release_set:
        manifest.set_version(release_set[pkg.name])

    return manifest


def unrewritable_ranges(
    pkg: Package,
    release_set: Mapping[str, str],
    graph: Mapping[str, set[str]],
) -> list[MalformedRange]:
    """Collect every range rewrite_manifest() would fail to classify.

    Lets a caller report all of them at once instead of stopping at the
    first.
    """
    malformed: list[MalformedRange] = []
    for dep_name in _released_dependencies(pkg, release_set, graph):
        for declared in pkg.manifest.dependency_ranges(dep_name).values():
            try:
                range_type(declared, package=pkg.name, dependency=dep_name)
            except MalformedRangeError as exc:
                for record in exc.ranges:
                    if record not in malformed:
                        malformed.append(record)
    return malformed
