"""Bump pipeline: discover → validate → rewrite → persist → commit.

This module orchestrates a workspace version bump:
1. Discover all packages in the workspace and their internal dependencies
2. Validate the release set against every package, released or not
3. Abort if any unreleased package would be left with a broken range,
   or if any range cannot be interpreted
4. Rewrite and write the manifests of released packages
5. Optionally stage and commit the result

Validation always covers the whole workspace before the first file is
written, so a failed run leaves every manifest untouched.
"""

from __future__ import annotations

import warnings
from collections.abc import Mapping
from pathlib import Path

from .check import inspect_package
from .config import BumpConfig
from .errors import (
    BumpError,
    ConsistencyViolationError,
    ExternalDependencyWarning,
    MalformedRangeError,
    NoPendingReleasesWarning,
)
from .files import save_manifest
from .graph import build_dependency_graph, find_external_dependencies, topo_sort
from .models import BumpPlan, Package, VersionBump
from .rewrite import rewrite_manifest, unrewritable_ranges
from .shell import git, step
from .workspace import discover_packages


def _processing_order(
    packages: Mapping[str, Package], graph: Mapping[str, set[str]]
) -> list[str]:
    """Dependencies first; packages missing from the graph last."""
    order = [name for name in topo_sort(graph) if name in packages]
    return order + sorted(name for name in packages if name not in graph)


def plan_bump(
    release_set: Mapping[str, str],
    packages: Mapping[str, Package],
    graph: Mapping[str, set[str]],
) -> BumpPlan:
    """Validate a release set against the workspace without touching disk.

    Every package is inspected and every problem is collected, so a caller
    can report all of them in one go. Rewritten manifests are only
    computed when nothing blocks the release.

    Args:
        release_set: Map of package name → version being released.
        packages: All workspace packages by name.
        graph: Internal dependency graph; its keys are the workspace
               package names.

    Returns:
        The plan. Check plan.ok before acting on it.
    """
    internal = {name: v for name, v in release_set.items() if name in graph}
    external = [name for name in release_set if name not in graph]
    plan = BumpPlan(releases=internal, external=external)

    order = _processing_order(packages, graph)
    for name in order:
        pkg = packages[name]
        violations, malformed = inspect_package(pkg, internal, graph)
        plan.violations.extend(violations)
        plan.malformed.extend(malformed)
        if name in internal:
            plan.malformed.extend(unrewritable_ranges(pkg, internal, graph))

    if plan.ok:
        for name in order:
            if name in internal:
                plan.manifests[name] = rewrite_manifest(packages[name], internal, graph)

    return plan


def bump_packages(
    release_set: Mapping[str, str],
    packages: Mapping[str, Package],
    graph: Mapping[str, set[str]],
    config: BumpConfig,
) -> BumpPlan:
    """Validate the release set, then write the released manifests.

    Manifests are written with the indentation they were read with. When
    config.commit is set, the written manifests are staged after all of
    them have been written. The in-memory packages are updated to match
    what was written.

    Raises:
        MalformedRangeError: If any relevant range cannot be interpreted.
        ConsistencyViolationError: If any unreleased package would be
            left with an unsatisfied range. Lists every violation.
    """
    if not release_set:
        warnings.warn(
            NoPendingReleasesWarning("No pending releases found, nothing to bump."),
            stacklevel=2,
        )
        return BumpPlan()

    step("Validating dependency ranges")
    plan = plan_bump(release_set, packages, graph)

    if plan.external:
        warnings.warn(
            ExternalDependencyWarning(
                "Ignoring releases for packages outside the workspace: "
                + ", ".join(plan.external)
            ),
            stacklevel=2,
        )
    if plan.malformed:
        raise MalformedRangeError(plan.malformed)
    if plan.violations:
        raise ConsistencyViolationError(plan.violations)
    print(f"  {len(packages)} packages consistent with the release")

    step(f"Bumping {len(plan.manifests)} packages")
    for name, manifest in plan.manifests.items():
        pkg = packages[name]
        save_manifest(pkg.manifest_path, manifest, pkg.indent, pkg.trailing_newline)
        plan.bumps[name] = VersionBump(old=pkg.version, new=manifest.version)
        pkg.manifest = manifest
        print(f"  {name}: {plan.bumps[name].old} → {plan.bumps[name].new}")

    # Stage only after every manifest is on disk
    if config.commit:
        for name in plan.bumps:
            git("add", str(packages[name].manifest_path), cwd=config.cwd)

    return plan


def release_commit_message(releases: Mapping[str, str], skip_ci: bool) -> str:
    """Build the commit message for a release.

    Example:
        RELEASING: Releasing 2 package(s)

        Releases:
          pkg-a@1.1.0
          pkg-b@2.0.0

        [skip ci]
    """
    lines = [f"RELEASING: Releasing {len(releases)} package(s)", "", "Releases:"]
    lines.extend(f"  {name}@{releases[name]}" for name in sorted(releases))
    if skip_ci:
        lines.extend(["", "[skip ci]"])
    return "\n".join(lines)


def commit_release(plan: BumpPlan, config: BumpConfig) -> None:
    """Commit the staged manifest changes of a bump."""
    staged = git("diff", "--cached", "--name-only", cwd=config.cwd, check=False)
    if not staged:
        raise BumpError("No changes to commit")

    message = release_commit_message(
        {name: bump.new for name, bump in plan.bumps.items()}, config.skip_ci
    )
    print(message)
    git("commit", "-m", message, cwd=config.cwd)
    print("  Committed")


def _print_packages(
    packages: Mapping[str, Package], graph: Mapping[str, set[str]], root: Path
) -> None:
    external = find_external_dependencies(packages)
    for name, pkg in packages.items():
        deps = f" → [{', '.join(sorted(graph[name]))}]" if graph[name] else ""
        ext = f" (+{len(external[name])} external)" if external[name] else ""
        print(f"  {name} {pkg.version} ({pkg.path.relative_to(root)}){deps}{ext}")


def run_version(release_set: Mapping[str, str], config: BumpConfig) -> BumpPlan:
    """Execute a full bump of the workspace at config.cwd.

    Args:
        release_set: Map of package name → version being released.
        config: Resolved configuration; config.cwd is the workspace root.
    """
    root = config.cwd.resolve()
    step("Discovering workspace packages")
    packages = discover_packages(root)
    graph = build_dependency_graph(packages)
    _print_packages(packages, graph, root)

    plan = bump_packages(release_set, packages, graph, config)
    if not plan.bumps:
        return plan

    if config.commit:
        step("Committing changes")
        commit_release(plan, config)
    else:
        print(
            "\nAll files have been updated. Review them and commit at your leisure."
        )
    return plan
