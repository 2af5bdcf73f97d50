"""Dependency graph utilities.

Builds the internal dependency graph of a workspace and provides a
deterministic processing order over it. Order never affects the outcome
of a bump, only the order in which results are reported and written.
"""

from __future__ import annotations

from collections.abc import Mapping

from .models import Package


def build_dependency_graph(packages: Mapping[str, Package]) -> dict[str, set[str]]:
    """Map every workspace package to the workspace packages it depends on.

    All dependency categories count. Dependencies on packages outside the
    workspace are left out; see find_external_dependencies().
    """
    workspace_names = set(packages)
    return {
        name: {
            dep
            for dep in pkg.manifest.declared_dependencies()
            if dep in workspace_names and dep != name
        }
        for name, pkg in packages.items()
    }


def find_external_dependencies(
    packages: Mapping[str, Package],
) -> dict[str, set[str]]:
    """Map every workspace package to its non-workspace dependencies."""
    workspace_names = set(packages)
    return {
        name: {
            dep
            for dep in pkg.manifest.declared_dependencies()
            if dep not in workspace_names
        }
        for name, pkg in packages.items()
    }


def topo_sort(graph: Mapping[str, set[str]]) -> list[str]:
    """Order packages so that dependencies come before dependents.

    Uses Kahn's algorithm. Packages that become ready at the same time are
    taken alphabetically for deterministic output.

    npm workspaces may legitimately contain cycles (typically through
    devDependencies), so instead of failing, packages left on a cycle are
    appended alphabetically after everything else.

    Example:
        If A depends on B, and B depends on C:
        topo_sort({A: {B}, B: {C}, C: {}}) → [C, B, A]
    """
    # Count incoming edges (dependencies) for each package
    in_degree = {n: 0 for n in graph}
    # Track reverse dependencies (who depends on each package)
    reverse_deps: dict[str, list[str]] = {n: [] for n in graph}

    for name, deps in graph.items():
        for dep in deps:
            # Only count dependencies that are part of the graph being sorted
            if dep in graph:
                in_degree[name] += 1
                reverse_deps[dep].append(name)

    queue = sorted(n for n, d in in_degree.items() if d == 0)
    order: list[str] = []

    while queue:
        node = queue.pop(0)
        order.append(node)
        for dependent in sorted(reverse_deps[node]):
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(order) != len(graph):
        order.extend(sorted(set(graph) - set(order)))

    return order
