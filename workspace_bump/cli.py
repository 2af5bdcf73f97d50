"""CLI entry point for workspace-bump."""

from __future__ import annotations

import subprocess
import warnings
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import click

from workspace_bump.config import load_config
from workspace_bump.errors import BumpError, NoPendingReleasesWarning
from workspace_bump.graph import build_dependency_graph
from workspace_bump.pipeline import plan_bump, run_version
from workspace_bump.releases import (
    Release,
    load_release_file,
    parse_release_spec,
    release_map,
)
from workspace_bump.shell import step, warn
from workspace_bump.workspace import discover_packages


def _release_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that takes a release set."""
    func = click.option(
        "--release-file",
        type=click.Path(dir_okay=False, path_type=Path),
        help='JSON file: {"releases": [{"name": ..., "version": ...}]}.',
    )(func)
    func = click.option(
        "-r",
        "--release",
        "release_specs",
        multiple=True,
        metavar="NAME@VERSION",
        help="Package to release and its new version (repeatable).",
    )(func)
    func = click.option(
        "--cwd",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=".",
        show_default=True,
        help="Workspace root.",
    )(func)
    return func


def _collect_releases(
    release_specs: tuple[str, ...], release_file: Path | None, cwd: Path
) -> dict[str, str]:
    if not release_specs and release_file is None:
        raise click.UsageError("Pass at least one --release or a --release-file.")
    releases: list[Release] = []
    if release_file is not None:
        path = release_file if release_file.is_absolute() else cwd / release_file
        releases.extend(load_release_file(path))
    releases.extend(parse_release_spec(spec) for spec in release_specs)
    return release_map(releases)


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Print warnings raised inside the block and turn errors into exit 1."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            yield
        except BumpError as exc:
            raise click.ClickException(str(exc)) from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip()
            raise click.ClickException(
                f"{' '.join(exc.cmd)} failed" + (f": {detail}" if detail else "")
            ) from exc
        finally:
            for w in caught:
                warn(str(w.message))


@click.group()
@click.version_option(package_name="workspace-bump")
def cli() -> None:
    """Bump versions across a workspace without breaking its dependency ranges."""


@cli.command()
@_release_options
@click.option(
    "--commit/--no-commit",
    default=None,
    help="Stage and commit the bump. Defaults to the config file setting.",
)
@click.option(
    "--skip-ci/--no-skip-ci",
    default=None,
    help="Mark the release commit with [skip ci]. Defaults to the config file.",
)
def version(
    cwd: Path,
    release_specs: tuple[str, ...],
    release_file: Path | None,
    commit: bool | None,
    skip_ci: bool | None,
) -> None:
    """Apply a release set: bump versions and rewrite internal ranges."""
    root = cwd.resolve()
    with _reported_errors():
        config = load_config(root, commit=commit, skip_ci=skip_ci)
        release_set = _collect_releases(release_specs, release_file, root)
        run_version(release_set, config)


@cli.command()
@_release_options
def check(
    cwd: Path, release_specs: tuple[str, ...], release_file: Path | None
) -> None:
    """Validate a release set without changing any file."""
    root = cwd.resolve()
    with _reported_errors():
        release_set = _collect_releases(release_specs, release_file, root)
        if not release_set:
            warnings.warn(NoPendingReleasesWarning("No pending releases found."))
            return

        packages = discover_packages(root)
        plan = plan_bump(release_set, packages, build_dependency_graph(packages))

        step("Release plan")
        for name in plan.external:
            click.echo(f"  {name}: not in the workspace, ignored")
        for name, new in plan.releases.items():
            click.echo(f"  {name}: {packages[name].version} → {new}")
        for record in plan.malformed:
            click.echo(f"  cannot interpret: {record}")
        for violation in plan.violations:
            click.echo(f"  blocked: {violation}")

        if not plan.ok:
            raise click.ClickException(
                f"Release blocked by {len(plan.violations)} violation(s) and "
                f"{len(plan.malformed)} uninterpretable range(s)."
            )
        click.echo("\n✓ Release set is consistent with the workspace")
