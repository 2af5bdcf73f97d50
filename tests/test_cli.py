"""Tests for workspace_bump.cli."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from workspace_bump.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _version_of(root: Path, name: str) -> str:
    return json.loads((root / "packages" / name / "package.json").read_text())["version"]


class TestVersionCommand:
    """Tests for the version command."""

    def test_bumps_workspace(self, runner: CliRunner, two_package_workspace: Path) -> None:
        root = two_package_workspace

        result = runner.invoke(
            cli, ["version", "--cwd", str(root), "-r", "a@1.1.0", "-r", "b@2.0.0"]
        )

        assert result.exit_code == 0, result.output
        assert _version_of(root, "a") == "1.1.0"
        assert _version_of(root, "b") == "2.0.0"

    def test_violation_exits_nonzero(
        self, runner: CliRunner, two_package_workspace: Path
    ) -> None:
        root = two_package_workspace

        result = runner.invoke(cli, ["version", "--cwd", str(root), "-r", "b@2.0.0"])

        assert result.exit_code == 1
        assert "a depends on b@^1.0.0, which 2.0.0 does not satisfy" in result.output
        assert _version_of(root, "b") == "1.0.0"

    def test_release_file(self, runner: CliRunner, two_package_workspace: Path) -> None:
        root = two_package_workspace
        (root / "release.json").write_text(
            json.dumps({"releases": [{"name": "b", "version": "1.0.1", "type": "patch"}]})
        )

        result = runner.invoke(
            cli, ["version", "--cwd", str(root), "--release-file", "release.json"]
        )

        assert result.exit_code == 0, result.output
        assert _version_of(root, "b") == "1.0.1"

    def test_requires_a_release_source(
        self, runner: CliRunner, two_package_workspace: Path
    ) -> None:
        result = runner.invoke(cli, ["version", "--cwd", str(two_package_workspace)])

        assert result.exit_code == 2
        assert "--release" in result.output

    def test_invalid_release_spec(
        self, runner: CliRunner, two_package_workspace: Path
    ) -> None:
        result = runner.invoke(
            cli, ["version", "--cwd", str(two_package_workspace), "-r", "b"]
        )

        assert result.exit_code == 1
        assert "expected NAME@VERSION" in result.output

    def test_external_release_warns(
        self, runner: CliRunner, two_package_workspace: Path
    ) -> None:
        result = runner.invoke(
            cli, ["version", "--cwd", str(two_package_workspace), "-r", "react@19.0.0"]
        )

        assert result.exit_code == 0, result.output
        assert "Warning: Ignoring releases for packages outside the workspace: react" in (
            result.output
        )

    def test_empty_release_file_warns(
        self, runner: CliRunner, two_package_workspace: Path
    ) -> None:
        root = two_package_workspace
        (root / "release.json").write_text('{"releases": []}')

        result = runner.invoke(
            cli, ["version", "--cwd", str(root), "--release-file", "release.json"]
        )

        assert result.exit_code == 0, result.output
        assert "No pending releases" in result.output

    @patch("workspace_bump.pipeline.git")
    def test_commit_flag(
        self, mock_git: MagicMock, runner: CliRunner, two_package_workspace: Path
    ) -> None:
        mock_git.return_value = "staged"

        result = runner.invoke(
            cli,
            [
                "version",
                "--cwd",
                str(two_package_workspace),
                "-r",
                "b@1.0.1",
                "--commit",
                "--no-skip-ci",
            ],
        )

        assert result.exit_code == 0, result.output
        mock_git.assert_called_with(
            "commit",
            "-m",
            "RELEASING: Releasing 1 package(s)\n\nReleases:\n  b@1.0.1",
            cwd=two_package_workspace.resolve(),
        )

    @patch("workspace_bump.pipeline.git")
    def test_git_failure_reported(
        self, mock_git: MagicMock, runner: CliRunner, two_package_workspace: Path
    ) -> None:
        mock_git.side_effect = subprocess.CalledProcessError(
            128, ["git", "add"], stderr="fatal: not a git repository"
        )

        result = runner.invoke(
            cli,
            ["version", "--cwd", str(two_package_workspace), "-r", "b@1.0.1", "--commit"],
        )

        assert result.exit_code == 1
        assert "git add failed: fatal: not a git repository" in result.output


class TestCheckCommand:
    """Tests for the check command."""

    def test_consistent(self, runner: CliRunner, two_package_workspace: Path) -> None:
        root = two_package_workspace
        before = (root / "packages" / "b" / "package.json").read_text()

        result = runner.invoke(
            cli, ["check", "--cwd", str(root), "-r", "a@1.1.0", "-r", "b@2.0.0"]
        )

        assert result.exit_code == 0, result.output
        assert "b: 1.0.0 → 2.0.0" in result.output
        assert "consistent" in result.output
        assert (root / "packages" / "b" / "package.json").read_text() == before

    def test_blocked(self, runner: CliRunner, two_package_workspace: Path) -> None:
        result = runner.invoke(
            cli, ["check", "--cwd", str(two_package_workspace), "-r", "b@2.0.0"]
        )

        assert result.exit_code == 1
        assert "blocked: a depends on b@^1.0.0" in result.output
        assert "1 violation(s)" in result.output

    def test_reports_external(
        self, runner: CliRunner, two_package_workspace: Path
    ) -> None:
        result = runner.invoke(
            cli, ["check", "--cwd", str(two_package_workspace), "-r", "react@19.0.0"]
        )

        assert result.exit_code == 0, result.output
        assert "react: not in the workspace, ignored" in result.output
