"""Unit tests for the plan command."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import patch

from pacplan.cli.main import app
from pacplan.core.errors import ExitCode
from pacplan.core.sources import Collaborators
from pacplan.models.package import VersionInfo
from typer.testing import CliRunner

runner = CliRunner()

COLLABORATORS = "pacplan.cli.commands.plan.build_collaborators"


class TestPlanCommand:
    """Tests for pacplan plan."""

    def test_writes_plan(self, tmp_path: Path, make_sources: Callable[..., Collaborators]) -> None:
        """The plan is written and summarized."""
        path = tmp_path / "plan.json"
        with patch(COLLABORATORS, return_value=make_sources()):
            result = runner.invoke(app, ["--plan", str(path), "plan"])

        assert result.exit_code == 0, result.output
        assert "Plan written" in result.stdout
        assert "bash" in result.stdout
        data = json.loads(path.read_text())
        assert data["counts"] == {"pacman": 1, "aur": 1, "flatpak": 0, "fwupd": 0}

    def test_json_output(self, tmp_path: Path, make_sources: Callable[..., Collaborators]) -> None:
        """--json prints the plan document."""
        path = tmp_path / "plan.json"
        with patch(COLLABORATORS, return_value=make_sources()):
            result = runner.invoke(app, ["--quiet", "--plan", str(path), "plan", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [entry["name"] for entry in data["pacman_updates"]] == ["bash"]
        assert data["metadata"]["plan_path"] == str(path)

    def test_offline_skips_aur(
        self, tmp_path: Path, make_sources: Callable[..., Collaborators]
    ) -> None:
        """--offline disables the AUR source."""
        path = tmp_path / "plan.json"
        sources = make_sources()
        with patch(COLLABORATORS, return_value=sources):
            result = runner.invoke(app, ["--plan", str(path), "plan", "--offline"])

        assert result.exit_code == 0, result.output
        assert sources.archive.requests == []  # type: ignore[attr-defined]
        assert json.loads(path.read_text())["metadata"]["sources"] == ["pacman"]

    def test_exclude(self, tmp_path: Path, make_sources: Callable[..., Collaborators]) -> None:
        """--exclude drops matching names."""
        path = tmp_path / "plan.json"
        with patch(COLLABORATORS, return_value=make_sources()):
            result = runner.invoke(app, ["--plan", str(path), "plan", "-x", "^bash$"])

        assert result.exit_code == 0, result.output
        assert json.loads(path.read_text())["pacman_updates"] == []

    def test_invalid_pattern(
        self, tmp_path: Path, make_sources: Callable[..., Collaborators]
    ) -> None:
        """Invalid regexes exit with the config code."""
        with patch(COLLABORATORS, return_value=make_sources()):
            result = runner.invoke(app, ["--plan", str(tmp_path / "p.json"), "plan", "-i", "("])
        assert result.exit_code == int(ExitCode.CONFIG)

    def test_strict_with_errors(
        self,
        tmp_path: Path,
        make_sources: Callable[..., Collaborators],
        catalog_factory: Any,
        repo_versions: dict[str, VersionInfo],
    ) -> None:
        """--strict turns recorded errors into exit status 1."""
        path = tmp_path / "plan.json"
        repository = catalog_factory(repo_versions, fail_names=["bash"])

        with patch(COLLABORATORS, return_value=make_sources(repository=repository)):
            lenient = runner.invoke(app, ["--plan", str(path), "plan"])
        with patch(COLLABORATORS, return_value=make_sources(repository=repository)):
            strict = runner.invoke(app, ["--plan", str(path), "plan", "--strict"])

        assert lenient.exit_code == 0, lenient.output
        assert "catalog unreachable" in lenient.stdout
        assert strict.exit_code == int(ExitCode.ERRORS)

    def test_enforced_capacity_blocks(
        self, tmp_path: Path, make_sources: Callable[..., Collaborators]
    ) -> None:
        """A blocked plan is still written but exits with the capacity code."""
        config = tmp_path / "config.toml"
        config.write_text('[space]\npolicy = "enforce"\n')
        path = tmp_path / "plan.json"
        with patch(COLLABORATORS, return_value=make_sources(free_bytes=100)):
            result = runner.invoke(app, ["--config", str(config), "--plan", str(path), "plan"])

        assert result.exit_code == int(ExitCode.CAPACITY)
        assert "blocked" in result.output
        assert json.loads(path.read_text())["metadata"]["space"]["status"] == "low"

    def test_dry_run_does_not_block(
        self, tmp_path: Path, make_sources: Callable[..., Collaborators]
    ) -> None:
        """--dry-run reports the shortfall as a warning."""
        config = tmp_path / "config.toml"
        config.write_text('[space]\npolicy = "enforce"\n')
        path = tmp_path / "plan.json"
        with patch(COLLABORATORS, return_value=make_sources(free_bytes=100)):
            result = runner.invoke(
                app, ["--config", str(config), "--plan", str(path), "plan", "--dry-run"]
            )

        assert result.exit_code == 0, result.output
        assert json.loads(path.read_text())["metadata"]["space"]["warning"]
