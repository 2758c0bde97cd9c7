"""Unit tests for FlatpakAdapter.

Tests for the Flatpak application adapter implementation.
"""

from unittest.mock import patch

import pytest
from pacplan.core.errors import CommandFailureError, CommandMissingError
from pacplan.scanners.flatpak import FlatpakAdapter, FlatpakUpdate
from pacplan.utils.shell import CommandResult


class TestFlatpakAdapter:
    """Tests for FlatpakAdapter class."""

    @pytest.fixture
    def adapter(self) -> FlatpakAdapter:
        """Create FlatpakAdapter instance."""
        return FlatpakAdapter()

    def test_is_available(self, adapter: FlatpakAdapter) -> None:
        """is_available returns True when flatpak command exists."""
        with patch("pacplan.scanners.flatpak.command_exists") as mock_exists:
            mock_exists.return_value = True
            assert adapter.is_available() is True
            mock_exists.assert_called_once_with("flatpak")

    def test_missing_flatpak(self, adapter: FlatpakAdapter) -> None:
        """Queries without flatpak raise CommandMissingError."""
        with (
            patch("pacplan.scanners.flatpak.command_exists", return_value=False),
            pytest.raises(CommandMissingError, match="flatpak"),
        ):
            adapter.installed()

    def test_installed(self, adapter: FlatpakAdapter, flatpak_list_output: str) -> None:
        """installed parses the tab-separated columns."""
        with (
            patch("pacplan.scanners.flatpak.command_exists", return_value=True),
            patch("pacplan.scanners.flatpak.run_checked") as mock_run,
        ):
            mock_run.return_value = CommandResult(
                stdout=flatpak_list_output, stderr="", returncode=0
            )

            apps = adapter.installed()

        assert [app.application for app in apps] == [
            "org.mozilla.firefox",
            "org.gnome.Calculator",
            "com.example.NoVersion",
        ]
        assert apps[0].version == "128.0"
        assert apps[0].branch == "stable"
        assert apps[0].origin == "flathub"
        assert apps[2].version == ""

    def test_updates(self, adapter: FlatpakAdapter, flatpak_updates_output: str) -> None:
        """updates parses remote-ls output."""
        with (
            patch("pacplan.scanners.flatpak.command_exists", return_value=True),
            patch("pacplan.scanners.flatpak.run_checked") as mock_run,
        ):
            mock_run.return_value = CommandResult(
                stdout=flatpak_updates_output, stderr="", returncode=0
            )

            updates = adapter.updates()

        assert updates[0] == FlatpakUpdate(
            application="org.mozilla.firefox", branch="stable", origin="flathub", available="129.0"
        )
        assert len(updates) == 2

    def test_short_lines_padded(self, adapter: FlatpakAdapter) -> None:
        """Missing trailing columns become empty strings; blank lines are skipped."""
        with (
            patch("pacplan.scanners.flatpak.command_exists", return_value=True),
            patch("pacplan.scanners.flatpak.run_checked") as mock_run,
        ):
            mock_run.return_value = CommandResult(
                stdout="org.example.App\tstable\n\n", stderr="", returncode=0
            )

            updates = adapter.updates()

        assert updates == [FlatpakUpdate(application="org.example.App", branch="stable")]

    def test_snapshot(self, adapter: FlatpakAdapter, flatpak_list_output: str) -> None:
        """snapshot records the installed applications."""
        with (
            patch("pacplan.scanners.flatpak.command_exists", return_value=True),
            patch("pacplan.scanners.flatpak.run_checked") as mock_run,
        ):
            mock_run.return_value = CommandResult(
                stdout=flatpak_list_output, stderr="", returncode=0
            )

            state = adapter.snapshot()

        assert state.enabled is True
        assert state.installed_count == 3

    def test_failure_propagates(self, adapter: FlatpakAdapter) -> None:
        """A failing flatpak command raises."""
        with (
            patch("pacplan.scanners.flatpak.command_exists", return_value=True),
            patch("pacplan.scanners.flatpak.run_checked") as mock_run,
        ):
            mock_run.side_effect = CommandFailureError("flatpak remote-ls", 1, "no remotes")
            with pytest.raises(CommandFailureError):
                adapter.updates()
