"""Unit tests for shell execution utilities."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest
from pacplan.core.errors import CommandFailureError, CommandMissingError, PacplanRuntimeError
from pacplan.utils.shell import CommandResult, command_exists, run_checked, run_command


class TestCommandResult:
    """Tests for CommandResult dataclass."""

    def test_success(self) -> None:
        """Exit code zero is a success."""
        assert CommandResult(stdout="", stderr="", returncode=0).success is True
        assert CommandResult(stdout="", stderr="", returncode=2).success is False


class TestRunCommand:
    """Tests for run_command function."""

    @patch("pacplan.utils.shell.subprocess.run")
    def test_captures_output(self, mock_run: MagicMock) -> None:
        """run_command returns the captured streams and exit code."""
        mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=3)

        result = run_command(["pacman", "-Qm"])

        assert result == CommandResult(stdout="out", stderr="err", returncode=3)
        kwargs = mock_run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True
        assert kwargs["check"] is False
        assert kwargs["timeout"] is None

    @patch("pacplan.utils.shell.subprocess.run")
    def test_passes_timeout_and_cwd(self, mock_run: MagicMock) -> None:
        """Timeout and working directory are forwarded."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["ls"], timeout=5.0, cwd="/tmp")

        assert mock_run.call_args.kwargs["timeout"] == 5.0
        assert mock_run.call_args.kwargs["cwd"] == "/tmp"

    @patch("pacplan.utils.shell.subprocess.run")
    def test_missing_executable(self, mock_run: MagicMock) -> None:
        """A missing executable raises CommandMissingError."""
        mock_run.side_effect = FileNotFoundError()

        with pytest.raises(CommandMissingError, match="vercmp"):
            run_command(["vercmp", "1", "2"])

    @patch("pacplan.utils.shell.subprocess.run")
    def test_timeout(self, mock_run: MagicMock) -> None:
        """Timeouts become runtime errors."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="pacman", timeout=1.0)

        with pytest.raises(PacplanRuntimeError, match="timed out"):
            run_command(["pacman", "-Qi"], timeout=1.0)

    @patch("pacplan.utils.shell.subprocess.run")
    def test_spawn_failure(self, mock_run: MagicMock) -> None:
        """Other OS errors become runtime errors."""
        mock_run.side_effect = PermissionError("denied")

        with pytest.raises(PacplanRuntimeError, match="Failed to spawn pacman"):
            run_command(["pacman", "-Qi"])


class TestRunChecked:
    """Tests for run_checked function."""

    @patch("pacplan.utils.shell.run_command")
    def test_success(self, mock_run: MagicMock) -> None:
        """Accepted exit codes return the result."""
        mock_run.return_value = CommandResult(stdout="ok", stderr="", returncode=0)
        assert run_checked(["true"]).stdout == "ok"

    @patch("pacplan.utils.shell.run_command")
    def test_custom_ok_codes(self, mock_run: MagicMock) -> None:
        """Additional exit codes can be accepted."""
        mock_run.return_value = CommandResult(stdout="", stderr="", returncode=2)
        assert run_checked(["fwupdmgr"], ok_codes=(0, 2)).returncode == 2

    @patch("pacplan.utils.shell.run_command")
    def test_failure(self, mock_run: MagicMock) -> None:
        """Other exit codes raise CommandFailureError with stderr."""
        mock_run.return_value = CommandResult(stdout="", stderr="boom", returncode=1)

        with pytest.raises(CommandFailureError, match="pacman -Qi failed with status 1: boom"):
            run_checked(["pacman", "-Qi"])


class TestCommandExists:
    """Tests for command_exists function."""

    @patch("pacplan.utils.shell.shutil.which")
    def test_found(self, mock_which: MagicMock) -> None:
        """Commands on PATH exist."""
        mock_which.return_value = "/usr/bin/pacman"
        assert command_exists("pacman") is True

    @patch("pacplan.utils.shell.shutil.which")
    def test_missing(self, mock_which: MagicMock) -> None:
        """Commands not on PATH do not exist."""
        mock_which.return_value = None
        assert command_exists("flatpak") is False
