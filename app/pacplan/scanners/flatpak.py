"""Flatpak application adapter.

Reads installed applications and pending updates through the flatpak CLI.
Only applications are considered; runtimes follow their applications.
"""

import logging
from dataclasses import dataclass

from pacplan.core.errors import CommandMissingError
from pacplan.models.manifest import FlatpakApp, FlatpakState
from pacplan.utils.shell import command_exists, run_checked

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FlatpakUpdate:
    """Pending update reported by ``flatpak remote-ls --updates``.

    Attributes:
        application: Application ID.
        branch: Branch the update is published on.
        origin: Remote providing the update.
        available: Version advertised by the remote (may be empty).
    """

    application: str
    branch: str = ""
    origin: str = ""
    available: str = ""


def _split_columns(line: str, width: int) -> list[str] | None:
    """Split a tab-separated ``--columns`` line, padding missing columns."""
    parts = [part.strip() for part in line.split("\t")]
    if not parts or not parts[0]:
        return None
    parts.extend([""] * (width - len(parts)))
    return parts[:width]


class FlatpakAdapter:
    """Adapter over the flatpak CLI."""

    def is_available(self) -> bool:
        """Check if flatpak CLI is available."""
        return command_exists("flatpak")

    def _require(self) -> None:
        if not self.is_available():
            raise CommandMissingError("flatpak")

    def installed(self) -> list[FlatpakApp]:
        """List installed applications.

        Returns:
            Installed applications in CLI order.

        Raises:
            CommandMissingError: If flatpak is not installed.
            CommandFailureError: If ``flatpak list`` fails.
        """
        self._require()
        result = run_checked(
            ["flatpak", "list", "--app", "--columns=application,version,branch,origin"]
        )
        apps: list[FlatpakApp] = []
        for line in result.stdout.splitlines():
            parts = _split_columns(line, 4)
            if parts is None:
                continue
            application, version, branch, origin = parts
            apps.append(
                FlatpakApp(application=application, version=version, branch=branch, origin=origin)
            )
        return apps

    def updates(self) -> list[FlatpakUpdate]:
        """List pending application updates.

        Raises:
            CommandMissingError: If flatpak is not installed.
            CommandFailureError: If ``flatpak remote-ls`` fails.
        """
        self._require()
        result = run_checked(
            [
                "flatpak",
                "remote-ls",
                "--updates",
                "--app",
                "--columns=application,branch,origin,version",
            ]
        )
        updates: list[FlatpakUpdate] = []
        for line in result.stdout.splitlines():
            parts = _split_columns(line, 4)
            if parts is None:
                continue
            application, branch, origin, available = parts
            updates.append(
                FlatpakUpdate(
                    application=application, branch=branch, origin=origin, available=available
                )
            )
        return updates

    def snapshot(self) -> FlatpakState:
        """Capture the installed application state for the manifest."""
        apps = self.installed()
        logger.info("Recorded flatpak state: installed=%d", len(apps))
        return FlatpakState(enabled=True, installed_count=len(apps), installed=apps)
