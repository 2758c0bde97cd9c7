"""pacman inventory scanner.

Scans installed packages with ``pacman -Qi`` and tags foreign packages
(those reported by ``pacman -Qm``) with the ``local`` origin.
"""

import logging
import re
from collections.abc import Iterator

from pacplan.core.errors import CommandFailureError, CommandMissingError
from pacplan.models.package import LOCAL_ORIGIN, InstalledPackage
from pacplan.scanners.base import Scanner
from pacplan.utils.shell import command_exists, run_checked, run_command

logger = logging.getLogger(__name__)

# Origin recorded for packages owned by a sync repository
REPOSITORY_ORIGIN = "pacman"

# Regex pattern for pacman size strings like "1.5 MiB" or "12,34 KiB"
_SIZE_PATTERN = re.compile(r"^\s*([\d.,]+)\s*([KMGT]?i?B)?\s*$")

_SIZE_MULTIPLIERS: dict[str, int] = {
    "B": 1,
    "KiB": 1024,
    "MiB": 1024**2,
    "GiB": 1024**3,
    "TiB": 1024**4,
}


def parse_pacman_size(value: str) -> int | None:
    """Parse a pacman size field to bytes.

    pacman prints IEC units; the decimal separator follows the locale,
    so a comma is accepted in place of a dot. Unknown units count as bytes.

    Args:
        value: Size string like "1.50 MiB".

    Returns:
        Size in bytes, or None if the value cannot be parsed.
    """
    match = _SIZE_PATTERN.match(value)
    if not match:
        return None
    try:
        magnitude = float(match.group(1).replace(",", "."))
    except ValueError:
        return None
    multiplier = _SIZE_MULTIPLIERS.get(match.group(2) or "B", 1)
    return round(magnitude * multiplier)


def parse_info_blocks(output: str) -> Iterator[dict[str, str]]:
    """Split ``pacman -Qi``/``-Si`` output into one field mapping per package.

    Packages are separated by blank lines. Continuation lines of
    multi-line fields are ignored unless they look like a new key.

    Args:
        output: Raw command output.

    Yields:
        Mapping of field name to trimmed value for each block that has a Name.
    """
    fields: dict[str, str] = {}
    for line in output.splitlines():
        if not line.strip():
            if "Name" in fields:
                yield fields
            fields = {}
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        # First occurrence wins; continuation lines may contain colons
        fields.setdefault(key.strip(), value.strip())
    if "Name" in fields:
        yield fields


class PacmanScanner(Scanner):
    """Scanner for the pacman local database."""

    @property
    def name(self) -> str:
        """Return "pacman" as the scanned package manager."""
        return "pacman"

    def is_available(self) -> bool:
        """Check if pacman is available."""
        return command_exists("pacman")

    def scan(self) -> Iterator[InstalledPackage]:
        """Scan all installed packages.

        Yields:
            InstalledPackage for each installed package, sorted by name.

        Raises:
            CommandMissingError: If pacman is not installed.
            CommandFailureError: If ``pacman -Qi`` fails.
        """
        if not self.is_available():
            raise CommandMissingError("pacman")

        foreign = self._get_foreign()
        result = run_checked(["pacman", "-Qi"])

        packages: list[InstalledPackage] = []
        for fields in parse_info_blocks(result.stdout):
            package = self._parse_block(fields, foreign)
            if package is not None:
                packages.append(package)

        packages.sort(key=lambda pkg: pkg.name)
        logger.debug("Scanned %d installed packages (%d foreign)", len(packages), len(foreign))
        yield from packages

    def _get_foreign(self) -> set[str]:
        """Get the set of foreign package names.

        A failing ``pacman -Qm`` leaves every package attributed to the
        repositories; the catalogs then decide where each one lives.
        """
        result = run_command(["pacman", "-Qm"])
        if not result.success:
            logger.warning(
                "pacman -Qm failed, foreign packages not detected: %s",
                result.stderr.strip() or "no error output",
            )
            return set()
        return {line.split()[0] for line in result.stdout.splitlines() if line.strip()}

    def _parse_block(self, fields: dict[str, str], foreign: set[str]) -> InstalledPackage | None:
        """Build a package from one ``-Qi`` block.

        Returns:
            InstalledPackage, or None if the block lacks a name or version.
        """
        name = fields.get("Name", "")
        version = fields.get("Version", "")
        if not name or not version:
            logger.debug("Skipping pacman block without name/version: %r", name)
            return None

        origin = fields.get("Repository") or (
            LOCAL_ORIGIN if name in foreign else REPOSITORY_ORIGIN
        )
        size = fields.get("Installed Size")

        return InstalledPackage(
            name=name,
            version=version,
            origin=origin,
            installed_size=parse_pacman_size(size) if size else None,
            install_date=fields.get("Install Date") or None,
            validated_by=fields.get("Validated By") or None,
            package_hash=fields.get("SHA-256 Sum") or None,
        )

    def explicit_packages(self, *, foreign: bool) -> list[str]:
        """List explicitly installed package names.

        Args:
            foreign: True for foreign packages (``-Qqem``), False for
                repository packages (``-Qqen``).

        Returns:
            Sorted package names.

        Raises:
            CommandFailureError: If pacman fails for a reason other than
                an empty result.
        """
        flag = "-Qqem" if foreign else "-Qqen"
        result = run_command(["pacman", flag])
        if not result.success:
            # pacman exits 1 with no output when the query matches nothing
            if result.returncode == 1 and not result.stdout.strip() and not result.stderr.strip():
                return []
            raise CommandFailureError(f"pacman {flag}", result.returncode, result.stderr)
        return sorted(line.strip() for line in result.stdout.splitlines() if line.strip())
