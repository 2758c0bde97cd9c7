"""Sync repository catalog backed by ``pacman -Si``."""

import logging

from pacplan.catalogs.base import RemoteCatalog
from pacplan.core.errors import CommandFailureError
from pacplan.models.package import VersionInfo
from pacplan.scanners.pacman import parse_info_blocks, parse_pacman_size
from pacplan.utils.shell import run_command

logger = logging.getLogger(__name__)

# Names per pacman -Si invocation, keeps argument lists well below ARG_MAX
REPOSITORY_CHUNK_SIZE = 64


class RepositoryCatalog(RemoteCatalog):
    """Versions advertised by the configured pacman sync repositories."""

    batch_size = REPOSITORY_CHUNK_SIZE

    def query_batch(self, names: list[str]) -> dict[str, VersionInfo]:
        """Run ``pacman -Si`` for one batch.

        pacman exits non-zero as soon as one name is unknown but still
        prints the packages it found; such partial output is used and
        the missing names are left out.

        Raises:
            CommandMissingError: If pacman is not installed.
            CommandFailureError: If pacman fails without printing any package.
        """
        if not names:
            return {}
        args = ["pacman", "-Si", *names]
        result = run_command(args)
        if not result.success:
            if not result.stdout.strip():
                raise CommandFailureError(" ".join(args), result.returncode, result.stderr)
            logger.warning(
                "pacman -Si returned status %d, using partial output: %s",
                result.returncode,
                result.stderr.strip() or "no error output",
            )

        found: dict[str, VersionInfo] = {}
        for fields in parse_info_blocks(result.stdout):
            version = fields.get("Version")
            if not version:
                continue
            download = fields.get("Download Size")
            installed = fields.get("Installed Size")
            found[fields["Name"]] = VersionInfo(
                version=version,
                download_size=parse_pacman_size(download) if download else None,
                installed_size=parse_pacman_size(installed) if installed else None,
                package_hash=fields.get("SHA-256 Sum") or None,
                validated_by=fields.get("Validated By") or None,
            )
        logger.debug("pacman -Si answered %d of %d names", len(found), len(names))
        return found
