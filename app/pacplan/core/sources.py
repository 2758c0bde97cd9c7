"""Collaborators shared by the manifest and plan runs.

Bundles the external data sources behind their narrow interfaces so the
runs can be driven by fakes in tests.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from pacplan.catalogs.archive import ArchiveCatalog
from pacplan.catalogs.base import RemoteCatalog, chunked
from pacplan.catalogs.repository import RepositoryCatalog
from pacplan.core.config import PacplanConfig
from pacplan.core.errors import PacplanError
from pacplan.core.oracle import VercmpOracle, VersionOracle
from pacplan.core.space import SpaceReport, assess_paths
from pacplan.models.package import VersionInfo
from pacplan.scanners.base import Scanner
from pacplan.scanners.flatpak import FlatpakAdapter
from pacplan.scanners.fwupd import FwupdAdapter
from pacplan.scanners.pacman import PacmanScanner

logger = logging.getLogger(__name__)

SpaceAssessor = Callable[[Sequence[str]], SpaceReport]


@dataclass
class Collaborators:
    """External data sources used by a run.

    Attributes:
        inventory: Installed package scanner.
        repository: Sync repository catalog.
        archive: AUR catalog.
        oracle: Version comparator.
        flatpak: Flatpak adapter.
        fwupd: Firmware adapter.
        assess_space: Returns the most constrained filesystem among
            the candidate paths.
    """

    inventory: Scanner
    repository: RemoteCatalog
    archive: RemoteCatalog
    oracle: VersionOracle
    flatpak: FlatpakAdapter = field(default_factory=FlatpakAdapter)
    fwupd: FwupdAdapter = field(default_factory=FwupdAdapter)
    assess_space: SpaceAssessor = assess_paths

    @classmethod
    def from_config(cls, config: PacplanConfig) -> "Collaborators":
        """Build the production collaborators."""
        return cls(
            inventory=PacmanScanner(),
            repository=RepositoryCatalog(),
            archive=ArchiveCatalog(
                base_url=config.archive.base_url,
                max_args=config.archive.max_args,
                timeout=config.archive.timeout,
            ),
            oracle=VercmpOracle(),
        )


def query_catalog(
    catalog: RemoteCatalog,
    names: Sequence[str],
    label: str,
    errors: list[str],
    *,
    batch_size: int | None = None,
    failed: set[str] | None = None,
) -> dict[str, VersionInfo]:
    """Query a catalog batch by batch, recording failed batches.

    A failing batch appends ``"LABEL: reason"`` to ``errors`` and the
    remaining batches are still queried.

    Args:
        catalog: Catalog to query.
        names: Package names to look up.
        label: Source label prefixed to error entries.
        errors: Error list to append to.
        batch_size: Override of the catalog batch size.
        failed: If given, receives the names of failed batches.

    Returns:
        Versions of every name answered by a successful batch.
    """
    found: dict[str, VersionInfo] = {}
    batches = chunked(names, batch_size) if batch_size else catalog.batches(names)
    for batch in batches:
        try:
            found.update(catalog.query_batch(batch))
        except PacplanError as e:
            logger.warning("%s query failed for %d names: %s", label, len(batch), e)
            errors.append(f"{label}: {e}")
            if failed is not None:
                failed.update(batch)
    return found
