"""Source reconciliation.

Decides, for one installed package, which upstream catalog its update
should come from, which version that is, and whether it is newer than
what is installed.
"""

import logging
from dataclasses import dataclass

from pacplan.core.config import ReconcilePolicy
from pacplan.core.errors import PacplanError
from pacplan.core.oracle import VersionOracle
from pacplan.models.package import (
    LOCAL_ORIGIN,
    InstalledPackage,
    Ordering,
    PackageSource,
    VersionInfo,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of reconciling one package.

    Attributes:
        source: Catalog the package resolves to.
        newer_version: Version advertised by that catalog.
        update_available: True iff the installed version sorts before
            ``newer_version``.
        note: Advisory note for the manifest entry.
        error: Comparison failure, recorded in the run's error list.
    """

    source: PackageSource
    newer_version: str | None = None
    update_available: bool = False
    note: str | None = None
    error: str | None = None


def _pick(
    installed: InstalledPackage,
    repo: VersionInfo | None,
    aur: VersionInfo | None,
    oracle: VersionOracle,
    policy: ReconcilePolicy,
) -> tuple[PackageSource, VersionInfo | None, str | None]:
    """Choose the source and its version info; no verdict yet."""
    if repo is not None and aur is not None:
        ordering = oracle.compare(repo.version, aur.version)
        if ordering is Ordering.GREATER:
            return PackageSource.REPOSITORY, repo, None
        if ordering is Ordering.EQUAL:
            if policy.prefer_repository_on_tie:
                return PackageSource.REPOSITORY, repo, None
            return PackageSource.ARCHIVE, aur, None
        if installed.name in policy.pinned_repository:
            note = (
                f"AUR ahead of repository ({aur.version} > {repo.version}), "
                "but repository chosen per policy"
            )
            return PackageSource.REPOSITORY, repo, note
        return PackageSource.ARCHIVE, aur, None
    if repo is not None:
        return PackageSource.REPOSITORY, repo, None
    if aur is not None:
        return PackageSource.ARCHIVE, aur, None
    if installed.origin is not None and installed.origin.lower() == LOCAL_ORIGIN:
        return PackageSource.LOCAL, None, None
    return PackageSource.UNKNOWN, None, None


def reconcile_package(
    installed: InstalledPackage,
    repo: VersionInfo | None,
    aur: VersionInfo | None,
    oracle: VersionOracle,
    policy: ReconcilePolicy | None = None,
) -> Resolution:
    """Resolve the update source and verdict for one package.

    Comparison failures never propagate: the package resolves to
    UNKNOWN with no update and the failure is returned in
    :attr:`Resolution.error`.

    Args:
        installed: The installed package.
        repo: Version advertised by the sync repositories, if any.
        aur: Version advertised by the AUR, if any.
        oracle: Version comparator.
        policy: Source selection policy; defaults apply when None.

    Returns:
        The package's Resolution.
    """
    policy = policy or ReconcilePolicy()
    try:
        source, chosen, note = _pick(installed, repo, aur, oracle, policy)
        if chosen is None:
            return Resolution(source=source)
        update = oracle.compare(installed.version, chosen.version) is Ordering.LESS
    except PacplanError as e:
        error = f"version comparison failed for {installed.name}: {e}"
        logger.warning("%s", error)
        return Resolution(
            source=PackageSource.UNKNOWN,
            note="version comparison failed",
            error=error,
        )

    return Resolution(
        source=source,
        newer_version=chosen.version,
        update_available=update,
        note=note,
    )
