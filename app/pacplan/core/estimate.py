"""Size estimation.

Fills gaps in upstream size telemetry with fixed multipliers so every
pending update contributes a transient disk requirement. AUR packages
are built locally, which is why their estimates are far larger than a
repository package of the same download size.
"""

import math
from dataclasses import dataclass

from pacplan.core.config import SizeHeuristics
from pacplan.models.package import PackageSource, VersionInfo


@dataclass(frozen=True, slots=True)
class SizeEstimate:
    """Estimated disk footprint of one update.

    All values are bytes; None means unknown.
    """

    download_selected: int | None = None
    installed_selected: int | None = None
    install_estimate: int | None = None
    build_estimate: int | None = None
    transient_estimate: int | None = None


def _prefer(primary: int | None, fallback: int | None) -> int | None:
    return primary if primary is not None else fallback


def estimate_sizes(
    source: PackageSource,
    repo: VersionInfo | None,
    aur: VersionInfo | None,
    heuristics: SizeHeuristics | None = None,
) -> SizeEstimate:
    """Estimate download, build, install and transient sizes.

    Args:
        source: Resolved source of the package.
        repo: Repository version info, if any.
        aur: AUR version info, if any.
        heuristics: Multipliers; defaults apply when None.

    Returns:
        The estimate. ``transient_estimate`` is None when nothing is known.
    """
    heuristics = heuristics or SizeHeuristics()

    repo_download = repo.download_size if repo else None
    repo_installed = repo.installed_size if repo else None
    aur_download = aur.download_size if aur else None
    aur_installed = aur.installed_size if aur else None

    if source is PackageSource.ARCHIVE:
        download = _prefer(aur_download, repo_download)
        installed = _prefer(aur_installed, repo_installed)
    else:
        download = _prefer(repo_download, aur_download)
        installed = _prefer(repo_installed, aur_installed)

    install: int | None = installed
    if install is None and download is not None:
        if source is PackageSource.ARCHIVE:
            install = round(download * heuristics.archive_install_multiplier)
        else:
            install = download

    build: int | None = None
    if source is PackageSource.REPOSITORY and install is not None:
        build = math.ceil(install * heuristics.repository_build_multiplier)
    elif source is PackageSource.ARCHIVE and download is not None:
        build = round(download * heuristics.archive_build_multiplier)

    total = (download or 0) + (build or 0) + (install or 0)

    return SizeEstimate(
        download_selected=download,
        installed_selected=installed,
        install_estimate=install,
        build_estimate=build,
        transient_estimate=total or None,
    )
