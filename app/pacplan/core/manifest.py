"""Manifest building and file I/O.

The manifest is a point-in-time snapshot of the installed inventory with
one reconciled entry per package. :func:`build_manifest` is a pure
function of its inputs; :func:`run_manifest` gathers those inputs from
the live system.
"""

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from pacplan.core.config import ReconcilePolicy, SizeHeuristics, SpaceSettings
from pacplan.core.errors import FilesystemError, PacplanError, SerializationError
from pacplan.core.estimate import estimate_sizes
from pacplan.core.oracle import VersionOracle
from pacplan.core.reconcile import reconcile_package
from pacplan.core.sources import Collaborators, query_catalog
from pacplan.core.space import CapacityVerdict, evaluate_capacity
from pacplan.models.manifest import (
    ManifestDocument,
    ManifestEntry,
    ManifestMetadata,
    PackageGroup,
)
from pacplan.models.package import InstalledPackage, PackageSource, VersionInfo, truncate_hash
from pacplan.utils.files import write_private_text

logger = logging.getLogger(__name__)


class ManifestNotFoundError(FilesystemError):
    """Raised when the manifest file does not exist."""


class ManifestParseError(SerializationError):
    """Raised when the manifest file is not a valid manifest document."""


def utc_timestamp() -> str:
    """Current time as an RFC 3339 UTC timestamp with second precision."""
    return datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")


def _make_entry(
    package: InstalledPackage,
    repo: VersionInfo | None,
    aur: VersionInfo | None,
    oracle: VersionOracle,
    heuristics: SizeHeuristics,
    policy: ReconcilePolicy,
    errors: list[str],
) -> ManifestEntry:
    resolution = reconcile_package(package, repo, aur, oracle, policy)
    if resolution.error:
        errors.append(resolution.error)
    sizes = estimate_sizes(resolution.source, repo, aur, heuristics)

    return ManifestEntry(
        installed_version=package.version,
        origin=package.origin,
        repo_version=repo.version if repo else None,
        aur_version=aur.version if aur else None,
        newer_version=resolution.newer_version,
        source=resolution.source,
        update_available=resolution.update_available,
        notes=resolution.note,
        installed_size=package.installed_size,
        install_date=package.install_date,
        validated_by=package.validated_by,
        package_hash=truncate_hash(package.package_hash),
        download_size_repo=repo.download_size if repo else None,
        installed_size_repo=repo.installed_size if repo else None,
        download_size_aur=aur.download_size if aur else None,
        installed_size_aur=aur.installed_size if aur else None,
        download_size_selected=sizes.download_selected,
        installed_size_selected=sizes.installed_selected,
        install_size_estimate=sizes.install_estimate,
        build_size_estimate=sizes.build_estimate,
        transient_size_estimate=sizes.transient_estimate,
    )


def build_manifest(
    packages: Iterable[InstalledPackage],
    repo_versions: Mapping[str, VersionInfo],
    aur_versions: Mapping[str, VersionInfo],
    oracle: VersionOracle,
    heuristics: SizeHeuristics | None = None,
    policy: ReconcilePolicy | None = None,
    generated_at: str | None = None,
) -> ManifestDocument:
    """Reconcile every installed package into a manifest document.

    Packages are processed and stored in name order, so identical inputs
    and timestamp serialize to identical bytes. Size totals only cover
    entries with an update available. Comparison failures are collected
    in ``metadata.errors``.

    Args:
        packages: Installed inventory.
        repo_versions: Repository answers keyed by package name.
        aur_versions: AUR answers keyed by package name.
        oracle: Version comparator.
        heuristics: Size estimate multipliers.
        policy: Source selection policy.
        generated_at: Timestamp to record; defaults to now.

    Returns:
        The manifest document.
    """
    heuristics = heuristics or SizeHeuristics()
    policy = policy or ReconcilePolicy()
    errors: list[str] = []

    entries: dict[str, ManifestEntry] = {}
    for package in sorted(packages, key=lambda pkg: pkg.name):
        entries[package.name] = _make_entry(
            package,
            repo_versions.get(package.name),
            aur_versions.get(package.name),
            oracle,
            heuristics,
            policy,
            errors,
        )

    groups: dict[PackageSource, list[str]] = {source: [] for source in PackageSource}
    for name, entry in entries.items():
        groups[entry.source].append(name)

    pending = [entry for entry in entries.values() if entry.update_available]
    metadata = ManifestMetadata(
        generated_at=generated_at or utc_timestamp(),
        total_packages=len(entries),
        pacman_packages=len(groups[PackageSource.REPOSITORY]),
        aur_packages=len(groups[PackageSource.ARCHIVE]),
        local_packages=len(groups[PackageSource.LOCAL]),
        unknown_packages=len(groups[PackageSource.UNKNOWN]),
        updates_available=len(pending),
        download_size_total=sum(entry.download_size_selected or 0 for entry in pending),
        build_size_total=sum(entry.build_size_estimate or 0 for entry in pending),
        install_size_total=sum(entry.install_size_estimate or 0 for entry in pending),
        transient_size_total=sum(entry.transient_size_estimate or 0 for entry in pending),
        errors=errors,
    )

    return ManifestDocument(
        metadata=metadata,
        packages=entries,
        packages_by_source=[
            PackageGroup(source=source, count=len(names), packages=sorted(names))
            for source, names in sorted(groups.items(), key=lambda item: item[0].rank)
            if names
        ],
    )


def attach_capacity(document: ManifestDocument, verdict: CapacityVerdict) -> None:
    """Record the disk check result in the manifest metadata."""
    metadata = document.metadata
    metadata.min_free_bytes = verdict.min_free_bytes
    metadata.required_space_total = verdict.required_bytes
    metadata.available_space_bytes = verdict.available_bytes
    metadata.space_checked_path = verdict.checked_path
    metadata.space_status = verdict.status


@dataclass(frozen=True, slots=True)
class ManifestSettings:
    """Options of a manifest run.

    Attributes:
        packages: Restrict the manifest to these names (empty means all).
        use_repository: Query the sync repositories.
        use_archive: Query the AUR.
        with_flatpak: Capture installed Flatpak applications.
        with_fwupd: Capture firmware devices.
        dry_run: Downgrade enforced capacity shortfalls to warnings.
    """

    packages: tuple[str, ...] = ()
    use_repository: bool = True
    use_archive: bool = True
    with_flatpak: bool = False
    with_fwupd: bool = False
    dry_run: bool = False
    heuristics: SizeHeuristics = field(default_factory=SizeHeuristics)
    policy: ReconcilePolicy = field(default_factory=ReconcilePolicy)
    space: SpaceSettings = field(default_factory=SpaceSettings)


@dataclass(frozen=True, slots=True)
class ManifestOutcome:
    """Result of a manifest run."""

    document: ManifestDocument
    verdict: CapacityVerdict

    @property
    def blocked(self) -> bool:
        """True when capacity is enforced and insufficient."""
        return self.verdict.blocked


def _select(packages: Sequence[InstalledPackage], names: Sequence[str]) -> list[InstalledPackage]:
    """Restrict the inventory to the requested names, warning about unknown ones."""
    if not names:
        return list(packages)
    wanted = set(names)
    selected = [pkg for pkg in packages if pkg.name in wanted]
    for missing in sorted(wanted - {pkg.name for pkg in selected}):
        logger.warning("Requested package %s is not installed", missing)
    return selected


def run_manifest(sources: Collaborators, settings: ManifestSettings) -> ManifestOutcome:
    """Collect the live inventory and build the manifest.

    Catalog and application failures are recorded in ``metadata.errors``
    and the run continues without that data.

    Args:
        sources: External data sources.
        settings: Run options.

    Returns:
        The document together with its capacity verdict.

    Raises:
        PacplanError: If the inventory or the disk cannot be queried.
    """
    packages = _select(list(sources.inventory.scan()), settings.packages)
    errors: list[str] = []

    repo_names = [pkg.name for pkg in packages if not pkg.is_foreign]
    repo_versions: dict[str, VersionInfo] = {}
    if settings.use_repository and repo_names:
        logger.info("Querying repositories for %d packages", len(repo_names))
        repo_versions = query_catalog(sources.repository, repo_names, "pacman", errors)

    # Every name, including repository-answered ones, for the both-sources rules
    aur_names = [pkg.name for pkg in packages]
    aur_versions: dict[str, VersionInfo] = {}
    if settings.use_archive and aur_names:
        logger.info("Querying AUR for %d packages", len(aur_names))
        aur_versions = query_catalog(sources.archive, aur_names, "aur", errors)

    document = build_manifest(
        packages,
        repo_versions,
        aur_versions,
        sources.oracle,
        heuristics=settings.heuristics,
        policy=settings.policy,
    )
    document.metadata.repo_candidates = len(repo_names) if settings.use_repository else 0
    document.metadata.aur_candidates = len(aur_names) if settings.use_archive else 0
    document.metadata.errors = errors + document.metadata.errors

    report = sources.assess_space(settings.space.candidates)
    verdict = evaluate_capacity(
        report,
        document.metadata.transient_size_total,
        settings.space,
        dry_run=settings.dry_run,
    )
    attach_capacity(document, verdict)

    if settings.with_flatpak:
        try:
            document.applications.flatpak = sources.flatpak.snapshot()
        except PacplanError as e:
            logger.warning("Skipping flatpak capture: %s", e)
            document.metadata.errors.append(f"flatpak: {e}")
    if settings.with_fwupd:
        try:
            document.applications.fwupd = sources.fwupd.snapshot()
        except PacplanError as e:
            logger.warning("Skipping firmware capture: %s", e)
            document.metadata.errors.append(f"fwupd: {e}")
    document.refresh_application_metadata()

    logger.info(
        "Manifest built: %d packages, %d updates, %d errors",
        document.metadata.total_packages,
        document.metadata.updates_available,
        len(document.metadata.errors),
    )
    return ManifestOutcome(document=document, verdict=verdict)


def manifest_to_json(document: ManifestDocument) -> str:
    """Serialize a manifest deterministically."""
    return document.model_dump_json(indent=2) + "\n"


def save_manifest(document: ManifestDocument, path: Path) -> Path:
    """Write the manifest atomically with owner-only permissions.

    Raises:
        FilesystemError: If the file cannot be written.
    """
    write_private_text(path, manifest_to_json(document), name="manifest")
    logger.info("Manifest written to %s", path)
    return path


def load_manifest(path: Path) -> ManifestDocument:
    """Load and validate a manifest.

    Raises:
        ManifestNotFoundError: If the file doesn't exist.
        ManifestParseError: If the content is not valid JSON or not a manifest.
        FilesystemError: If the file cannot be read.
    """
    if not path.exists():
        raise ManifestNotFoundError(f"Manifest not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ManifestParseError(f"Failed to parse manifest {path}: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Failed to read manifest {path}: {e}") from e

    try:
        return ManifestDocument.model_validate(data)
    except ValidationError as e:
        raise ManifestParseError(f"Invalid manifest content in {path}: {e}") from e
