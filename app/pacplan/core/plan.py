"""Live update planning.

A plan re-queries every enabled source instead of trusting a stored
manifest. It is built in a single pass: collect per source, assess disk
capacity, serialize. A failure in one source is recorded in the shared
error list and never stops the other sources.
"""

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from pacplan.core.config import SizeHeuristics, SpaceSettings
from pacplan.core.errors import ConfigError, FilesystemError, PacplanError, SerializationError
from pacplan.core.estimate import estimate_sizes
from pacplan.core.manifest import utc_timestamp
from pacplan.core.sources import Collaborators, query_catalog
from pacplan.core.space import CapacityVerdict, evaluate_capacity
from pacplan.models.package import (
    InstalledPackage,
    Ordering,
    PackageSource,
    VersionInfo,
    truncate_hash,
)
from pacplan.models.plan import (
    PLAN_SOURCES,
    PlanDocument,
    PlanEntry,
    PlanMetadata,
    PlanOutcome,
    PlanSourceType,
)
from pacplan.utils.files import write_private_text

logger = logging.getLogger(__name__)


def _compile(patterns: tuple[str, ...], kind: str) -> tuple[re.Pattern[str], ...]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            msg = f"Invalid {kind} pattern '{pattern}': {e}"
            raise ConfigError(msg) from e
    return tuple(compiled)


@dataclass(frozen=True)
class PlanSettings:
    """Options of a plan run.

    Attributes:
        pacman: Check the sync repositories.
        aur: Check the AUR.
        flatpak: Check Flatpak applications.
        fwupd: Check firmware.
        include: Regexes; when given, only matching package names are checked.
        exclude: Regexes; matching package names are never checked.
        archive_batch_size: Names per AUR request.
    """

    pacman: bool = True
    aur: bool = True
    flatpak: bool = False
    fwupd: bool = False
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    archive_batch_size: int = 100
    _include_res: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)
    _exclude_res: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Compile the name filters.

        Raises:
            ConfigError: If a pattern is not a valid regex.
        """
        object.__setattr__(self, "_include_res", _compile(self.include, "include"))
        object.__setattr__(self, "_exclude_res", _compile(self.exclude, "exclude"))

    @property
    def enabled_sources(self) -> list[PlanSourceType]:
        """Enabled sources in processing order."""
        return [source for source in PLAN_SOURCES if getattr(self, source)]

    def matches(self, name: str) -> bool:
        """Check a package name against the include/exclude filters."""
        if self._include_res and not any(rx.search(name) for rx in self._include_res):
            return False
        return not any(rx.search(name) for rx in self._exclude_res)


class _Inventory:
    """Installed packages, scanned on first use."""

    def __init__(self, sources: Collaborators) -> None:
        self._sources = sources
        self._packages: list[InstalledPackage] | None = None

    def packages(self) -> list[InstalledPackage]:
        if self._packages is None:
            self._packages = list(self._sources.inventory.scan())
        return self._packages


def _newer(
    sources: Collaborators,
    label: str,
    pkg: InstalledPackage,
    available: str,
    errors: list[str],
) -> bool:
    """Compare installed against available, recording comparison failures."""
    try:
        return sources.oracle.compare(pkg.version, available) is Ordering.LESS
    except PacplanError as e:
        errors.append(f"{label}: vercmp failed for {pkg.name}: {e}")
        return False


def collect_pacman(
    sources: Collaborators,
    inventory: _Inventory,
    settings: PlanSettings,
    errors: list[str],
) -> list[PlanEntry]:
    """Repository packages whose installed version sorts before the advertised one."""
    packages = [
        pkg for pkg in inventory.packages() if not pkg.is_foreign and settings.matches(pkg.name)
    ]
    failed: set[str] = set()
    remote = query_catalog(
        sources.repository, [pkg.name for pkg in packages], "pacman", errors, failed=failed
    )

    updates: list[PlanEntry] = []
    for pkg in packages:
        if pkg.name in failed:
            continue
        info = remote.get(pkg.name)
        if info is None:
            errors.append(f"pacman: missing remote version for {pkg.name}")
            continue
        if not _newer(sources, "pacman", pkg, info.version, errors):
            continue
        updates.append(
            PlanEntry(
                name=pkg.name,
                source="pacman",
                installed=pkg.version,
                available=info.version,
                installed_hash=truncate_hash(pkg.package_hash),
                available_hash=truncate_hash(info.package_hash),
                installed_trust=pkg.validated_by,
                available_trust=info.validated_by,
                download_size=info.download_size,
                installed_size=info.installed_size,
            )
        )
    return updates


def collect_aur(
    sources: Collaborators,
    inventory: _Inventory,
    settings: PlanSettings,
    errors: list[str],
) -> list[PlanEntry]:
    """Foreign packages with a newer AUR version; names unknown to the AUR are skipped."""
    packages = [
        pkg for pkg in inventory.packages() if pkg.is_foreign and settings.matches(pkg.name)
    ]
    remote = query_catalog(
        sources.archive,
        [pkg.name for pkg in packages],
        "aur",
        errors,
        batch_size=settings.archive_batch_size,
    )

    updates: list[PlanEntry] = []
    for pkg in packages:
        info = remote.get(pkg.name)
        if info is None or not _newer(sources, "aur", pkg, info.version, errors):
            continue
        updates.append(
            PlanEntry(
                name=pkg.name,
                source="aur",
                installed=pkg.version,
                available=info.version,
                download_size=info.download_size,
                installed_size=info.installed_size,
            )
        )
    return updates


def collect_flatpak(sources: Collaborators) -> list[PlanEntry]:
    """Remote updates for installed Flatpak applications."""
    installed = {app.application: app for app in sources.flatpak.installed()}
    updates: list[PlanEntry] = []
    for update in sources.flatpak.updates():
        app = installed.get(update.application)
        if app is None:
            continue
        updates.append(
            PlanEntry(
                name=update.application,
                source="flatpak",
                installed=app.version,
                available=update.available,
                branch=update.branch,
                origin=update.origin,
            )
        )
    return updates


def collect_fwupd(sources: Collaborators) -> list[PlanEntry]:
    """Firmware releases newer than the installed versions."""
    return [
        PlanEntry(
            name=update.name,
            source="fwupd",
            installed=update.installed,
            available=update.available,
            device=update.device,
            summary=update.summary,
            available_hash=update.available_hash,
            trust=update.trust,
        )
        for update in sources.fwupd.updates()
    ]


def _run_source(
    label: str,
    collect: Callable[[], list[PlanEntry]],
    errors: list[str],
) -> list[PlanEntry]:
    """Run one collector, turning a failure into an error entry."""
    try:
        updates = collect()
    except PacplanError as e:
        logger.warning("%s check failed: %s", label, e)
        errors.append(f"{label}: {e}")
        return []
    logger.info("%s: %d updates", label, len(updates))
    return updates


def transient_total(updates: list[PlanEntry], heuristics: SizeHeuristics | None = None) -> int:
    """Estimate the transient footprint of repository and AUR updates."""
    total = 0
    for entry in updates:
        info = VersionInfo(
            version=entry.available,
            download_size=entry.download_size,
            installed_size=entry.installed_size,
        )
        if entry.source == "pacman":
            estimate = estimate_sizes(PackageSource.REPOSITORY, info, None, heuristics)
        elif entry.source == "aur":
            estimate = estimate_sizes(PackageSource.ARCHIVE, None, info, heuristics)
        else:
            continue
        total += estimate.transient_estimate or 0
    return total


def _assess(
    sources: Collaborators,
    transient: int,
    space: SpaceSettings,
    dry_run: bool,
    errors: list[str],
) -> CapacityVerdict:
    try:
        report = sources.assess_space(space.candidates)
    except PacplanError as e:
        logger.warning("Unable to assess free space: %s", e)
        errors.append(f"disk: unable to assess free space ({e})")
        report = None
    verdict = evaluate_capacity(report, transient, space, dry_run=dry_run)
    if verdict.blocked:
        errors.append(f"disk: {verdict.message}")
    return verdict


def build_plan(
    sources: Collaborators,
    settings: PlanSettings,
    space: SpaceSettings,
    *,
    heuristics: SizeHeuristics | None = None,
    dry_run: bool = False,
    plan_path: Path | None = None,
    generated_at: str | None = None,
) -> PlanOutcome:
    """Query every enabled source and fold in the capacity verdict.

    Errors are recorded in source processing order. When capacity is
    enforced and insufficient outside dry-run, a ``disk:`` error is added
    and the outcome is blocked.

    Args:
        sources: External data sources.
        settings: Enabled sources and name filters.
        space: Capacity policy.
        heuristics: Size estimate multipliers.
        dry_run: Downgrade enforced capacity shortfalls to warnings.
        plan_path: Destination recorded in the metadata.
        generated_at: Timestamp to record; defaults to now.

    Returns:
        The plan document and whether it is blocked.
    """
    errors: list[str] = []
    inventory = _Inventory(sources)
    collectors: dict[PlanSourceType, Callable[[], list[PlanEntry]]] = {
        "pacman": lambda: collect_pacman(sources, inventory, settings, errors),
        "aur": lambda: collect_aur(sources, inventory, settings, errors),
        "flatpak": lambda: collect_flatpak(sources),
        "fwupd": lambda: collect_fwupd(sources),
    }

    enabled = settings.enabled_sources
    updates: dict[PlanSourceType, list[PlanEntry]] = {source: [] for source in PLAN_SOURCES}
    for source in enabled:
        updates[source] = _run_source(source, collectors[source], errors)

    transient = transient_total(updates["pacman"] + updates["aur"], heuristics)
    verdict = _assess(sources, transient, space, dry_run, errors)

    document = PlanDocument(
        metadata=PlanMetadata(
            generated_at=generated_at or utc_timestamp(),
            plan_path=str(plan_path) if plan_path else None,
            sources=enabled,
            space=verdict.to_metadata(),
            errors=errors,
        ),
        pacman_updates=updates["pacman"],
        aur_updates=updates["aur"],
        flatpak_updates=updates["flatpak"],
        fwupd_updates=updates["fwupd"],
        counts={source: len(updates[source]) for source in PLAN_SOURCES},
    )
    logger.info(
        "Plan built: %d updates, %d errors%s",
        document.total_updates(),
        len(errors),
        " (blocked)" if verdict.blocked else "",
    )
    return PlanOutcome(document=document, blocked=verdict.blocked)


def plan_to_json(document: PlanDocument) -> str:
    """Serialize a plan, omitting unset optional fields."""
    return json.dumps(document.to_dict(), indent=2) + "\n"


def save_plan(document: PlanDocument, path: Path) -> Path:
    """Write the plan atomically with owner-only permissions.

    Raises:
        FilesystemError: If the file cannot be written.
    """
    write_private_text(path, plan_to_json(document), name="plan")
    logger.info("Plan written to %s", path)
    return path


def load_plan(path: Path) -> PlanDocument:
    """Load and validate a stored plan.

    Raises:
        FilesystemError: If the file is missing or unreadable.
        SerializationError: If the content is not a valid plan.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise FilesystemError(f"Plan not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SerializationError(f"Failed to parse plan {path}: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Failed to read plan {path}: {e}") from e

    try:
        return PlanDocument.model_validate(data)
    except ValidationError as e:
        raise SerializationError(f"Invalid plan content in {path}: {e}") from e
