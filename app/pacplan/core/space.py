"""Disk capacity assessment.

Finds the most constrained filesystem among the candidate paths and
gates a run on whether it can hold the transient footprint of the
pending updates plus the configured free-space buffer.
"""

import logging
import shutil
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from pathlib import Path

from pacplan.core.config import SpaceSettings
from pacplan.core.errors import PacplanRuntimeError
from pacplan.models.plan import SpaceMetadata, SpaceStatus

logger = logging.getLogger(__name__)

FreeBytesFn = Callable[[Path], int]

_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB")


@dataclass(frozen=True, slots=True)
class SpaceReport:
    """Free space on the filesystem that was checked.

    Attributes:
        checked_path: Existing path whose filesystem was queried.
        available_bytes: Bytes available to unprivileged users.
    """

    checked_path: Path
    available_bytes: int


@dataclass(frozen=True, slots=True)
class CapacityVerdict:
    """Outcome of the capacity gate.

    Attributes:
        policy: "warn" or "enforce".
        min_free_bytes: Configured free-space buffer.
        extra_margin_bytes: Configured extra margin.
        transient_bytes: Estimated transient footprint of the updates.
        required_bytes: Sum of the three figures above.
        report: Space report, or None when the disk could not be assessed.
        status: "ok", "low" or "unknown".
        blocked: True when the run must not proceed.
        warning: Advisory text for a non-blocking shortfall.
        message: Description of the shortfall, blocking or not.
    """

    policy: str
    min_free_bytes: int
    extra_margin_bytes: int
    transient_bytes: int
    required_bytes: int
    report: SpaceReport | None
    status: SpaceStatus
    blocked: bool = False
    warning: str | None = None
    message: str | None = None

    @property
    def available_bytes(self) -> int | None:
        """Available bytes of the checked filesystem, if assessed."""
        return self.report.available_bytes if self.report else None

    @property
    def checked_path(self) -> str | None:
        """Checked path as a string, if assessed."""
        return str(self.report.checked_path) if self.report else None

    def to_metadata(self) -> SpaceMetadata:
        """Convert to the plan's space metadata block."""
        return SpaceMetadata(
            policy=self.policy,
            min_free_bytes=self.min_free_bytes,
            extra_margin_bytes=self.extra_margin_bytes,
            transient_bytes=self.transient_bytes,
            required_bytes=self.required_bytes,
            available_bytes=self.available_bytes,
            checked_path=self.checked_path,
            status=self.status,
            warning=self.warning,
        )


def format_bytes(value: int) -> str:
    """Render a byte count with IEC units.

    Whole values and values of 10 or more are shown without decimals,
    anything else with one decimal: ``0 B``, ``1 KiB``, ``1.5 GiB``.
    """
    if value <= 0:
        return "0 B"
    amount = float(value)
    unit = _UNITS[0]
    for next_unit in _UNITS[1:]:
        if amount < 1024:
            break
        amount /= 1024
        unit = next_unit
    if amount >= 10 or amount == round(amount):
        return f"{amount:.0f} {unit}"
    return f"{amount:.1f} {unit}"


def nearest_existing(path: Path) -> Path:
    """Return the path itself or its closest existing ancestor."""
    for candidate in (path, *path.parents):
        if candidate.exists():
            return candidate
    return Path("/")


def disk_free_bytes(path: Path) -> int:
    """Free bytes available on the filesystem holding ``path``."""
    return shutil.disk_usage(path).free


def assess_paths(
    candidates: Iterable[str | Path],
    free_bytes: FreeBytesFn = disk_free_bytes,
) -> SpaceReport:
    """Report the most constrained filesystem among the candidates.

    Candidates are examined in order. The first successful query is held
    and replaced only by a later one reporting strictly fewer bytes.

    Args:
        candidates: Paths to probe; missing ones are replaced by their
            nearest existing ancestor.
        free_bytes: Free space query, injectable for tests.

    Returns:
        SpaceReport for the smallest filesystem seen.

    Raises:
        PacplanRuntimeError: If no candidate could be queried.
    """
    report: SpaceReport | None = None
    for candidate in candidates:
        existing = nearest_existing(Path(candidate))
        try:
            available = free_bytes(existing)
        except OSError as e:
            logger.warning("Failed to query free space on %s: %s", existing, e)
            continue
        logger.debug("Free space on %s: %d bytes", existing, available)
        if report is None or available < report.available_bytes:
            report = SpaceReport(checked_path=existing, available_bytes=available)

    if report is None:
        msg = "Unable to determine available disk space"
        raise PacplanRuntimeError(msg)
    return report


def evaluate_capacity(
    report: SpaceReport | None,
    transient_total: int,
    settings: SpaceSettings,
    dry_run: bool = False,
) -> CapacityVerdict:
    """Gate on ``available >= transient + buffer + margin``.

    A shortfall under the warn policy, or under enforce in dry-run mode,
    yields a warning. Under enforce outside dry-run it blocks.

    Args:
        report: Space report, or None if the disk could not be assessed.
        transient_total: Estimated transient bytes of pending updates.
        settings: Capacity policy.
        dry_run: Downgrade enforced shortfalls to warnings.

    Returns:
        The CapacityVerdict.
    """
    transient = max(transient_total, 0)
    required = transient + settings.min_free_bytes + settings.extra_margin_bytes
    verdict = CapacityVerdict(
        policy=settings.policy,
        min_free_bytes=settings.min_free_bytes,
        extra_margin_bytes=settings.extra_margin_bytes,
        transient_bytes=transient,
        required_bytes=required,
        report=report,
        status="unknown",
    )
    if report is None:
        return verdict
    if report.available_bytes >= required:
        return replace(verdict, status="ok")

    message = (
        f"Insufficient space: need ~{format_bytes(required)} "
        f"(transient {format_bytes(transient)} + buffer {format_bytes(settings.min_free_bytes)}"
        f" + margin {format_bytes(settings.extra_margin_bytes)}) on {report.checked_path}; "
        f"only {format_bytes(report.available_bytes)} available"
    )
    if settings.policy == "enforce" and not dry_run:
        logger.error("%s", message)
        return replace(verdict, status="low", blocked=True, message=message)

    logger.warning("%s", message)
    return replace(verdict, status="low", warning=message, message=message)
