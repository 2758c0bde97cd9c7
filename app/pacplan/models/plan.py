"""Plan models for live update planning.

A plan is built from live queries, independently of any stored manifest,
and lists pending updates per source together with errors and the
disk capacity verdict.
"""

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PlanSourceType = Literal["pacman", "aur", "flatpak", "fwupd"]

SpaceStatus = Literal["ok", "low", "unknown"]

# Order in which sources are processed and reported
PLAN_SOURCES: tuple[PlanSourceType, ...] = ("pacman", "aur", "flatpak", "fwupd")


class PlanEntry(BaseModel):
    """Single update candidate.

    Only ``name``, ``source``, ``installed`` and ``available`` are common
    to all sources; the remaining fields are source-specific and omitted
    from serialized output when unset.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    source: PlanSourceType
    installed: str = ""
    available: str = ""
    installed_hash: str | None = None
    available_hash: str | None = None
    installed_trust: str | None = None
    available_trust: str | None = None
    download_size: int | None = None
    installed_size: int | None = None
    branch: str | None = None
    origin: str | None = None
    device: str | None = None
    summary: str | None = None
    trust: str | None = None


class SpaceMetadata(BaseModel):
    """Disk capacity block of the plan metadata."""

    policy: str
    min_free_bytes: int
    extra_margin_bytes: int = 0
    transient_bytes: int = 0
    required_bytes: int = 0
    available_bytes: int | None = None
    checked_path: str | None = None
    status: SpaceStatus = "unknown"
    warning: str | None = None


class PlanMetadata(BaseModel):
    """Metadata section of the plan."""

    generated_at: str
    generated_by: str = "pacplan plan"
    plan_path: str | None = None
    sources: list[PlanSourceType] = Field(default_factory=list)
    space: SpaceMetadata
    errors: list[str] = Field(default_factory=list)


class PlanDocument(BaseModel):
    """Complete plan document."""

    metadata: PlanMetadata
    pacman_updates: list[PlanEntry] = Field(default_factory=list)
    aur_updates: list[PlanEntry] = Field(default_factory=list)
    flatpak_updates: list[PlanEntry] = Field(default_factory=list)
    fwupd_updates: list[PlanEntry] = Field(default_factory=list)
    counts: dict[str, int] = Field(default_factory=dict)

    def updates_for(self, source: PlanSourceType) -> list[PlanEntry]:
        """Update list of one source."""
        return getattr(self, f"{source}_updates")

    def total_updates(self) -> int:
        """Number of update candidates across all sources."""
        return sum(len(self.updates_for(source)) for source in PLAN_SOURCES)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(mode="json", exclude_none=True)


@dataclass(frozen=True, slots=True)
class PlanOutcome:
    """Result of a plan run.

    Attributes:
        document: The plan document.
        blocked: True when capacity is enforced and insufficient.
    """

    document: PlanDocument
    blocked: bool = False

    @property
    def errors(self) -> list[str]:
        """Errors recorded during the run."""
        return self.document.metadata.errors

    @property
    def has_errors(self) -> bool:
        """Check if any error was recorded."""
        return bool(self.document.metadata.errors)
