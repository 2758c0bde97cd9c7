"""Data models for pacplan.

This module exports the core data structures used throughout the application.
"""

from pacplan.models.manifest import (
    Applications,
    ManifestDocument,
    ManifestEntry,
    ManifestMetadata,
    PackageGroup,
)
from pacplan.models.package import (
    InstalledPackage,
    Ordering,
    PackageSource,
    VersionInfo,
    truncate_hash,
)
from pacplan.models.plan import PlanDocument, PlanEntry, PlanMetadata, PlanOutcome, SpaceMetadata

__all__ = [
    "Applications",
    "InstalledPackage",
    "ManifestDocument",
    "ManifestEntry",
    "ManifestMetadata",
    "Ordering",
    "PackageGroup",
    "PackageSource",
    "PlanDocument",
    "PlanEntry",
    "PlanMetadata",
    "PlanOutcome",
    "SpaceMetadata",
    "VersionInfo",
    "truncate_hash",
]
