"""Package models for inventory scanning and source reconciliation.

This module defines the core data structures for representing
installed packages and the version data advertised by upstream sources.
"""

from dataclasses import dataclass, field
from enum import Enum

# Origin tag pacman reports for foreign (not repository-owned) packages
LOCAL_ORIGIN = "local"

# Display length for package and firmware checksums
HASH_DISPLAY_LENGTH = 16


class PackageSource(str, Enum):
    """Upstream catalog a package's update is resolved against.

    Members are totally ordered by declaration order (see :attr:`rank`),
    which drives deterministic grouping in manifests.
    """

    REPOSITORY = "pacman"
    ARCHIVE = "aur"
    LOCAL = "local"
    UNKNOWN = "unknown"

    @property
    def rank(self) -> int:
        """Position of this source in the fixed grouping order."""
        return list(PackageSource).index(self)


class Ordering(Enum):
    """Result of comparing two version strings."""

    LESS = -1
    EQUAL = 0
    GREATER = 1

    @classmethod
    def from_int(cls, value: int) -> "Ordering":
        """Map a signed comparison result (vercmp style) to an Ordering."""
        if value < 0:
            return cls.LESS
        if value > 0:
            return cls.GREATER
        return cls.EQUAL


@dataclass(frozen=True, slots=True)
class InstalledPackage:
    """Represents a package discovered in the local inventory.

    Captured once per run and never mutated.

    Attributes:
        name: Package name (unique key).
        version: Installed version string.
        origin: Repository tag; ``"local"`` for foreign packages.
        installed_size: Installed size in bytes (if available).
        install_date: Installation date as reported by pacman.
        validated_by: Validation/signature label.
        package_hash: Content hash of the package archive.
    """

    name: str
    version: str
    origin: str | None = field(default=None)
    installed_size: int | None = field(default=None)
    install_date: str | None = field(default=None)
    validated_by: str | None = field(default=None)
    package_hash: str | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate package data after initialization."""
        if not self.name:
            msg = "Package name cannot be empty"
            raise ValueError(msg)
        if not self.version:
            msg = "Package version cannot be empty"
            raise ValueError(msg)

    @property
    def is_foreign(self) -> bool:
        """Check if the package is not owned by a sync repository."""
        return self.origin is not None and self.origin.lower() == LOCAL_ORIGIN


@dataclass(frozen=True, slots=True)
class VersionInfo:
    """Version and size data for one package from one upstream source.

    Attributes:
        version: Advertised version string.
        download_size: Download size in bytes (if advertised).
        installed_size: Installed size in bytes (if advertised).
        package_hash: Checksum of the advertised archive (repository only).
        validated_by: Signature/validation label (repository only).
    """

    version: str
    download_size: int | None = None
    installed_size: int | None = None
    package_hash: str | None = None
    validated_by: str | None = None


def truncate_hash(value: str | None) -> str | None:
    """Trim a checksum to the fixed display length.

    Args:
        value: Checksum string, possibly padded with whitespace.

    Returns:
        The first 16 characters of the trimmed value, or None for
        missing/empty input.
    """
    if value is None:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    return trimmed[:HASH_DISPLAY_LENGTH]
