"""Configuration model and I/O.

Configuration is stored in ~/.config/pacplan/config.toml. Every section
has defaults, so a missing default file yields a fully usable config.
The components receive immutable settings values derived from it
(:class:`SpaceSettings`, :class:`SizeHeuristics`, :class:`ReconcilePolicy`)
instead of reading ambient state.
"""

import logging
import stat
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pacplan.core.errors import ConfigError, FilesystemError
from pacplan.core.paths import (
    DEFAULT_SPACE_CANDIDATES,
    expand_path,
    get_config_path,
    get_log_dir,
    get_manifest_path,
    get_plan_path,
)
from pacplan.utils.files import write_private_text

logger = logging.getLogger(__name__)

SpacePolicyType = Literal["warn", "enforce"]

# AUR RPC rejects info requests with more arguments than this
AUR_MAX_ARGS_LIMIT = 100

_GIB = 1024 * 1024 * 1024


def gb_to_bytes(value: float) -> int:
    """Convert a gigabyte figure (GiB) to bytes; non-positive values yield 0."""
    if value <= 0:
        return 0
    return round(value * _GIB)


class CoreConfig(BaseModel):
    """Artifact and log locations."""

    model_config = ConfigDict(extra="forbid")

    manifest_path: str | None = None
    plan_path: str | None = None
    log_directory: str | None = None


class ArchiveConfig(BaseModel):
    """AUR RPC settings."""

    model_config = ConfigDict(extra="forbid")

    base_url: str = "https://aur.archlinux.org/rpc/"
    max_args: Annotated[
        int,
        Field(ge=1, le=AUR_MAX_ARGS_LIMIT, description="Package names per info request"),
    ] = AUR_MAX_ARGS_LIMIT
    timeout: Annotated[float, Field(gt=0, description="Request timeout in seconds")] = 10.0


class SpaceConfig(BaseModel):
    """Disk capacity policy."""

    model_config = ConfigDict(extra="forbid")

    min_free_gb: Annotated[float, Field(ge=0)] = 2.0
    extra_margin_gb: Annotated[float, Field(ge=0)] = 0.0
    policy: SpacePolicyType = "warn"
    candidates: list[str] = Field(default_factory=lambda: list(DEFAULT_SPACE_CANDIDATES))


class SourcesConfig(BaseModel):
    """Optional application sources."""

    model_config = ConfigDict(extra="forbid")

    flatpak: bool = False
    fwupd: bool = False


class EstimatesConfig(BaseModel):
    """Size estimate multipliers."""

    model_config = ConfigDict(extra="forbid")

    repository_build_multiplier: Annotated[float, Field(ge=0)] = 1.5
    archive_install_multiplier: Annotated[float, Field(ge=0)] = 2.0
    archive_build_multiplier: Annotated[float, Field(ge=0)] = 8.0


class ReconcileConfig(BaseModel):
    """Source selection policy."""

    model_config = ConfigDict(extra="forbid")

    prefer_repository_on_tie: bool = True
    pinned_repository: list[str] = Field(default_factory=list)


class PacplanConfig(BaseModel):
    """Top-level configuration."""

    model_config = ConfigDict(extra="forbid")

    core: CoreConfig = Field(default_factory=CoreConfig)
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)
    space: SpaceConfig = Field(default_factory=SpaceConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    estimates: EstimatesConfig = Field(default_factory=EstimatesConfig)
    reconcile: ReconcileConfig = Field(default_factory=ReconcileConfig)

    @property
    def manifest_path(self) -> Path:
        """Manifest location, configured or default."""
        if self.core.manifest_path:
            return expand_path(self.core.manifest_path)
        return get_manifest_path()

    @property
    def plan_path(self) -> Path:
        """Plan location, configured or default."""
        if self.core.plan_path:
            return expand_path(self.core.plan_path)
        return get_plan_path()

    @property
    def log_dir(self) -> Path:
        """Run log directory, configured or default."""
        if self.core.log_directory:
            return expand_path(self.core.log_directory)
        return get_log_dir()

    def space_settings(self, min_free_gb: float | None = None) -> "SpaceSettings":
        """Build the capacity settings, optionally overriding the buffer."""
        buffer_gb = self.space.min_free_gb if min_free_gb is None else min_free_gb
        return SpaceSettings(
            policy=self.space.policy,
            min_free_bytes=gb_to_bytes(buffer_gb),
            extra_margin_bytes=gb_to_bytes(self.space.extra_margin_gb),
            candidates=tuple(self.space.candidates),
        )

    def size_heuristics(self) -> "SizeHeuristics":
        """Build the estimator multipliers."""
        return SizeHeuristics(
            repository_build_multiplier=self.estimates.repository_build_multiplier,
            archive_install_multiplier=self.estimates.archive_install_multiplier,
            archive_build_multiplier=self.estimates.archive_build_multiplier,
        )

    def reconcile_policy(self) -> "ReconcilePolicy":
        """Build the source selection policy."""
        return ReconcilePolicy(
            prefer_repository_on_tie=self.reconcile.prefer_repository_on_tie,
            pinned_repository=frozenset(self.reconcile.pinned_repository),
        )


@dataclass(frozen=True, slots=True)
class SpaceSettings:
    """Capacity policy passed to the disk assessor.

    Attributes:
        policy: "warn" reports shortfalls, "enforce" blocks on them.
        min_free_bytes: Free space buffer that must remain after updates.
        extra_margin_bytes: Additional margin added to the requirement.
        candidates: Filesystem paths probed for free space, in order.
    """

    policy: SpacePolicyType = "warn"
    min_free_bytes: int = 0
    extra_margin_bytes: int = 0
    candidates: tuple[str, ...] = DEFAULT_SPACE_CANDIDATES


@dataclass(frozen=True, slots=True)
class SizeHeuristics:
    """Multipliers used to fill gaps in size telemetry."""

    repository_build_multiplier: float = 1.5
    archive_install_multiplier: float = 2.0
    archive_build_multiplier: float = 8.0


@dataclass(frozen=True, slots=True)
class ReconcilePolicy:
    """Source selection policy.

    Attributes:
        prefer_repository_on_tie: Choose the repository when both sources
            advertise the same version.
        pinned_repository: Package names that always resolve to the
            repository when it has them.
    """

    prefer_repository_on_tie: bool = True
    pinned_repository: frozenset[str] = frozenset()


def _ensure_secure_permissions(path: Path) -> None:
    """Refuse configuration files writable by other users.

    Raises:
        ConfigError: If the file is world-writable.
        FilesystemError: If the file cannot be inspected.
    """
    try:
        mode = path.stat().st_mode
    except OSError as e:
        raise FilesystemError(f"Failed to inspect permissions for {path}: {e}") from e
    if mode & stat.S_IWOTH:
        raise ConfigError(f"Configuration file {path} must not be world-writable")


def load_config(path: Path | None = None) -> PacplanConfig:
    """Load configuration from a TOML file.

    Args:
        path: Explicit config path. If None, the default path is used
            when it exists, otherwise defaults are returned.

    Returns:
        Validated PacplanConfig object.

    Raises:
        ConfigError: If an explicit path is missing, the TOML is invalid,
            the content doesn't match the schema, or the file is unsafe.
        FilesystemError: If the file cannot be read.
    """
    if path is None:
        config_path = get_config_path()
        if not config_path.exists():
            logger.debug("No config at %s, using defaults", config_path)
            return PacplanConfig()
    else:
        config_path = path
        if not config_path.exists():
            raise ConfigError(f"Configuration file {config_path} does not exist")

    _ensure_secure_permissions(config_path)

    try:
        with open(config_path, "rb") as f:
            data: dict[str, Any] = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse configuration {config_path}: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Failed to read configuration {config_path}: {e}") from e

    try:
        config = PacplanConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration {config_path}: {e}") from e

    logger.debug("Loaded configuration from %s", config_path)
    return config


def save_config(config: PacplanConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically and readable by the owner only, like
    the manifest and plan.

    Args:
        config: The PacplanConfig object to save.
        path: Path to save the config. If None, uses default config path.

    Returns:
        Path where the config was saved.

    Raises:
        FilesystemError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    data = config.model_dump(mode="json", exclude_none=True)
    return write_private_text(config_path, tomli_w.dumps(data), name="configuration")
