"""Manifest models for the installed-state snapshot.

This module defines the Pydantic models representing the manifest.json
document: one reconciled entry per installed package plus rollup metadata.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from pacplan.models.package import PackageSource


class ManifestEntry(BaseModel):
    """Reconciled state of a single installed package.

    Created once by the manifest builder and never mutated.

    Attributes:
        installed_version: Version currently installed.
        origin: Repository tag reported by the local inventory.
        repo_version: Version advertised by the sync repositories.
        aur_version: Version advertised by the AUR.
        newer_version: Target version of the resolved source.
        source: Resolved source for this package.
        update_available: Whether the target version is newer than installed.
        notes: Advisory note from reconciliation.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    installed_version: str
    origin: str | None = None
    repo_version: str | None = None
    aur_version: str | None = None
    newer_version: str | None = None
    source: PackageSource
    update_available: bool = False
    notes: str | None = None
    installed_size: int | None = None
    install_date: str | None = None
    validated_by: str | None = None
    package_hash: str | None = None
    download_size_repo: int | None = None
    installed_size_repo: int | None = None
    download_size_aur: int | None = None
    installed_size_aur: int | None = None
    download_size_selected: int | None = None
    installed_size_selected: int | None = None
    install_size_estimate: int | None = None
    build_size_estimate: int | None = None
    transient_size_estimate: int | None = None


class PackageGroup(BaseModel):
    """Names of all packages resolved to one source."""

    model_config = ConfigDict(extra="forbid")

    source: PackageSource
    count: int
    packages: list[str]


class ApplicationStateSummary(BaseModel):
    """Counts of captured application state."""

    flatpak: int = 0
    fwupd: int = 0


class FlatpakApp(BaseModel):
    """Installed Flatpak application."""

    application: str
    version: str = ""
    branch: str = ""
    origin: str = ""


class FlatpakState(BaseModel):
    """Flatpak snapshot recorded in the manifest."""

    enabled: bool = True
    installed_count: int = 0
    installed: list[FlatpakApp] = Field(default_factory=list)


class FwupdDevice(BaseModel):
    """Firmware device as reported by fwupd."""

    device: str
    name: str
    installed: str = ""
    summary: str = ""
    checksum: str = ""
    trust: str = ""


class FwupdState(BaseModel):
    """Firmware snapshot recorded in the manifest."""

    enabled: bool = True
    device_count: int = 0
    devices: list[FwupdDevice] = Field(default_factory=list)


class Applications(BaseModel):
    """Optional application and firmware state."""

    flatpak: FlatpakState | None = None
    fwupd: FwupdState | None = None


class ManifestMetadata(BaseModel):
    """Metadata section of the manifest.

    Size totals only cover packages with ``update_available`` set.
    """

    model_config = ConfigDict(extra="forbid")

    generated_at: Annotated[str, Field(description="RFC 3339 generation timestamp")]
    generated_by: str = "pacplan manifest"
    total_packages: int = 0
    pacman_packages: int = 0
    aur_packages: int = 0
    local_packages: int = 0
    unknown_packages: int = 0
    repo_candidates: int = 0
    aur_candidates: int = 0
    updates_available: int = 0
    download_size_total: int = 0
    build_size_total: int = 0
    install_size_total: int = 0
    transient_size_total: int = 0
    min_free_bytes: int = 0
    required_space_total: int = 0
    available_space_bytes: int | None = None
    space_checked_path: str | None = None
    space_status: str | None = None
    errors: list[str] = Field(default_factory=list)
    apps_flatpak: bool | None = None
    apps_fwupd: bool | None = None
    application_state: ApplicationStateSummary | None = None


class ManifestDocument(BaseModel):
    """Complete manifest document.

    Attributes:
        metadata: Rollup counts, totals and disk check results.
        packages: Entries keyed by package name in lexicographic order.
        packages_by_source: Package names grouped per resolved source.
        applications: Optional Flatpak/firmware snapshot.
    """

    model_config = ConfigDict(extra="forbid")

    metadata: ManifestMetadata
    packages: dict[str, ManifestEntry] = Field(default_factory=dict)
    packages_by_source: list[PackageGroup] = Field(default_factory=list)
    applications: Applications = Field(default_factory=Applications)

    def pending_updates(self) -> dict[str, ManifestEntry]:
        """Entries with an update available, in name order."""
        return {name: entry for name, entry in self.packages.items() if entry.update_available}

    def refresh_application_metadata(self) -> None:
        """Update metadata summaries from the captured application state."""
        flatpak = self.applications.flatpak
        fwupd = self.applications.fwupd
        self.metadata.apps_flatpak = flatpak.enabled if flatpak else False
        self.metadata.apps_fwupd = fwupd.enabled if fwupd else False
        self.metadata.application_state = ApplicationStateSummary(
            flatpak=flatpak.installed_count if flatpak else 0,
            fwupd=fwupd.device_count if fwupd else 0,
        )
