"""Shared Rich display functions for manifests and plans."""

from rich.table import Table

from pacplan.core.space import format_bytes
from pacplan.models.manifest import ManifestDocument, ManifestEntry
from pacplan.models.plan import PLAN_SOURCES, PlanDocument
from pacplan.utils.formatting import (
    console,
    create_table,
    format_source,
    format_update_flag,
    print_warning,
)


def _size(value: int | None) -> str:
    return format_bytes(value) if value is not None else "-"


def create_updates_table(
    entries: dict[str, ManifestEntry], title: str = "Pending Updates"
) -> Table:
    """Create a table of manifest entries with their target versions.

    Args:
        entries: Entries keyed by package name.
        title: Table title.

    Returns:
        Rich Table with one row per entry.
    """
    table = create_table(title, "Package", "Source", "Installed", "Target", "Transient")
    for name, entry in entries.items():
        table.add_row(
            f"[package.name]{name}[/]",
            format_source(entry.source),
            f"[package.version]{entry.installed_version}[/]",
            f"[update]{entry.newer_version or '-'}[/]",
            f"[package.size]{_size(entry.transient_size_estimate)}[/]",
        )
    return table


def print_manifest_summary(document: ManifestDocument) -> None:
    """Print counts, size totals, the disk check and recorded errors."""
    meta = document.metadata
    console.print(f"[bold_header]Manifest[/] generated {meta.generated_at}")
    console.print(
        f"  Packages: {meta.total_packages} "
        f"({format_source('pacman')} {meta.pacman_packages}, "
        f"{format_source('aur')} {meta.aur_packages}, "
        f"{format_source('local')} {meta.local_packages}, "
        f"{format_source('unknown')} {meta.unknown_packages})"
    )
    console.print(f"  Updates available: [update]{meta.updates_available}[/]")
    console.print(
        f"  Estimated sizes: download {format_bytes(meta.download_size_total)}, "
        f"build {format_bytes(meta.build_size_total)}, "
        f"install {format_bytes(meta.install_size_total)}, "
        f"transient {format_bytes(meta.transient_size_total)}"
    )
    if meta.space_status is not None:
        console.print(
            f"  Disk: {meta.space_status} on {meta.space_checked_path or '-'}, "
            f"available {_size(meta.available_space_bytes)}, "
            f"required {format_bytes(meta.required_space_total)}"
        )
    if meta.application_state is not None:
        console.print(
            f"  Applications: flatpak {meta.application_state.flatpak}, "
            f"fwupd {meta.application_state.fwupd}"
        )
    for error in meta.errors:
        print_warning(error)


def print_entry(name: str, entry: ManifestEntry) -> None:
    """Print every field of one manifest entry."""
    table = Table(show_header=False, border_style="border", title=name)
    table.add_column("Field", style="muted")
    table.add_column("Value")
    table.add_row("Source", format_source(entry.source))
    table.add_row("Update", format_update_flag(entry.update_available))
    for field_name, value in entry.model_dump(exclude={"source", "update_available"}).items():
        if value is None:
            continue
        label = field_name.replace("_", " ").capitalize()
        if isinstance(value, int) and "size" in field_name:
            table.add_row(label, f"{format_bytes(value)} ({value} bytes)")
        else:
            table.add_row(label, str(value))
    console.print(table)


def print_plan(document: PlanDocument) -> None:
    """Print one table per source with updates, the disk check and errors."""
    for source in PLAN_SOURCES:
        updates = document.updates_for(source)
        if not updates:
            continue
        table = create_table(f"{source} updates", "Name", "Installed", "Available", "Detail")
        for entry in updates:
            detail = entry.available_hash or entry.branch or entry.summary or ""
            table.add_row(
                f"[package.name]{entry.name}[/]",
                f"[package.version]{entry.installed or '-'}[/]",
                f"[update]{entry.available or '-'}[/]",
                f"[muted]{detail}[/]",
            )
        console.print(table)

    counts = ", ".join(
        f"{format_source(source)} {document.counts.get(source, 0)}"
        for source in document.metadata.sources
    )
    total = document.total_updates()
    console.print(f"\n[bold_header]Updates:[/] {total} ({counts or 'no sources'})")

    space = document.metadata.space
    console.print(
        f"[bold_header]Disk:[/] {space.status} ({space.policy}), "
        f"available {_size(space.available_bytes)} on {space.checked_path or '-'}, "
        f"required {format_bytes(space.required_bytes)}"
    )
    if space.warning:
        print_warning(space.warning)
    for error in document.metadata.errors:
        console.print(f"[error]✗[/] {error}")
