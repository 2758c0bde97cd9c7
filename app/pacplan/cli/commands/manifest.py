"""Manifest command implementation.

Builds the manifest of installed packages with their resolved update
source, size estimates and the disk capacity verdict.
"""

from typing import Annotated

import typer

from pacplan.cli.display import print_manifest_summary
from pacplan.cli.types import build_collaborators, get_state, handle_errors, run_log
from pacplan.core.errors import CapacityError
from pacplan.core.manifest import ManifestSettings, manifest_to_json, run_manifest, save_manifest
from pacplan.utils.formatting import console, print_info, print_success

app = typer.Typer(
    help="Build the package manifest.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def build(
    ctx: typer.Context,
    packages: Annotated[
        list[str] | None,
        typer.Option(
            "--package",
            "-p",
            help="Only include this package (repeatable).",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Print the summary instead of writing the manifest.",
        ),
    ] = False,
    no_repo: Annotated[
        bool,
        typer.Option("--no-repo", help="Skip the sync repository queries."),
    ] = False,
    no_aur: Annotated[
        bool,
        typer.Option("--no-aur", help="Skip the AUR queries."),
    ] = False,
    with_flatpak: Annotated[
        bool,
        typer.Option("--with-flatpak", help="Capture installed Flatpak applications."),
    ] = False,
    with_fwupd: Annotated[
        bool,
        typer.Option("--with-fwupd", help="Capture firmware devices."),
    ] = False,
    min_free_gb: Annotated[
        float | None,
        typer.Option(
            "--min-free-gb",
            min=0.0,
            help="Free space buffer in GiB (overrides the config).",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the manifest as JSON."),
    ] = False,
) -> None:
    """Build the manifest and write it to the manifest path.

    With --dry-run nothing is written. When the space policy is
    "enforce" and the pending updates do not fit, the manifest is not
    written and the command exits with the capacity code.

    Examples:
        pacplan manifest                    # Build and write the manifest
        pacplan manifest --dry-run          # Show the summary only
        pacplan manifest -p linux -p mesa   # Restrict to two packages
        pacplan manifest --with-flatpak     # Include Flatpak applications
    """
    if ctx.invoked_subcommand is not None:
        return

    state = get_state(ctx)
    with handle_errors():
        config = state.config
        settings = ManifestSettings(
            packages=tuple(packages or ()),
            use_repository=not no_repo,
            use_archive=not no_aur,
            with_flatpak=with_flatpak or config.sources.flatpak,
            with_fwupd=with_fwupd or config.sources.fwupd,
            dry_run=dry_run,
            heuristics=config.size_heuristics(),
            policy=config.reconcile_policy(),
            space=config.space_settings(min_free_gb),
        )
        with run_log(config, "manifest"):
            outcome = run_manifest(build_collaborators(config), settings)
            if outcome.blocked:
                raise CapacityError(outcome.verdict.message or "Insufficient disk space")
            if not dry_run:
                save_manifest(outcome.document, state.manifest_path)

    if json_output:
        console.print_json(manifest_to_json(outcome.document))
        return

    print_manifest_summary(outcome.document)
    if dry_run:
        print_info("Dry run: manifest not written.")
    else:
        print_success(f"Manifest written to {state.manifest_path}")
