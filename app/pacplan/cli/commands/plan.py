"""Plan command implementation.

Queries every enabled source live and writes the update plan together
with the disk capacity verdict.
"""

import json
from typing import Annotated

import typer

from pacplan.cli.display import print_plan
from pacplan.cli.types import build_collaborators, get_state, handle_errors, run_log
from pacplan.core.errors import ExitCode
from pacplan.core.plan import PlanSettings, build_plan, save_plan
from pacplan.utils.formatting import console, print_error, print_success

app = typer.Typer(
    help="Plan pending updates from live sources.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def plan_updates(
    ctx: typer.Context,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit with status 1 if any error was recorded."),
    ] = False,
    offline: Annotated[
        bool,
        typer.Option("--offline", help="Skip network sources (the AUR)."),
    ] = False,
    no_repo: Annotated[
        bool,
        typer.Option("--no-repo", help="Skip the sync repositories."),
    ] = False,
    no_aur: Annotated[
        bool,
        typer.Option("--no-aur", help="Skip the AUR."),
    ] = False,
    with_flatpak: Annotated[
        bool,
        typer.Option("--with-flatpak", help="Check Flatpak applications."),
    ] = False,
    with_fwupd: Annotated[
        bool,
        typer.Option("--with-fwupd", help="Check firmware updates."),
    ] = False,
    include: Annotated[
        list[str] | None,
        typer.Option(
            "--include",
            "-i",
            help="Only check package names matching this regex (repeatable).",
        ),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option(
            "--exclude",
            "-x",
            help="Never check package names matching this regex (repeatable).",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Report capacity shortfalls without blocking."),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the plan as JSON."),
    ] = False,
) -> None:
    """Build the update plan and write it to the plan path.

    The plan is always written. It is blocked, and the command exits with
    the capacity code, when the space policy is "enforce" and the pending
    updates do not fit.

    Examples:
        pacplan plan                        # pacman and AUR
        pacplan plan --offline              # pacman only
        pacplan plan --with-flatpak --json  # Add Flatpak, print JSON
        pacplan plan --exclude '^linux'     # Skip kernel packages
    """
    if ctx.invoked_subcommand is not None:
        return

    state = get_state(ctx)
    with handle_errors():
        config = state.config
        settings = PlanSettings(
            pacman=not no_repo,
            aur=not (no_aur or offline),
            flatpak=with_flatpak or config.sources.flatpak,
            fwupd=with_fwupd or config.sources.fwupd,
            include=tuple(include or ()),
            exclude=tuple(exclude or ()),
            archive_batch_size=config.archive.max_args,
        )
        plan_path = state.plan_path
        with run_log(config, "plan"):
            outcome = build_plan(
                build_collaborators(config),
                settings,
                config.space_settings(),
                heuristics=config.size_heuristics(),
                dry_run=dry_run,
                plan_path=plan_path,
            )
            save_plan(outcome.document, plan_path)

    if json_output:
        console.print_json(json.dumps(outcome.document.to_dict()))
    else:
        print_plan(outcome.document)
        print_success(f"Plan written to {plan_path}")

    if outcome.blocked:
        print_error("Update blocked by insufficient disk space.")
        raise typer.Exit(code=int(ExitCode.CAPACITY))
    if strict and outcome.has_errors:
        raise typer.Exit(code=int(ExitCode.ERRORS))
