"""Main CLI application entry point.

Defines the Typer application, global options and logging setup.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from pacplan import __version__
from pacplan.cli.commands import check, config, export, inspect, manifest, plan
from pacplan.cli.types import AppState
from pacplan.utils.formatting import err_console

app = typer.Typer(
    name="pacplan",
    help="Reconcile installed packages against pacman, the AUR, Flatpak and fwupd.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route pacplan log records to stderr through Rich.

    INFO by default, DEBUG with ``--verbose``, WARNING with ``--quiet``.
    Calling it again replaces the previously installed console handler.
    """
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    root = logging.getLogger("pacplan")
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=verbose)
    handler.setLevel(level)
    root.addHandler(handler)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pacplan version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="Configuration file to use."),
    ] = None,
    manifest_path: Annotated[
        Path | None,
        typer.Option("--manifest", help="Manifest file location."),
    ] = None,
    plan_path: Annotated[
        Path | None,
        typer.Option("--plan", help="Plan file location."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress non-essential output."),
    ] = False,
) -> None:
    """pacplan - decide what to update and whether it is safe to proceed.

    Builds a manifest of installed packages with their update source and
    size estimates, and a live plan of pending updates gated by free disk
    space. pacplan never installs or removes anything.
    """
    configure_logging(verbose=verbose, quiet=quiet)
    ctx.obj = AppState(
        config_path=config_path,
        manifest_override=manifest_path,
        plan_override=plan_path,
        verbose=verbose,
        quiet=quiet,
    )


app.add_typer(manifest.app, name="manifest")
app.add_typer(plan.app, name="plan")
app.add_typer(check.app, name="check")
app.command(name="inspect", help="Show one manifest entry.")(inspect.inspect_package)
app.add_typer(export.app, name="export")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
