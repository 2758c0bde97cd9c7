"""Configuration commands.

Shows the effective configuration and writes a default config file.
"""

from typing import Annotated

import tomli_w
import typer

from pacplan.cli.types import get_state, handle_errors
from pacplan.core.config import PacplanConfig, save_config
from pacplan.core.paths import get_config_path
from pacplan.utils.formatting import console, print_info, print_success

app = typer.Typer(
    help="Show or initialize the configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the configuration as JSON."),
    ] = False,
) -> None:
    """Show the effective configuration."""
    state = get_state(ctx)
    with handle_errors():
        config = state.config

    if json_output:
        console.print_json(config.model_dump_json(exclude_none=True))
        return
    data = config.model_dump(mode="json", exclude_none=True)
    console.out(tomli_w.dumps(data), end="", highlight=False)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with the default settings."""
    state = get_state(ctx)
    path = state.config_path or get_config_path()
    if path.exists() and not force:
        print_info(f"Config already exists at {path} (use --force to overwrite).")
        raise typer.Exit(code=1)

    with handle_errors():
        save_config(PacplanConfig(), path)
    print_success(f"Config written to {path}")
