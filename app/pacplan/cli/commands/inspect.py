"""Inspect command implementation.

Registered directly on the main app since it takes a positional name.
"""

from typing import Annotated

import typer

from pacplan.cli.display import print_entry
from pacplan.cli.types import get_state, handle_errors
from pacplan.core.manifest import load_manifest
from pacplan.utils.formatting import console, print_error


def inspect_package(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Package name.")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the entry as JSON."),
    ] = False,
) -> None:
    """Show every recorded field of a package in the manifest."""
    state = get_state(ctx)
    with handle_errors():
        document = load_manifest(state.manifest_path)

    entry = document.packages.get(name)
    if entry is None:
        print_error(f"Package '{name}' is not in the manifest.")
        raise typer.Exit(code=1)

    if json_output:
        console.print_json(entry.model_dump_json())
        return
    print_entry(name, entry)
