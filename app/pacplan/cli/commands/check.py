"""Check command implementation.

Summarizes the stored manifest without querying any source.
"""

from typing import Annotated

import typer

from pacplan.cli.display import create_updates_table, print_manifest_summary
from pacplan.cli.types import get_state, handle_errors
from pacplan.core.manifest import load_manifest, manifest_to_json
from pacplan.utils.formatting import console, print_info

app = typer.Typer(
    help="Summarize the stored manifest.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def check_manifest(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the manifest as JSON."),
    ] = False,
) -> None:
    """Show manifest totals and the packages with pending updates."""
    if ctx.invoked_subcommand is not None:
        return

    state = get_state(ctx)
    with handle_errors():
        document = load_manifest(state.manifest_path)

    if json_output:
        console.print_json(manifest_to_json(document))
        return

    print_manifest_summary(document)
    pending = document.pending_updates()
    if not pending:
        print_info("All packages are up to date.")
        return
    console.print(create_updates_table(pending))
