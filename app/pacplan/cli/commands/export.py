"""Export command implementation.

Writes the names of explicitly installed packages, split into native
(repository) and foreign (AUR/local) sets.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from pacplan.cli.types import get_inventory_scanner, handle_errors
from pacplan.core.errors import ConfigError, FilesystemError
from pacplan.utils.formatting import console, print_success


class ExportFormat(str, Enum):
    """Export format options."""

    JSON = "json"
    PLAIN = "plain"


app = typer.Typer(
    help="Export explicitly installed package names.",
    invoke_without_command=True,
)


def render_export(groups: dict[str, list[str]], output_format: ExportFormat) -> str:
    """Render exported package names.

    Args:
        groups: Names keyed by "repo" and/or "aur".
        output_format: JSON object or one name per line.

    Returns:
        Text ending with a newline (empty for an empty plain export).
    """
    if output_format == ExportFormat.JSON:
        return json.dumps(groups, indent=2) + "\n"
    names = [name for group in groups.values() for name in group]
    return "".join(f"{name}\n" for name in names)


@app.callback(invoke_without_command=True)
def export_packages(
    ctx: typer.Context,
    output_format: Annotated[
        ExportFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: json or plain.",
            case_sensitive=False,
        ),
    ] = ExportFormat.JSON,
    repo_only: Annotated[
        bool,
        typer.Option("--repo-only", help="Only export repository packages."),
    ] = False,
    aur_only: Annotated[
        bool,
        typer.Option("--aur-only", help="Only export foreign packages."),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write to this file instead of stdout."),
    ] = None,
) -> None:
    """Export explicitly installed packages.

    Examples:
        pacplan export                          # JSON with repo and aur lists
        pacplan export --format plain --aur-only
        pacplan export -o packages.json
    """
    if ctx.invoked_subcommand is not None:
        return

    with handle_errors():
        if repo_only and aur_only:
            msg = "--repo-only and --aur-only are mutually exclusive"
            raise ConfigError(msg)

        scanner = get_inventory_scanner()
        groups: dict[str, list[str]] = {}
        if not aur_only:
            groups["repo"] = scanner.explicit_packages(foreign=False)
        if not repo_only:
            groups["aur"] = scanner.explicit_packages(foreign=True)
        text = render_export(groups, output_format)

        if output is None:
            console.out(text, end="", highlight=False)
            return
        try:
            output.write_text(text, encoding="utf-8")
        except OSError as e:
            msg = f"Failed to write export {output}: {e}"
            raise FilesystemError(msg) from e

    count = sum(len(group) for group in groups.values())
    print_success(f"Exported {count} packages to {output}")
