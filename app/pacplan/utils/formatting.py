"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.table import Table

from pacplan.core.theme import get_theme
from pacplan.models.package import PackageSource


def _detect_color_system() -> str | None:
    """Use truecolor on interactive terminals, otherwise let Rich decide."""
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_table(title: str, *columns: str) -> Table:
    """Create a table with the shared header and border styling.

    Args:
        title: Table title.
        *columns: Column headers, added left to right.

    Returns:
        Rich Table with the given columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    for column in columns:
        table.add_column(column)
    return table


def format_source(source: PackageSource | str) -> str:
    """Format a source label with its theme color."""
    value = source.value if isinstance(source, PackageSource) else source
    return f"[source.{value}]{value}[/]"


def format_update_flag(update_available: bool) -> str:
    """Format an update verdict as a short marker."""
    if update_available:
        return "[update]↑ update[/]"
    return "[current]current[/]"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
