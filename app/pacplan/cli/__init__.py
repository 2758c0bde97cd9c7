"""CLI package for pacplan.

This package contains the Typer application and all subcommands.
"""

from pacplan.cli.main import app

__all__ = ["app"]
