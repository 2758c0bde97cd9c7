"""CLI commands for pacplan.

This package contains all subcommand implementations.
"""

from pacplan.cli.commands import check, config, export, inspect, manifest, plan

__all__ = ["check", "config", "export", "inspect", "manifest", "plan"]
