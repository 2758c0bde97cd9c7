"""Utility modules for pacplan.

This module exports commonly used utility functions.
"""

from pacplan.utils.formatting import (
    console,
    create_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from pacplan.utils.shell import CommandResult, command_exists, run_checked, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "create_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_checked",
    "run_command",
]
