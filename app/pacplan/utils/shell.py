"""Shell execution utilities.

Provides subprocess execution with errors mapped onto the pacplan
exception hierarchy.
"""

import shutil
import subprocess
from dataclasses import dataclass

from pacplan.core.errors import CommandFailureError, CommandMissingError, PacplanRuntimeError


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0


def run_command(
    args: list[str],
    *,
    timeout: float | None = None,
    cwd: str | None = None,
) -> CommandResult:
    """Execute a command and return the captured result.

    Local tools run without a timeout unless one is given.

    Args:
        args: Command and arguments to execute.
        timeout: Maximum time in seconds to wait for the command.
        cwd: Working directory for the command. If None, uses current directory.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        CommandMissingError: If the executable is not found.
        PacplanRuntimeError: If the process cannot be spawned or times out.
    """
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
            timeout=timeout,
            cwd=cwd,
        )
    except FileNotFoundError as e:
        raise CommandMissingError(args[0]) from e
    except subprocess.TimeoutExpired as e:
        msg = f"{args[0]} timed out after {timeout} seconds"
        raise PacplanRuntimeError(msg) from e
    except OSError as e:
        msg = f"Failed to spawn {args[0]}: {e}"
        raise PacplanRuntimeError(msg) from e
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def run_checked(args: list[str], *, ok_codes: tuple[int, ...] = (0,)) -> CommandResult:
    """Execute a command and raise if it exits with an unexpected status.

    Args:
        args: Command and arguments to execute.
        ok_codes: Exit codes treated as success.

    Returns:
        CommandResult of the successful run.

    Raises:
        CommandMissingError: If the executable is not found.
        CommandFailureError: If the exit code is not in ``ok_codes``.
    """
    result = run_command(args)
    if result.returncode not in ok_codes:
        raise CommandFailureError(" ".join(args), result.returncode, result.stderr)
    return result


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None
