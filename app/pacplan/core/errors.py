"""Exception hierarchy and process exit codes.

Every failure pacplan raises derives from :class:`PacplanError` and
carries the exit code the CLI reports for it.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes reported by the CLI."""

    OK = 0
    ERRORS = 1
    CONFIG = 2
    CAPACITY = 3
    COMMAND = 4
    NETWORK = 5
    FILESYSTEM = 6
    SERIALIZATION = 7
    RUNTIME = 8


class PacplanError(Exception):
    """Base exception for pacplan errors."""

    exit_code: ExitCode = ExitCode.RUNTIME


class CommandMissingError(PacplanError):
    """Raised when an external tool is not installed."""

    exit_code = ExitCode.COMMAND

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Required command not found: {command}")


class CommandFailureError(PacplanError):
    """Raised when an external tool exits with a non-zero status.

    Attributes:
        command: Command line that was executed.
        returncode: Exit status of the command.
        stderr: Captured standard error, stripped.
    """

    exit_code = ExitCode.COMMAND

    def __init__(self, command: str, returncode: int, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = self.stderr or "no error output"
        super().__init__(f"{command} failed with status {returncode}: {detail}")


class NetworkError(PacplanError):
    """Raised when an upstream API is unreachable or answers non-2xx."""

    exit_code = ExitCode.NETWORK


class SerializationError(PacplanError):
    """Raised when an external source emits malformed JSON or text."""

    exit_code = ExitCode.SERIALIZATION


class FilesystemError(PacplanError):
    """Raised on I/O failures for manifest, plan, config or log paths."""

    exit_code = ExitCode.FILESYSTEM


class ConfigError(PacplanError):
    """Raised for invalid or unsafe configuration."""

    exit_code = ExitCode.CONFIG


class PacplanRuntimeError(PacplanError):
    """Raised for runtime failures without a more specific category."""

    exit_code = ExitCode.RUNTIME


class CapacityError(PacplanRuntimeError):
    """Raised when enforced disk capacity is insufficient."""

    exit_code = ExitCode.CAPACITY
