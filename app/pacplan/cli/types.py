"""Shared state and helpers for CLI commands.

The global options parsed by the main callback are stored in an
:class:`AppState` on the Typer context; commands read the effective
configuration and artifact paths from it.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import typer

from pacplan.core.config import PacplanConfig, load_config
from pacplan.core.errors import PacplanError
from pacplan.core.paths import ensure_dir
from pacplan.core.sources import Collaborators
from pacplan.scanners.pacman import PacmanScanner
from pacplan.utils.formatting import print_error

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class AppState:
    """Global CLI options.

    Attributes:
        config_path: Explicit configuration file, if given.
        manifest_override: Manifest path given on the command line.
        plan_override: Plan path given on the command line.
        verbose: Debug logging requested.
        quiet: Only warnings and errors requested.
    """

    config_path: Path | None = None
    manifest_override: Path | None = None
    plan_override: Path | None = None
    verbose: bool = False
    quiet: bool = False
    _config: PacplanConfig | None = field(default=None, repr=False)

    @property
    def config(self) -> PacplanConfig:
        """Effective configuration, loaded on first access.

        Raises:
            ConfigError: If the configuration is invalid or unsafe.
        """
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    @property
    def manifest_path(self) -> Path:
        """Manifest location: command line, then config, then default."""
        return self.manifest_override or self.config.manifest_path

    @property
    def plan_path(self) -> Path:
        """Plan location: command line, then config, then default."""
        return self.plan_override or self.config.plan_path


def get_state(ctx: typer.Context) -> AppState:
    """Get the AppState stored by the main callback (or defaults)."""
    state = ctx.find_object(AppState)
    return state if state is not None else AppState()


def build_collaborators(config: PacplanConfig) -> Collaborators:
    """Build the production data sources for a run."""
    return Collaborators.from_config(config)


def get_inventory_scanner() -> PacmanScanner:
    """Get the installed package scanner."""
    return PacmanScanner()


@contextmanager
def handle_errors() -> Iterator[None]:
    """Print a pacplan error as a single line and exit with its code."""
    try:
        yield
    except PacplanError as e:
        logger.debug("Command failed", exc_info=True)
        print_error(str(e))
        raise typer.Exit(code=int(e.exit_code)) from e


@contextmanager
def run_log(config: PacplanConfig, command: str) -> Iterator[Path]:
    """Mirror pacplan log records into a per-run log file.

    Yields:
        Path of the log file, named ``pacplan_<UTC stamp>.log``.

    Raises:
        FilesystemError: If the log directory cannot be created.
    """
    log_dir = ensure_dir(config.log_dir, "log")
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    log_path = log_dir / f"pacplan_{stamp}.log"

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger("pacplan")
    root.addHandler(handler)
    logger.debug("pacplan %s run log: %s", command, log_path)
    try:
        yield log_path
    finally:
        root.removeHandler(handler)
        handler.close()
