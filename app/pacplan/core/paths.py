"""XDG-compliant path management for pacplan.

This module provides standardized config and state locations following the
XDG Base Directory layout.

XDG defaults:
- Config: ~/.config/pacplan/
- State: ~/.local/state/pacplan/
"""

import os
from pathlib import Path

from pacplan.core.errors import FilesystemError

# Application identifier for directory naming
APP_NAME = "pacplan"

# Filesystems probed for free space, in priority order
DEFAULT_SPACE_CANDIDATES: tuple[str, ...] = (
    "/var/cache/pacman/pkg",
    "/var/tmp",
    "/tmp",
    "/",
)


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/pacplan/ (or XDG_CONFIG_HOME/pacplan/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the manifest, the plan and run logs.

    Returns:
        Path to ~/.local/state/pacplan/ (or XDG_STATE_HOME/pacplan/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/pacplan/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_user_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/pacplan/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_manifest_path() -> Path:
    """Get the default manifest file path.

    Returns:
        Path to ~/.local/state/pacplan/manifest.json.
    """
    return get_state_dir() / "manifest.json"


def get_plan_path() -> Path:
    """Get the default plan file path.

    Returns:
        Path to ~/.local/state/pacplan/plan.json.
    """
    return get_state_dir() / "plan.json"


def get_log_dir() -> Path:
    """Get the default run log directory.

    Returns:
        Path to ~/.local/state/pacplan/logs/.
    """
    return get_state_dir() / "logs"


def expand_path(value: str | Path) -> Path:
    """Expand ``~`` and environment variables in a configured path."""
    return Path(os.path.expandvars(str(value))).expanduser()


def ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        FilesystemError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise FilesystemError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise FilesystemError(msg) from e
    return path
