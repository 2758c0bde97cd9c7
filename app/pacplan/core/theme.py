"""Theme management for the pacplan CLI.

Colors come from the bundled data/theme.toml, optionally overridden
key by key from ~/.config/pacplan/theme.toml.
"""

import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from pacplan.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)


class ThemeColors(BaseModel):
    """Color configuration for the pacplan CLI.

    All colors must be valid hex codes (#RRGGBB or #RGB).
    """

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Update status
    update: str = "#c1ff62"
    current: str = "#226666"

    # Resolved sources
    source_pacman: str = "#0e8ac8"
    source_aur: str = "#d44ebc"
    source_local: str = "#faf870"
    source_unknown: str = "#b2bec3"
    source_flatpak: str = "#4a90d9"
    source_fwupd: str = "#e67e22"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        """Validate that all color values are valid hex codes."""
        if not isinstance(v, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        if not color.startswith("#"):
            msg = f"{info.field_name}: color must start with '#'"
            raise ValueError(msg)
        digits = color[1:]
        if len(digits) not in (3, 6):
            msg = f"{info.field_name}: color must be #RGB or #RRGGBB format"
            raise ValueError(msg)
        try:
            int(digits, 16)
        except ValueError:
            msg = f"{info.field_name}: invalid hex color '{color}'"
            raise ValueError(msg) from None
        return color


def get_bundled_theme_path() -> Path:
    """Get the bundled default theme path."""
    return resources.files("pacplan.data").joinpath("theme.toml")  # type: ignore[return-value]


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Load the [colors] table from a TOML file.

    Returns:
        Mapping of color name to hex value, or None if the file is
        missing or unreadable.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as e:
        logger.warning("Failed to parse theme file %s: %s", path, e)
        return None
    except OSError as e:
        logger.warning("Failed to read theme file %s: %s", path, e)
        return None

    colors_raw: object = data.get("colors", {})
    if not isinstance(colors_raw, dict):
        logger.warning("Invalid 'colors' section in %s", path)
        return None
    return {
        key: value
        for key, value in cast(dict[str, object], colors_raw).items()
        if isinstance(value, str)
    }


def load_theme(user_path: Path | None = None) -> ThemeColors:
    """Load theme colors, merging user overrides over the bundled defaults.

    Invalid user colors are reported and the built-in defaults are used.
    """
    bundled = _load_toml_colors(Path(get_bundled_theme_path()))
    if bundled is None:
        logger.error("Failed to load bundled theme, installation may be corrupted")
        bundled = {}

    overrides = _load_toml_colors(user_path or get_user_theme_path())
    merged = {**bundled, **(overrides or {})}
    if overrides:
        logger.debug("Applied %d theme overrides", len(overrides))

    try:
        return ThemeColors(**merged)
    except ValidationError as e:
        logger.warning("Theme validation failed, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Convert ThemeColors to a Rich Theme."""
    if colors is None:
        colors = load_theme()

    styles: dict[str, str] = {
        "text": colors.text,
        "muted": colors.muted,
        "header": colors.header,
        "border": colors.border,
        "success": colors.success,
        "warning": colors.warning,
        "error": f"bold {colors.error}",
        "info": colors.info,
        "update": f"bold {colors.update}",
        "current": colors.current,
        "source.pacman": colors.source_pacman,
        "source.aur": colors.source_aur,
        "source.local": colors.source_local,
        "source.unknown": colors.source_unknown,
        "source.flatpak": colors.source_flatpak,
        "source.fwupd": colors.source_fwupd,
        "bold_header": f"bold {colors.header}",
        "package.name": f"bold {colors.text}",
        "package.version": colors.muted,
        "package.size": colors.info,
    }
    return Theme(styles)


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Get the Rich theme, loading and caching it on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
