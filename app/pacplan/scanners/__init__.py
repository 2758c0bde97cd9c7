"""Local inventory and application scanners.

This module exports the scanner implementations for pacman packages,
Flatpak applications and fwupd firmware devices.
"""

from pacplan.scanners.base import Scanner
from pacplan.scanners.flatpak import FlatpakAdapter
from pacplan.scanners.fwupd import FwupdAdapter
from pacplan.scanners.pacman import PacmanScanner

__all__ = ["FlatpakAdapter", "FwupdAdapter", "PacmanScanner", "Scanner"]
