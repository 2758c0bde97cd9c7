"""Version ordering.

The reconciler and plan collectors never compare version strings
themselves; they ask a :class:`VersionOracle`. The production oracle
delegates to pacman's ``vercmp`` so epochs, pkgrels and alpha tags sort
exactly as pacman sorts them.
"""

import logging
from abc import ABC, abstractmethod

from pacplan.core.errors import SerializationError
from pacplan.models.package import Ordering
from pacplan.utils.shell import run_checked

logger = logging.getLogger(__name__)


class VersionOracle(ABC):
    """Total order over package version strings."""

    @abstractmethod
    def compare(self, left: str, right: str) -> Ordering:
        """Compare two versions.

        Args:
            left: First version string.
            right: Second version string.

        Returns:
            LESS if ``left`` sorts before ``right``, GREATER if after,
            EQUAL otherwise.

        Raises:
            PacplanError: If the comparison cannot be performed.
        """


class VercmpOracle(VersionOracle):
    """Oracle backed by the ``vercmp`` binary shipped with pacman."""

    def compare(self, left: str, right: str) -> Ordering:
        """Run ``vercmp left right`` and map its signed result."""
        result = run_checked(["vercmp", left, right])
        verdict = result.stdout.strip()
        try:
            value = int(verdict)
        except ValueError as e:
            msg = f"Failed to parse vercmp output '{verdict}'"
            raise SerializationError(msg) from e
        logger.debug("vercmp %s %s -> %d", left, right, value)
        return Ordering.from_int(value)
