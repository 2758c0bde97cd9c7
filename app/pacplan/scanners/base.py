"""Abstract base class for inventory scanners.

This module defines the Scanner interface that the local package
inventory implements.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from pacplan.models.package import InstalledPackage


class Scanner(ABC):
    """Abstract base class for installed package inventories.

    Scanners query the local package manager and yield one
    :class:`InstalledPackage` per installed package.

    Example:
        >>> scanner = PacmanScanner()
        >>> if scanner.is_available():
        ...     for pkg in scanner.scan():
        ...         print(f"{pkg.name}: {pkg.version}")
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the package manager this scanner reads."""

    @abstractmethod
    def scan(self) -> Iterator[InstalledPackage]:
        """Scan and yield all installed packages.

        Yields:
            InstalledPackage instances in name order.

        Raises:
            PacplanError: If the package manager cannot be queried.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this package manager is available on the system."""
