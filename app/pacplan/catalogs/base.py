"""Abstract base class for remote version catalogs."""

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence

from pacplan.models.package import VersionInfo


def chunked(names: Sequence[str], size: int) -> Iterator[list[str]]:
    """Split names into consecutive batches of at most ``size`` items."""
    if size < 1:
        msg = f"Batch size must be positive, got {size}"
        raise ValueError(msg)
    for start in range(0, len(names), size):
        yield list(names[start : start + size])


class RemoteCatalog(ABC):
    """Batch lookup of advertised versions.

    Names the catalog does not know are simply absent from the result.
    """

    #: Maximum number of names sent in one upstream request
    batch_size: int = 64

    @abstractmethod
    def query_batch(self, names: list[str]) -> dict[str, VersionInfo]:
        """Query a single batch of at most :attr:`batch_size` names.

        Raises:
            PacplanError: If the upstream query fails.
        """

    def batches(self, names: Sequence[str]) -> Iterator[list[str]]:
        """Split names into request-sized batches."""
        return chunked(names, self.batch_size)
