"""Remote version catalogs.

This module exports the catalogs answering "which version does upstream
advertise" for the sync repositories and the AUR.
"""

from pacplan.catalogs.archive import ArchiveCatalog
from pacplan.catalogs.base import RemoteCatalog, chunked
from pacplan.catalogs.repository import RepositoryCatalog

__all__ = ["ArchiveCatalog", "RemoteCatalog", "RepositoryCatalog", "chunked"]
