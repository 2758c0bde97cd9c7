"""AUR catalog backed by the AUR RPC interface (v5, ``type=info``)."""

import logging
from typing import Any

import requests

from pacplan.catalogs.base import RemoteCatalog
from pacplan.core.config import AUR_MAX_ARGS_LIMIT
from pacplan.core.errors import NetworkError, SerializationError
from pacplan.models.package import VersionInfo

logger = logging.getLogger(__name__)

DEFAULT_AUR_URL = "https://aur.archlinux.org/rpc/"
DEFAULT_AUR_TIMEOUT = 10.0


class ArchiveCatalog(RemoteCatalog):
    """Versions advertised by the AUR.

    Args:
        base_url: RPC endpoint.
        max_args: Names per request, capped at the RPC limit.
        timeout: Request timeout in seconds.
        session: Optional requests session to reuse connections.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_AUR_URL,
        max_args: int = AUR_MAX_ARGS_LIMIT,
        timeout: float = DEFAULT_AUR_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url
        self.batch_size = max(1, min(max_args, AUR_MAX_ARGS_LIMIT))
        self.timeout = timeout
        self._session = session or requests.Session()

    def query_batch(self, names: list[str]) -> dict[str, VersionInfo]:
        """Issue one ``type=info`` request.

        Raises:
            NetworkError: If the request fails, times out or answers non-2xx,
                or if the RPC reports an error.
            SerializationError: If the response is not the expected JSON.
        """
        if not names:
            return {}
        params: dict[str, Any] = {"v": "5", "type": "info", "arg[]": names}
        try:
            response = self._session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            msg = f"AUR request timed out after {self.timeout} seconds"
            raise NetworkError(msg) from e
        except requests.RequestException as e:
            msg = f"AUR request failed: {e}"
            raise NetworkError(msg) from e

        if not response.ok:
            msg = f"AUR request failed with status {response.status_code}"
            raise NetworkError(msg)

        try:
            body = response.json()
        except ValueError as e:
            msg = f"AUR response parse failed: {e}"
            raise SerializationError(msg) from e

        return self._parse(body)

    def _parse(self, body: Any) -> dict[str, VersionInfo]:
        if not isinstance(body, dict):
            msg = "AUR response is not a JSON object"
            raise SerializationError(msg)
        if body.get("type") == "error":
            msg = f"AUR RPC error: {body.get('error') or 'unknown error'}"
            raise NetworkError(msg)
        if body.get("type") != "multiinfo":
            logger.warning("Unexpected AUR response type %r, ignoring", body.get("type"))
            return {}

        found: dict[str, VersionInfo] = {}
        for entry in body.get("results") or []:
            if not isinstance(entry, dict):
                continue
            name = entry.get("Name")
            version = entry.get("Version")
            if isinstance(name, str) and isinstance(version, str) and name and version:
                found[name] = VersionInfo(version=version)
        return found
