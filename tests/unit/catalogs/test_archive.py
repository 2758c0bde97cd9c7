"""Unit tests for ArchiveCatalog (AUR RPC)."""

from typing import Any
from unittest.mock import MagicMock

import pytest
import requests
from pacplan.catalogs.archive import DEFAULT_AUR_URL, ArchiveCatalog
from pacplan.core.config import AUR_MAX_ARGS_LIMIT
from pacplan.core.errors import NetworkError, SerializationError
from pacplan.models.package import VersionInfo


def make_response(payload: Any = None, status: int = 200, json_error: bool = False) -> MagicMock:
    """Build a fake requests response."""
    response = MagicMock()
    response.ok = 200 <= status < 300
    response.status_code = status
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session() -> MagicMock:
    """Fake requests session."""
    return MagicMock(spec=requests.Session)


class TestArchiveCatalog:
    """Tests for ArchiveCatalog class."""

    def test_batch_size_capped(self, session: MagicMock) -> None:
        """Batch size stays within the RPC argument limit."""
        assert ArchiveCatalog(max_args=10_000, session=session).batch_size == AUR_MAX_ARGS_LIMIT
        assert ArchiveCatalog(max_args=0, session=session).batch_size == 1

    def test_query_batch(self, session: MagicMock, aur_info_payload: dict[str, Any]) -> None:
        """One info request returns the advertised versions."""
        session.get.return_value = make_response(aur_info_payload)
        catalog = ArchiveCatalog(timeout=3.0, session=session)

        found = catalog.query_batch(["yay", "my-tool"])

        assert found == {"yay": VersionInfo(version="12.4.1-1")}
        session.get.assert_called_once_with(
            DEFAULT_AUR_URL,
            params={"v": "5", "type": "info", "arg[]": ["yay", "my-tool"]},
            timeout=3.0,
        )

    def test_empty_batch(self, session: MagicMock) -> None:
        """No request is made for an empty batch."""
        assert ArchiveCatalog(session=session).query_batch([]) == {}
        session.get.assert_not_called()

    def test_timeout(self, session: MagicMock) -> None:
        """Timeouts become network errors."""
        session.get.side_effect = requests.Timeout()
        with pytest.raises(NetworkError, match="timed out after 10.0 seconds"):
            ArchiveCatalog(session=session).query_batch(["yay"])

    def test_connection_error(self, session: MagicMock) -> None:
        """Transport failures become network errors."""
        session.get.side_effect = requests.ConnectionError("no route to host")
        with pytest.raises(NetworkError, match="AUR request failed: no route to host"):
            ArchiveCatalog(session=session).query_batch(["yay"])

    def test_http_status(self, session: MagicMock) -> None:
        """Non-2xx answers are network errors."""
        session.get.return_value = make_response(status=503)
        with pytest.raises(NetworkError, match="status 503"):
            ArchiveCatalog(session=session).query_batch(["yay"])

    def test_invalid_json(self, session: MagicMock) -> None:
        """Unparseable bodies are serialization errors."""
        session.get.return_value = make_response(json_error=True)
        with pytest.raises(SerializationError, match="AUR response parse failed"):
            ArchiveCatalog(session=session).query_batch(["yay"])

    def test_non_object_body(self, session: MagicMock) -> None:
        """Bodies that are not JSON objects are rejected."""
        session.get.return_value = make_response([1, 2])
        with pytest.raises(SerializationError):
            ArchiveCatalog(session=session).query_batch(["yay"])

    def test_rpc_error(self, session: MagicMock) -> None:
        """RPC-level errors are network errors carrying the message."""
        session.get.return_value = make_response({"type": "error", "error": "Too many arguments."})
        with pytest.raises(NetworkError, match="AUR RPC error: Too many arguments."):
            ArchiveCatalog(session=session).query_batch(["yay"])

    def test_unexpected_type(self, session: MagicMock) -> None:
        """Unknown response types yield no results."""
        session.get.return_value = make_response({"type": "search", "results": []})
        assert ArchiveCatalog(session=session).query_batch(["yay"]) == {}

    def test_malformed_results_skipped(self, session: MagicMock) -> None:
        """Entries without a name or version are ignored."""
        session.get.return_value = make_response(
            {
                "type": "multiinfo",
                "results": [
                    "junk",
                    {"Name": "a"},
                    {"Name": "b", "Version": "2-1"},
                ],
            }
        )
        assert ArchiveCatalog(session=session).query_batch(["a", "b"]) == {
            "b": VersionInfo(version="2-1")
        }
