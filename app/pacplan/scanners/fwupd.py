"""fwupd firmware adapter.

Parses ``fwupdmgr get-devices --json`` and ``fwupdmgr get-updates --json``.
fwupd has emitted both capitalized and lowercase key variants across
releases; both are accepted and normalized here.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from pacplan.core.errors import CommandFailureError, CommandMissingError, SerializationError
from pacplan.models.manifest import FwupdDevice, FwupdState
from pacplan.models.package import truncate_hash
from pacplan.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

# fwupdmgr exits with this status when there is nothing to report
FWUPD_NOTHING_TO_DO = 2

UNKNOWN_DEVICE = "unknown"


@dataclass(frozen=True, slots=True)
class FwupdUpdate:
    """Firmware release newer than the installed version.

    Attributes:
        device: Device identifier.
        name: Human-readable device name.
        installed: Installed firmware version.
        available: Release version.
        summary: Release summary or description.
        available_hash: Release checksum truncated for display.
        trust: Trust flags joined with commas, or signed/unsigned.
    """

    device: str
    name: str
    installed: str
    available: str
    summary: str = ""
    available_hash: str = ""
    trust: str = ""


def _first(data: dict[str, Any], *keys: str) -> Any:
    """Return the first value present (not None) among the given keys."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _text(data: dict[str, Any], *keys: str) -> str:
    """Return the first non-empty string among the given keys, or ``""``.

    Values of any other type (localized dicts, numbers) are ignored.
    """
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _records(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _devices(payload: Any) -> list[dict[str, Any]]:
    if not isinstance(payload, dict):
        return []
    return _records(payload.get("Devices")) or _records(payload.get("devices"))


def select_checksum(data: dict[str, Any]) -> str:
    """Pick a checksum: ``Checksum``, then the first non-empty ``Checksums``/``checksums``."""
    checksum = data.get("Checksum")
    if isinstance(checksum, str):
        return checksum
    for key in ("Checksums", "checksums"):
        values = data.get(key)
        if isinstance(values, list):
            for value in values:
                if isinstance(value, str) and value:
                    return value
    return ""


def join_trust(data: dict[str, Any]) -> str | None:
    """Join non-empty trust flags with commas, or None if there are none."""
    flags = _first(data, "TrustFlags", "trust-flags")
    if not isinstance(flags, list):
        return None
    filtered = [flag for flag in flags if isinstance(flag, str) and flag]
    return ",".join(filtered) or None


def parse_updates(payload: Any) -> list[FwupdUpdate]:
    """Normalize a decoded ``get-updates`` document.

    Releases without a version, or with the installed version, are skipped.

    Args:
        payload: Decoded JSON document.

    Returns:
        One FwupdUpdate per (device, newer release) pair.
    """
    updates: list[FwupdUpdate] = []
    for device in _devices(payload):
        device_id = _text(device, "DeviceId", "Id") or UNKNOWN_DEVICE
        name = _text(device, "Name") or device_id
        installed = _text(device, "Version")
        for release in _records(_first(device, "Releases", "releases")):
            available = _text(release, "Version")
            if not available or available == installed:
                continue
            trust = join_trust(release)
            if trust is None:
                signed = release.get("Signed")
                trust = "" if signed is None else ("signed" if signed else "unsigned")
            updates.append(
                FwupdUpdate(
                    device=device_id,
                    name=name,
                    installed=installed,
                    available=available,
                    summary=_text(release, "Summary", "Description"),
                    available_hash=truncate_hash(select_checksum(release)) or "",
                    trust=trust,
                )
            )
    return updates


def parse_devices(payload: Any) -> list[FwupdDevice]:
    """Normalize a decoded ``get-devices`` document.

    Fields that are not strings are treated as absent.
    """
    devices: list[FwupdDevice] = []
    for raw in _devices(payload):
        device_id = _text(raw, "Id", "DeviceId") or UNKNOWN_DEVICE
        devices.append(
            FwupdDevice(
                device=device_id,
                name=_text(raw, "Name") or device_id,
                installed=_text(raw, "Version", "VersionBootloader"),
                summary=_text(raw, "Summary", "Description"),
                checksum=truncate_hash(select_checksum(raw)) or "",
                trust=join_trust(raw) or "",
            )
        )
    return devices


class FwupdAdapter:
    """Adapter over ``fwupdmgr``."""

    def is_available(self) -> bool:
        """Check if fwupdmgr is available."""
        return command_exists("fwupdmgr")

    def _query(self, subcommand: str) -> Any:
        """Run ``fwupdmgr SUBCOMMAND --json`` and decode the output.

        Returns:
            Decoded document, or None when fwupd reports nothing to do.

        Raises:
            CommandMissingError: If fwupdmgr is not installed.
            CommandFailureError: If fwupdmgr fails.
            SerializationError: If the output is not valid JSON.
        """
        if not self.is_available():
            raise CommandMissingError("fwupdmgr")
        args = ["fwupdmgr", subcommand, "--json"]
        result = run_command(args)
        if result.returncode == FWUPD_NOTHING_TO_DO:
            logger.debug("fwupdmgr %s: nothing to do", subcommand)
            return None
        if not result.success:
            raise CommandFailureError(" ".join(args), result.returncode, result.stderr)
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            msg = f"Failed to parse fwupd JSON output: {e}"
            raise SerializationError(msg) from e

    def updates(self) -> list[FwupdUpdate]:
        """List firmware releases newer than the installed versions."""
        return parse_updates(self._query("get-updates"))

    def snapshot(self) -> FwupdState:
        """Capture the firmware device state for the manifest."""
        devices = parse_devices(self._query("get-devices"))
        logger.info("Recorded fwupd state: devices=%d", len(devices))
        return FwupdState(enabled=True, device_count=len(devices), devices=devices)
