"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules: sample
output of the external tools, and in-memory stand-ins for the version
oracle, catalogs, inventory and disk query.
"""

import json
import re
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from pacplan.catalogs.base import RemoteCatalog
from pacplan.core.errors import NetworkError, SerializationError
from pacplan.core.oracle import VersionOracle
from pacplan.core.sources import Collaborators
from pacplan.core.space import SpaceReport
from pacplan.models.package import InstalledPackage, Ordering, VersionInfo
from pacplan.scanners.base import Scanner
from pacplan.scanners.flatpak import FlatpakAdapter
from pacplan.scanners.fwupd import FwupdAdapter


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config and state directories at a temporary location."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    return tmp_path


class NumericOracle(VersionOracle):
    """Compares versions by their numeric components.

    Good enough for test data; names listed in ``failing`` raise.
    """

    def __init__(self, failing: Sequence[str] = ()) -> None:
        self.failing = set(failing)
        self.calls: list[tuple[str, str]] = []

    @staticmethod
    def _key(version: str) -> tuple[int, ...]:
        return tuple(int(part) for part in re.findall(r"\d+", version))

    def compare(self, left: str, right: str) -> Ordering:
        self.calls.append((left, right))
        if left in self.failing or right in self.failing:
            msg = f"Failed to parse vercmp output for '{left}' '{right}'"
            raise SerializationError(msg)
        a, b = self._key(left), self._key(right)
        if a < b:
            return Ordering.LESS
        if a > b:
            return Ordering.GREATER
        return Ordering.EQUAL


class StaticCatalog(RemoteCatalog):
    """Catalog answering from a dict, optionally failing some batches."""

    def __init__(
        self,
        versions: dict[str, VersionInfo] | None = None,
        batch_size: int = 64,
        fail_names: Sequence[str] = (),
    ) -> None:
        self.versions = versions or {}
        self.batch_size = batch_size
        self.fail_names = set(fail_names)
        self.requests: list[list[str]] = []

    def query_batch(self, names: list[str]) -> dict[str, VersionInfo]:
        self.requests.append(list(names))
        if self.fail_names.intersection(names):
            msg = "catalog unreachable"
            raise NetworkError(msg)
        return {name: self.versions[name] for name in names if name in self.versions}


class StaticScanner(Scanner):
    """Inventory returning a fixed package list."""

    def __init__(self, packages: Sequence[InstalledPackage]) -> None:
        self.packages = list(packages)
        self.scans = 0

    @property
    def name(self) -> str:
        return "static"

    def is_available(self) -> bool:
        return True

    def scan(self) -> Iterator[InstalledPackage]:
        self.scans += 1
        yield from sorted(self.packages, key=lambda pkg: pkg.name)


@pytest.fixture
def oracle() -> NumericOracle:
    """Version oracle ordering by numeric components."""
    return NumericOracle()


@pytest.fixture
def oracle_factory() -> type[NumericOracle]:
    """Oracle class, for tests that need failing comparisons."""
    return NumericOracle


@pytest.fixture
def catalog_factory() -> type[StaticCatalog]:
    """In-memory catalog class."""
    return StaticCatalog


@pytest.fixture
def scanner_factory() -> type[StaticScanner]:
    """In-memory inventory class."""
    return StaticScanner


@pytest.fixture
def installed_packages() -> list[InstalledPackage]:
    """Small inventory: two repository packages, one AUR and one local build."""
    return [
        InstalledPackage(
            name="bash", version="5.2.026-2", origin="pacman", installed_size=9_740_000
        ),
        InstalledPackage(name="python", version="3.12.1-1", origin="pacman"),
        InstalledPackage(name="yay", version="12.3.5-1", origin="local"),
        InstalledPackage(name="my-tool", version="1.0-1", origin="local"),
    ]


@pytest.fixture
def repo_versions() -> dict[str, VersionInfo]:
    """Repository answers for the sample inventory."""
    return {
        "bash": VersionInfo(
            version="5.2.026-5",
            download_size=1_000,
            installed_size=4_000,
            package_hash="9f2c4d1e8b7a6c5d4e3f2a1b0c9d8e7f",
            validated_by="Signature",
        ),
        "python": VersionInfo(version="3.12.1-1", download_size=500, installed_size=2_000),
    }


@pytest.fixture
def aur_versions() -> dict[str, VersionInfo]:
    """AUR answers for the sample inventory."""
    return {"yay": VersionInfo(version="12.4.1-1")}


@pytest.fixture
def make_sources(
    installed_packages: list[InstalledPackage],
    repo_versions: dict[str, VersionInfo],
    aur_versions: dict[str, VersionInfo],
    oracle: NumericOracle,
) -> Callable[..., Collaborators]:
    """Factory for collaborators backed by the in-memory fakes.

    Keyword arguments override individual collaborators; ``free_bytes``
    sets the space reported for ``/var/tmp``.
    """

    def factory(free_bytes: int = 10**12, **overrides: Any) -> Collaborators:
        flatpak = MagicMock(spec=FlatpakAdapter)
        flatpak.installed.return_value = []
        flatpak.updates.return_value = []
        fwupd = MagicMock(spec=FwupdAdapter)
        fwupd.updates.return_value = []

        def assess(candidates: Sequence[str]) -> SpaceReport:
            return SpaceReport(checked_path=Path("/var/tmp"), available_bytes=free_bytes)

        values: dict[str, Any] = {
            "inventory": StaticScanner(installed_packages),
            "repository": StaticCatalog(repo_versions),
            "archive": StaticCatalog(aur_versions, batch_size=100),
            "oracle": oracle,
            "flatpak": flatpak,
            "fwupd": fwupd,
            "assess_space": assess,
        }
        values.update(overrides)
        return Collaborators(**values)

    return factory


@pytest.fixture
def pacman_qi_output() -> str:
    """Sample ``pacman -Qi`` output."""
    return """Name            : bash
Version         : 5.2.026-2
Description     : The GNU Bourne Again shell
Architecture    : x86_64
URL             : https://www.gnu.org/software/bash/bash.html
Licenses        : GPL-3.0-or-later
Groups          : None
Provides        : sh
Depends On      : readline  libreadline.so=8-64  glibc  ncurses
Optional Deps   : bash-completion: for tab completion [installed]
Installed Size  : 9,29 MiB
Packager        : Levente Polyak <anthraxx@archlinux.org>
Build Date      : Fri 05 Jan 2024 08:00:00 PM CET
Install Date    : Sat 06 Jan 2024 10:15:30 AM CET
Install Reason  : Explicitly installed
Install Script  : No
Validated By    : Signature

Name            : yay
Version         : 12.3.5-1
Description     : Yet another yogurt. Pacman wrapper and AUR helper written in go.
Architecture    : x86_64
Installed Size  : 8.50 MiB
Install Date    : Mon 08 Jan 2024 09:00:00 AM CET
Install Reason  : Explicitly installed
Validated By    : None

Name            : acl
Version         : 2.3.2-1
Description     : Access control list utilities, libraries and headers
Architecture    : x86_64
Installed Size  : 329.18 KiB
Install Date    : Sat 06 Jan 2024 10:15:00 AM CET
Install Reason  : Installed as a dependency for another package
Validated By    : Signature
"""


@pytest.fixture
def pacman_qm_output() -> str:
    """Sample ``pacman -Qm`` output."""
    return "yay 12.3.5-1\n"


@pytest.fixture
def pacman_si_output() -> str:
    """Sample ``pacman -Si`` output for two packages."""
    return """Repository      : core
Name            : bash
Version         : 5.2.026-5
Description     : The GNU Bourne Again shell
Architecture    : x86_64
Download Size   : 1.82 MiB
Installed Size  : 9.30 MiB
Packager        : Levente Polyak <anthraxx@archlinux.org>
SHA-256 Sum     : 9f2c4d1e8b7a6c5d4e3f2a1b0c9d8e7f6a5b4c3d2e1f0a9b8c7d6e5f4a3b2c1d
Validated By    : MD5 Sum  SHA-256 Sum  Signature

Repository      : core
Name            : acl
Version         : 2.3.2-1
Description     : Access control list utilities, libraries and headers
Architecture    : x86_64
Download Size   : 137.47 KiB
Installed Size  : 329.18 KiB
Validated By    : Signature
"""


@pytest.fixture
def aur_info_payload() -> dict[str, Any]:
    """Sample AUR RPC v5 ``type=info`` response."""
    return {
        "version": 5,
        "type": "multiinfo",
        "resultcount": 1,
        "results": [
            {
                "ID": 1371123,
                "Name": "yay",
                "PackageBase": "yay",
                "Version": "12.4.1-1",
                "Description": "Yet another yogurt. Pacman wrapper and AUR helper written in go.",
                "NumVotes": 2200,
                "OutOfDate": None,
            }
        ],
    }


@pytest.fixture
def fwupd_updates_json() -> str:
    """Sample ``fwupdmgr get-updates --json`` output."""
    return json.dumps(
        {
            "Devices": [
                {
                    "DeviceId": "362301da643102b9f38477387e2193e57abaa590",
                    "Name": "UEFI dbx",
                    "Version": "371",
                    "Releases": [
                        {"Version": "371", "Summary": "Same as installed"},
                        {
                            "Version": "400",
                            "Summary": "UEFI Revocation Database",
                            "Checksums": [
                                "",
                                "d7b4b7e1c1a2b3c4d5e6f708192a3b4c5d6e7f80",
                            ],
                            "TrustFlags": ["trusted-payload", "trusted-metadata"],
                        },
                    ],
                },
                {
                    "Id": "5f1d2ac5b1d0e1b9d8a8a3c7c6b5a4f3e2d1c0b9",
                    "Version": "0.1.10",
                    "releases": [
                        {
                            "Version": "0.1.12",
                            "Description": "Embedded controller firmware",
                            "Checksum": "0123456789abcdef0123456789abcdef",
                            "Signed": False,
                        }
                    ],
                },
            ]
        }
    )


@pytest.fixture
def fwupd_devices_json() -> str:
    """Sample ``fwupdmgr get-devices --json`` output."""
    return json.dumps(
        {
            "devices": [
                {
                    "Id": "362301da643102b9f38477387e2193e57abaa590",
                    "Name": "UEFI dbx",
                    "Version": "371",
                    "Summary": "UEFI revocation database",
                    "Checksums": ["abcdef0123456789abcdef0123456789"],
                    "TrustFlags": ["updatable"],
                },
                {
                    "DeviceId": "b7a2",
                    "VersionBootloader": "1.4",
                },
            ]
        }
    )


@pytest.fixture
def flatpak_list_output() -> str:
    """Sample ``flatpak list --app --columns=application,version,branch,origin`` output."""
    return (
        "org.mozilla.firefox\t128.0\tstable\tflathub\n"
        "org.gnome.Calculator\t46.1\tstable\tflathub\n"
        "com.example.NoVersion\t\tstable\tflathub\n"
    )


@pytest.fixture
def flatpak_updates_output() -> str:
    """Sample ``flatpak remote-ls --updates --app`` output."""
    return (
        "org.mozilla.firefox\tstable\tflathub\t129.0\n"
        "org.example.NotInstalled\tstable\tflathub\t2.0\n"
    )
