"""Unit tests for size estimation."""

from pacplan.core.config import SizeHeuristics
from pacplan.core.estimate import SizeEstimate, estimate_sizes
from pacplan.models.package import PackageSource, VersionInfo


class TestArchiveEstimates:
    """Tests for AUR packages, which are built locally."""

    def test_download_only(self) -> None:
        """1000 bytes download gives install 2000, build 8000, transient 11000."""
        estimate = estimate_sizes(
            PackageSource.ARCHIVE, None, VersionInfo(version="1", download_size=1000)
        )
        assert estimate == SizeEstimate(
            download_selected=1000,
            installed_selected=None,
            install_estimate=2000,
            build_estimate=8000,
            transient_estimate=11000,
        )

    def test_prefers_archive_sizes(self) -> None:
        """AUR sizes win over repository sizes for AUR packages."""
        estimate = estimate_sizes(
            PackageSource.ARCHIVE,
            VersionInfo(version="1", download_size=50, installed_size=60),
            VersionInfo(version="2", download_size=1000, installed_size=3000),
        )
        assert estimate.download_selected == 1000
        assert estimate.install_estimate == 3000
        assert estimate.build_estimate == 8000
        assert estimate.transient_estimate == 12000

    def test_custom_multipliers(self) -> None:
        """Multipliers come from the heuristics."""
        heuristics = SizeHeuristics(archive_install_multiplier=3.0, archive_build_multiplier=4.0)
        estimate = estimate_sizes(
            PackageSource.ARCHIVE, None, VersionInfo(version="1", download_size=100), heuristics
        )
        assert estimate.install_estimate == 300
        assert estimate.build_estimate == 400


class TestRepositoryEstimates:
    """Tests for repository packages."""

    def test_full_telemetry(self) -> None:
        """Build is 1.5x the installed size, rounded up."""
        estimate = estimate_sizes(
            PackageSource.REPOSITORY,
            VersionInfo(version="1", download_size=1000, installed_size=4001),
            None,
        )
        assert estimate.install_estimate == 4001
        assert estimate.build_estimate == 6002
        assert estimate.transient_estimate == 1000 + 6002 + 4001

    def test_download_only(self) -> None:
        """Without an installed size the download size stands in."""
        estimate = estimate_sizes(
            PackageSource.REPOSITORY, VersionInfo(version="1", download_size=1000), None
        )
        assert estimate.install_estimate == 1000
        assert estimate.build_estimate == 1500
        assert estimate.transient_estimate == 3500


class TestUnknownSizes:
    """Tests for missing telemetry."""

    def test_nothing_known(self) -> None:
        """No sizes means no transient estimate."""
        estimate = estimate_sizes(PackageSource.ARCHIVE, None, VersionInfo(version="1"))
        assert estimate.transient_estimate is None
        assert estimate.build_estimate is None

    def test_local_package(self) -> None:
        """Local packages have nothing to download or build."""
        assert estimate_sizes(PackageSource.LOCAL, None, None) == SizeEstimate()
