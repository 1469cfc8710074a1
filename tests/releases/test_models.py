"""
Unit tests for the release data model.
"""

from datetime import datetime, timezone

import pytest

from relinstall.core.exceptions import ReleaseFetchError
from relinstall.releases.models import AssetLink, Release, parse_timestamp
from tests.utils import ReleaseBuilder


class TestParseTimestamp:
    """Test parse_timestamp function."""

    def test_zulu_with_milliseconds(self):
        """Test GitLab's default timestamp format."""
        assert parse_timestamp("2024-05-01T10:00:00.000Z") == datetime(
            2024, 5, 1, 10, 0, tzinfo=timezone.utc
        )

    def test_offset(self):
        """Test explicit offsets are honoured."""
        parsed = parse_timestamp("2024-05-01T12:00:00+02:00")
        assert parsed == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_naive_assumed_utc(self):
        """Test naive timestamps compare with aware ones."""
        assert parse_timestamp("2024-05-01T10:00:00").tzinfo is not None

    def test_invalid(self):
        """Test garbage raises ReleaseFetchError."""
        with pytest.raises(ReleaseFetchError, match="Invalid released_at"):
            parse_timestamp("yesterday")


class TestReleaseFromApi:
    """Test Release.from_api."""

    def test_full_entry(self):
        """Test tag, timestamp and asset links are read."""
        entry = (
            ReleaseBuilder("v1.2.0")
            .with_asset("checksums.txt", "https://example.com/checksums.txt")
            .with_asset("Linux_x86_64.tar.gz", "https://example.com/linux.tar.gz")
            .build()
        )

        release = Release.from_api(entry)

        assert release.tag_name == "v1.2.0"
        assert release.released_at.year == 2024
        assert release.assets == (
            AssetLink("checksums.txt", "https://example.com/checksums.txt"),
            AssetLink("Linux_x86_64.tar.gz", "https://example.com/linux.tar.gz"),
        )

    def test_no_assets(self):
        """Test releases without links have no assets."""
        entry = ReleaseBuilder("v1.0.0").build()
        del entry["assets"]

        assert Release.from_api(entry).assets == ()

    def test_missing_field(self):
        """Test missing required field raises ReleaseFetchError."""
        entry = ReleaseBuilder("v1.0.0").build()
        del entry["released_at"]

        with pytest.raises(ReleaseFetchError, match="released_at"):
            Release.from_api(entry)

    def test_not_a_mapping(self):
        """Test non-dict entries are rejected."""
        with pytest.raises(ReleaseFetchError):
            Release.from_api(["v1.0.0"])

    def test_incomplete_links_skipped(self):
        """Test links without a URL are ignored."""
        entry = ReleaseBuilder("v1.0.0").build()
        entry["assets"]["links"].append({"name": "broken"})

        assert Release.from_api(entry).assets == ()

    @pytest.mark.parametrize("assets", [["Linux_x86_64.tar.gz"], "links", 3])
    def test_malformed_assets(self, assets):
        """Test an assets value that is not a mapping raises ReleaseFetchError."""
        entry = ReleaseBuilder("v1.0.0").build()
        entry["assets"] = assets

        with pytest.raises(ReleaseFetchError, match="malformed assets"):
            Release.from_api(entry)

    @pytest.mark.parametrize("links", [{"name": "a", "url": "b"}, "links"])
    def test_malformed_links(self, links):
        """Test asset links that are not a list raise ReleaseFetchError."""
        entry = ReleaseBuilder("v1.0.0").build()
        entry["assets"]["links"] = links

        with pytest.raises(ReleaseFetchError, match="malformed asset links"):
            Release.from_api(entry)
