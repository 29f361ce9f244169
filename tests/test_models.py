"""Tests for the release models."""

import pytest
from pydantic import ValidationError

from titlescope.models import Release, ReleaseType, TitlesResponse


class TestRelease:
    """Tests for the Release model."""

    def test_raw_field_aliases(self) -> None:
        """Test the raw "series" and "addedOn" fields map to season and added_on."""
        release = Release.model_validate(
            {"hash": "abc", "name": "Show.S02E03", "series": 2, "episode": 3, "addedOn": 1700000000}
        )
        assert release.season == 2
        assert release.episode == 3
        assert release.added_on == 1700000000

    def test_populate_by_field_name(self) -> None:
        """Test fields can also be set by their Python names."""
        release = Release(hash="abc", season=1, added_on=5)
        assert release.season == 1
        assert release.added_on == 5

    def test_null_sequences_become_empty(self) -> None:
        """Test null codec/audio/hdr/edition lists are treated as empty."""
        release = Release.model_validate(
            {"hash": "abc", "codec": None, "audio": None, "hdr": None, "edition": None}
        )
        assert release.codec == ()
        assert release.audio == ()
        assert release.hdr == ()
        assert release.edition == ()

    def test_sequences_keep_order(self) -> None:
        """Test list fields keep their original order."""
        release = Release.model_validate({"hash": "abc", "audio": ["DTS", "AAC", "AC3"]})
        assert release.audio == ("DTS", "AAC", "AC3")

    def test_empty_type_defaults_to_other(self) -> None:
        """Test a missing or empty type becomes "other"."""
        assert Release(hash="a").type == "other"
        assert Release.model_validate({"hash": "a", "type": ""}).type == "other"

    def test_unknown_type_is_kept_but_enumerates_as_other(self) -> None:
        """Test unrecognized raw types map to OTHER."""
        release = Release(hash="a", type="ebook")
        assert release.type == "ebook"
        assert release.release_type is ReleaseType.OTHER

    def test_release_type_case_insensitive(self) -> None:
        """Test ReleaseType.parse ignores case."""
        assert ReleaseType.parse("Movie") is ReleaseType.MOVIE
        assert ReleaseType.parse(None) is ReleaseType.OTHER

    def test_negative_size_rejected(self) -> None:
        """Test size must be non-negative."""
        with pytest.raises(ValidationError):
            Release(hash="a", size=-1)

    def test_release_is_immutable(self) -> None:
        """Test releases are frozen."""
        release = Release(hash="a")
        with pytest.raises(ValidationError):
            release.title = "Changed"  # type: ignore[misc]

    def test_extra_fields_ignored(self) -> None:
        """Test unknown payload fields are ignored."""
        release = Release.model_validate({"hash": "a", "somethingNew": 1})
        assert not hasattr(release, "somethingNew")

    def test_display_key_fallbacks(self) -> None:
        """Test display key falls back from title to name to "Unknown"."""
        assert Release(hash="a", title="Dune", name="Dune.2021").display_key == "Dune"
        assert Release(hash="a", name="Dune.2021").display_key == "Dune.2021"
        assert Release(hash="a").display_key == "Unknown"

    def test_series_like(self) -> None:
        """Test series and episode releases are series-like."""
        assert Release(hash="a", type="series").is_series_like
        assert Release(hash="a", type="episode").is_series_like
        assert not Release(hash="a", type="movie").is_series_like

    def test_is_complete(self) -> None:
        """Test error and missingFiles states are not complete."""
        assert Release(hash="a", state="uploading").is_complete
        assert Release(hash="a").is_complete
        assert not Release(hash="a", state="error").is_complete
        assert not Release(hash="a", state="missingFiles").is_complete

    def test_episode_code(self) -> None:
        """Test episode code degrades to the known parts."""
        assert Release(hash="a", season=1, episode=5).episode_code == "S01E05"
        assert Release(hash="a", season=2).episode_code == "S02"
        assert Release(hash="a", episode=7).episode_code == "E07"
        assert Release(hash="a").episode_code == ""

    def test_size_gb(self) -> None:
        """Test size in GiB."""
        assert Release(hash="a", size=2 * 1024**3).size_gb == 2.0


class TestTitlesResponse:
    """Tests for the titles endpoint payload."""

    def test_parse_payload(self) -> None:
        """Test a payload with titles and a total."""
        response = TitlesResponse.model_validate(
            {"titles": [{"hash": "a"}, {"hash": "b"}], "total": 2}
        )
        assert [r.hash for r in response.titles] == ["a", "b"]
        assert response.total == 2

    def test_null_titles(self) -> None:
        """Test a null titles list is treated as empty."""
        response = TitlesResponse.model_validate({"titles": None, "total": 0})
        assert response.titles == []
