"""Tests for release quality scoring."""

from titlescope.models import Release
from titlescope.quality import (
    QualityTier,
    has_efficient_codec,
    resolution_tier,
    score_release,
    source_bonus,
)


class TestResolutionTier:
    """Tests for resolution tier classification."""

    def test_uhd(self) -> None:
        """Test 2160p and 4K map to UHD."""
        assert resolution_tier("2160p") is QualityTier.UHD
        assert resolution_tier("4K") is QualityTier.UHD

    def test_fhd(self) -> None:
        """Test 1080p and FHD map to FHD."""
        assert resolution_tier("1080p") is QualityTier.FHD
        assert resolution_tier("FHD") is QualityTier.FHD

    def test_hd(self) -> None:
        """Test 720p and HD map to HD."""
        assert resolution_tier("720p") is QualityTier.HD
        assert resolution_tier("HD") is QualityTier.HD

    def test_sd_fallback(self) -> None:
        """Test anything else is SD."""
        assert resolution_tier("480p") is QualityTier.SD
        assert resolution_tier(None) is QualityTier.SD
        assert resolution_tier("") is QualityTier.SD

    def test_tier_rank(self) -> None:
        """Test tiers rank SD < HD < FHD < UHD."""
        ranks = [t.rank for t in (QualityTier.SD, QualityTier.HD, QualityTier.FHD, QualityTier.UHD)]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 4


class TestBonuses:
    """Tests for source and codec bonuses."""

    def test_source_bonus(self) -> None:
        """Test source bonuses are case-insensitive substring matches."""
        assert source_bonus("BluRay") == 15
        assert source_bonus("bd") == 15
        assert source_bonus("WEB-DL") == 10
        assert source_bonus("hdtv") == 5
        assert source_bonus("dvd") == 0
        assert source_bonus(None) == 0

    def test_source_bonus_priority(self) -> None:
        """Test the first matching source in priority order wins."""
        assert source_bonus("bluray-web") == 15

    def test_efficient_codec(self) -> None:
        """Test x265 and HEVC codecs are detected."""
        assert has_efficient_codec(["x265"])
        assert has_efficient_codec(("H.264", "HEVC"))
        assert not has_efficient_codec(["x264"])
        assert not has_efficient_codec([])


class TestScoreRelease:
    """Tests for score_release."""

    def test_empty_release_scores_floor(self) -> None:
        """Test a release with no attributes scores the SD floor."""
        quality = score_release(Release(hash="a"))
        assert quality.score == 25
        assert quality.level is QualityTier.SD
        assert quality.label == "SD"
        assert quality.color_hint == "outline"
        assert quality.hdr is False

    def test_full_uhd_release(self) -> None:
        """Test a 4K HDR BluRay x265 release scores every bonus."""
        release = Release(
            hash="a", resolution="2160p", hdr=("HDR10",), source="bluray", codec=("x265",)
        )
        quality = score_release(release)
        assert quality.score == 145
        assert quality.level is QualityTier.UHD
        assert quality.label == "4K HDR"
        assert quality.hdr is True

    def test_fhd_web_release(self) -> None:
        """Test a 1080p web release."""
        quality = score_release(Release(hash="b", resolution="1080p", source="web"))
        assert quality.score == 85
        assert quality.level is QualityTier.FHD
        assert quality.label == "1080p"

    def test_hdr_label_only_for_uhd(self) -> None:
        """Test HDR is appended to the label only for 4K."""
        quality = score_release(Release(hash="a", resolution="1080p", hdr=("DV",)))
        assert quality.score == 95
        assert quality.label == "1080p"
        assert quality.hdr is True

    def test_color_hints(self) -> None:
        """Test color hints per tier."""
        assert score_release(Release(hash="a", resolution="2160p")).color_hint == "default"
        assert score_release(Release(hash="a", resolution="1080p")).color_hint == "default"
        assert score_release(Release(hash="a", resolution="720p")).color_hint == "secondary"

    def test_score_is_deterministic(self) -> None:
        """Test the same release always scores the same."""
        release = Release(hash="a", resolution="720p", source="hdtv", codec=("hevc",))
        assert score_release(release) == score_release(release)
        assert score_release(release).score == 65
