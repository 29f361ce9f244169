"""Quality scoring for parsed releases.

The score is a plain integer built from a resolution tier plus bonuses for
HDR, source and codec. It only has meaning relative to other scores produced
here: higher means better perceived technical quality.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from titlescope.models import Release

# Tier base scores
UHD_BASE = 100
FHD_BASE = 75
HD_BASE = 50
SD_BASE = 25

HDR_BONUS = 20
CODEC_BONUS = 10

# Checked in order, first match wins
SOURCE_BONUSES: tuple[tuple[tuple[str, ...], int], ...] = (
    (("bluray", "bd"), 15),
    (("web",), 10),
    (("hdtv",), 5),
)

EFFICIENT_CODECS = ("x265", "hevc")


class QualityTier(str, Enum):
    """Resolution tier. Compare tiers by ``rank`` (SD < HD < FHD < UHD)."""

    SD = "SD"
    HD = "HD"
    FHD = "FHD"
    UHD = "UHD"

    @property
    def rank(self) -> int:
        """Position in the tier ordering (SD is 0)."""
        return _TIER_ORDER.index(self)


_TIER_ORDER = (QualityTier.SD, QualityTier.HD, QualityTier.FHD, QualityTier.UHD)

# tier -> (base score, label, color hint)
_TIER_INFO: dict[QualityTier, tuple[int, str, str]] = {
    QualityTier.UHD: (UHD_BASE, "4K", "default"),
    QualityTier.FHD: (FHD_BASE, "1080p", "default"),
    QualityTier.HD: (HD_BASE, "720p", "secondary"),
    QualityTier.SD: (SD_BASE, "SD", "outline"),
}


class QualityScore(BaseModel):
    """Derived quality of a single release."""

    model_config = ConfigDict(frozen=True)

    score: int
    level: QualityTier
    hdr: bool = False
    label: str
    color_hint: str


def resolution_tier(resolution: str | None) -> QualityTier:
    """Classify a resolution string into a tier (case-insensitive substring match)."""
    value = (resolution or "").lower()
    if "2160p" in value or "4k" in value:
        return QualityTier.UHD
    if "1080p" in value or "fhd" in value:
        return QualityTier.FHD
    if "720p" in value or "hd" in value:
        return QualityTier.HD
    return QualityTier.SD


def source_bonus(source: str | None) -> int:
    """Bonus for the release source."""
    value = (source or "").lower()
    if not value:
        return 0
    for needles, bonus in SOURCE_BONUSES:
        if any(needle in value for needle in needles):
            return bonus
    return 0


def has_efficient_codec(codecs: tuple[str, ...] | list[str]) -> bool:
    """Check if any codec entry is x265/HEVC."""
    return any(
        needle in codec.lower() for codec in codecs for needle in EFFICIENT_CODECS
    )


def score_release(release: Release) -> QualityScore:
    """Score a release.

    Total over all inputs: a release with no resolution, source or codec
    information scores the SD floor (25).

    Args:
        release: The release to score.

    Returns:
        Score, tier, label and display color hint.
    """
    tier = resolution_tier(release.resolution)
    base, label, color = _TIER_INFO[tier]
    score = base

    has_hdr = len(release.hdr) > 0
    if has_hdr:
        score += HDR_BONUS
        if tier is QualityTier.UHD:
            label += " HDR"

    score += source_bonus(release.source)

    if has_efficient_codec(release.codec):
        score += CODEC_BONUS

    return QualityScore(score=score, level=tier, hdr=has_hdr, label=label, color_hint=color)
