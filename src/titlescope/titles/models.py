"""Data models for grouped titles, upgrades and episode gaps."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from titlescope.models import Release
from titlescope.quality import QualityScore

SUB_GROUP_SEPARATOR = "::"


def sub_group_id(title: str, sub_group_key: str) -> str:
    """Build the expansion id of a sub-group (``"{title}::{key}"``)."""
    return f"{title}{SUB_GROUP_SEPARATOR}{sub_group_key}"


class UpgradeCandidate(BaseModel):
    """A non-best release scoring close enough to the best to be worth a look."""

    model_config = ConfigDict(frozen=True)

    release: Release
    quality: QualityScore
    score_diff: int
    improvements: tuple[str, ...] = ()

    @property
    def is_explained(self) -> bool:
        """Check if at least one concrete improvement was found."""
        return len(self.improvements) > 0


class TitleGroup(BaseModel):
    """All releases believed to be the same underlying work."""

    model_config = ConfigDict(frozen=True)

    title: str
    type: str
    members: tuple[Release, ...]
    # (key, members) pairs, newest key first
    sub_groups: tuple[tuple[str, tuple[Release, ...]], ...] = ()
    best_member: Release | None = None
    upgrade_candidates: tuple[UpgradeCandidate, ...] = ()

    @property
    def id(self) -> str:
        """Expansion id of the group header."""
        return self.title

    @property
    def total_size(self) -> int:
        """Sum of member sizes in bytes."""
        return sum(member.size for member in self.members)

    @property
    def member_count(self) -> int:
        """Number of releases in the group."""
        return len(self.members)

    @property
    def upgrades(self) -> tuple[Release, ...]:
        """Releases of the upgrade candidates."""
        return tuple(candidate.release for candidate in self.upgrade_candidates)

    @property
    def sub_group_keys(self) -> tuple[str, ...]:
        """Sub-group keys in stored order."""
        return tuple(key for key, _ in self.sub_groups)

    def sub_group(self, key: str) -> tuple[Release, ...]:
        """Members of one sub-group (empty for an unknown key)."""
        for sub_key, members in self.sub_groups:
            if sub_key == key:
                return members
        return ()

    def sorted_sub_group_keys(self) -> list[str]:
        """Sub-group keys in display order (descending string compare, newest first)."""
        return sorted(self.sub_group_keys, reverse=True)

    def sub_group_id(self, key: str) -> str:
        """Expansion id of one of this group's sub-groups."""
        return sub_group_id(self.title, key)

    def sub_group_size(self, key: str) -> int:
        """Sum of sizes of one sub-group."""
        return sum(member.size for member in self.sub_group(key))


class UpgradeRecommendation(BaseModel):
    """A title whose current best release has explained upgrade options."""

    model_config = ConfigDict(frozen=True)

    title: str
    type: str
    current_best: Release
    potential_upgrades: tuple[UpgradeCandidate, ...]
    reason: str


# ============================================================================
# Episode Gap Models
# ============================================================================


class SeriesGap(BaseModel):
    """Known and missing episode numbers for a single series title.

    Missing episodes are derived from the range 1..max(known episode), so this
    is an approximation: episodes past the highest one seen are never counted
    and season numbers are not checked for holes.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    episodes: frozenset[int] = frozenset()
    seasons: frozenset[int] = frozenset()
    missing_episodes: tuple[int, ...] = ()

    @property
    def missing_count(self) -> int:
        """Number of missing episode numbers."""
        return len(self.missing_episodes)

    @property
    def known_count(self) -> int:
        """Number of distinct known episode numbers."""
        return len(self.episodes)

    @property
    def has_content(self) -> bool:
        """Check if any episode or season number is known."""
        return bool(self.episodes or self.seasons)

    @property
    def completion_percent(self) -> float:
        """Share of the known episode range that is present."""
        present = sum(1 for episode in self.episodes if episode >= 1)
        expected = present + self.missing_count
        if expected == 0:
            return 100.0
        return (present / expected) * 100


class GapReport(BaseModel):
    """Episode gaps across every series title."""

    model_config = ConfigDict(frozen=True)

    series: tuple[SeriesGap, ...] = ()

    @property
    def total_missing(self) -> int:
        """Total number of missing episodes across all series."""
        return sum(gap.missing_count for gap in self.series)

    @property
    def series_count(self) -> int:
        """Number of series titles with at least one known episode or season."""
        return sum(1 for gap in self.series if gap.has_content)

    @property
    def series_with_gaps(self) -> list[SeriesGap]:
        """Series with at least one missing episode, most missing first."""
        gaps = [gap for gap in self.series if gap.missing_count > 0]
        gaps.sort(key=lambda g: g.missing_count, reverse=True)
        return gaps
