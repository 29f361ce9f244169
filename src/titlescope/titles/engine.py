"""Memoizing front end for the ranking pipeline.

Grouping and scoring only rerun when a different release collection object
is passed in (or the tolerance changes). Expansion changes only rerun the
flattener over the cached groups.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from titlescope.models import Release
from titlescope.statistics import LibraryAnalytics, compute_analytics
from titlescope.titles.flatten import Row, count_rows, iter_rows
from titlescope.titles.gaps import EpisodeGapAnalyzer
from titlescope.titles.grouper import group_releases
from titlescope.titles.models import GapReport, TitleGroup, UpgradeRecommendation
from titlescope.titles.ranking import UPGRADE_TOLERANCE, rank_groups, recommend_upgrades


@dataclass(frozen=True)
class TitlesSnapshot:
    """Everything derived from one release collection."""

    releases: tuple[Release, ...]
    groups: tuple[TitleGroup, ...]
    recommendations: tuple[UpgradeRecommendation, ...]
    gaps: GapReport
    analytics: LibraryAnalytics


def build_snapshot(
    releases: Sequence[Release],
    tolerance: int = UPGRADE_TOLERANCE,
    gap_analyzer: EpisodeGapAnalyzer | None = None,
) -> TitlesSnapshot:
    """Run the full pipeline over a release collection."""
    groups = rank_groups(group_releases(releases), tolerance)
    gaps = (gap_analyzer or EpisodeGapAnalyzer()).analyze(groups)
    return TitlesSnapshot(
        releases=tuple(releases),
        groups=tuple(groups),
        recommendations=tuple(recommend_upgrades(groups)),
        gaps=gaps,
        analytics=compute_analytics(releases, groups, gaps),
    )


class TitlesEngine:
    """Cache the last snapshot, keyed by the identity of the release collection."""

    def __init__(
        self,
        tolerance: int = UPGRADE_TOLERANCE,
        gap_analyzer: EpisodeGapAnalyzer | None = None,
    ) -> None:
        self.tolerance = tolerance
        self.gap_analyzer = gap_analyzer or EpisodeGapAnalyzer()
        self._source: Sequence[Release] | None = None
        self._source_tolerance: int | None = None
        self._snapshot: TitlesSnapshot | None = None
        self.builds = 0

    def snapshot(self, releases: Sequence[Release]) -> TitlesSnapshot:
        """Get the snapshot for ``releases``, rebuilding only for a new collection object."""
        if (
            self._snapshot is not None
            and self._source is releases
            and self._source_tolerance == self.tolerance
        ):
            return self._snapshot

        self._snapshot = build_snapshot(releases, self.tolerance, self.gap_analyzer)
        self._source = releases
        self._source_tolerance = self.tolerance
        self.builds += 1
        return self._snapshot

    def rows(self, releases: Sequence[Release], expanded: frozenset[str]) -> Iterator[Row]:
        """Visible rows for the current expansion state."""
        return iter_rows(self.snapshot(releases).groups, expanded)

    def row_count(self, releases: Sequence[Release], expanded: frozenset[str]) -> int:
        """Number of visible rows for the current expansion state."""
        return count_rows(self.snapshot(releases).groups, expanded)

    def invalidate(self) -> None:
        """Drop the cached snapshot."""
        self._source = None
        self._source_tolerance = None
        self._snapshot = None
