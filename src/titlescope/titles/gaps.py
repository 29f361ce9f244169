"""Missing-episode detection for series titles.

Only the episode numbers seen in the release collection are known, so the
count is an approximation: for each series title, every integer in
1..max(known episodes) that was not seen counts as missing. Episodes past the
highest one seen and missing seasons are not detected.
"""

from __future__ import annotations

from collections.abc import Iterable

from titlescope.titles.models import GapReport, SeriesGap, TitleGroup


def find_missing_episodes(episodes: Iterable[int]) -> list[int]:
    """Return the episode numbers missing from 1..max(episodes).

    Args:
        episodes: Known episode numbers (duplicates allowed).

    Returns:
        Sorted missing numbers. Empty when nothing is known or nothing is missing.
    """
    known = set(episodes)
    if not known:
        return []
    highest = max(known)
    return [number for number in range(1, highest + 1) if number not in known]


class EpisodeGapAnalyzer:
    """Find missing episodes across the series titles of a grouped collection."""

    def __init__(self, excluded_titles: list[str] | None = None) -> None:
        """Initialize the analyzer.

        Args:
            excluded_titles: Series titles to skip (case-insensitive).
        """
        self.excluded_titles = {t.lower() for t in (excluded_titles or [])}

    def analyze(self, groups: Iterable[TitleGroup]) -> GapReport:
        """Build a gap report.

        Each title group is analysed on its own; series titles never share
        episode numbers. Releases without a parsed title are ignored. Groups
        left without any series or episode release are skipped.

        Args:
            groups: Title groups from the grouper.

        Returns:
            Report with one entry per series title.
        """
        series: list[SeriesGap] = []

        for group in groups:
            if group.title.lower() in self.excluded_titles:
                continue
            gap = self._analyze_group(group)
            if gap is not None:
                series.append(gap)

        return GapReport(series=tuple(series))

    def _analyze_group(self, group: TitleGroup) -> SeriesGap | None:
        """Collect known episode/season numbers of one group."""
        series_members = [m for m in group.members if m.is_series_like and m.title]
        if not series_members:
            return None

        episodes = {m.episode for m in series_members if m.episode is not None}
        seasons = {m.season for m in series_members if m.season is not None}

        return SeriesGap(
            title=group.title,
            episodes=frozenset(episodes),
            seasons=frozenset(seasons),
            missing_episodes=tuple(find_missing_episodes(episodes)),
        )


def analyze_gaps(groups: Iterable[TitleGroup]) -> GapReport:
    """Analyse gaps with default settings."""
    return EpisodeGapAnalyzer().analyze(groups)
