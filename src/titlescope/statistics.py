"""Analytics over a release collection.

Rolls up sizes and counts by type, quality tier and source, the series count,
the approximate missing-episode total and the completion rate, and prints a
summary to a Rich console.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from titlescope.quality import score_release
from titlescope.titles.gaps import EpisodeGapAnalyzer
from titlescope.titles.grouper import group_releases

if TYPE_CHECKING:
    from rich.console import Console

    from titlescope.models import Release
    from titlescope.titles.models import GapReport, TitleGroup


@dataclass
class LibraryAnalytics:
    """Totals for a release collection."""

    total_size: int = 0
    total_count: int = 0
    completed_count: int = 0
    type_counts: dict[str, int] = field(default_factory=dict)
    quality_counts: dict[str, int] = field(default_factory=dict)
    source_counts: dict[str, int] = field(default_factory=dict)
    series_count: int = 0
    missing_episodes: int = 0

    @property
    def completion_rate(self) -> float:
        """Percentage of releases not in an error or missing-files state."""
        return calculate_completion_rate(self.completed_count, self.total_count)

    def top_types(self, limit: int = 2) -> list[tuple[str, int]]:
        """Most common release types, largest first."""
        return Counter(self.type_counts).most_common(limit)

    def print_summary(self, console: Console) -> None:
        """Print a summary of the analytics to the console.

        Args:
            console: Rich console for output.
        """
        from titlescope.output import format_size

        console.print()
        console.print("[bold]Library Summary[/bold]")
        console.print()
        console.print(f"[bold]Total size:[/bold] {format_size(self.total_size)}")
        console.print(f"[bold]Releases:[/bold] {self.total_count}")
        console.print(
            f"[bold]Completion:[/bold] {self.completion_rate:.1f}% "
            f"({self.completed_count} of {self.total_count} complete)"
        )

        if self.type_counts:
            console.print()
            console.print("[dim]By type:[/dim]")
            for name, count in Counter(self.type_counts).most_common():
                console.print(f"  {name}: {count}")

        if self.quality_counts:
            console.print()
            console.print("[dim]By quality:[/dim]")
            for name, count in Counter(self.quality_counts).most_common():
                console.print(f"  {name}: {count}")

        if self.source_counts:
            console.print()
            console.print("[dim]By source:[/dim]")
            for name, count in Counter(self.source_counts).most_common():
                console.print(f"  {name}: {count}")

        console.print()
        console.print(f"[bold]Series:[/bold] {self.series_count}")
        console.print(f"[bold]Missing episodes:[/bold] {self.missing_episodes}")
        console.print(
            "[dim]Missing episodes are estimated from gaps between episode 1 and the "
            "highest episode seen per series.[/dim]"
        )


def calculate_completion_rate(completed: int, total: int) -> float:
    """Calculate the completion rate.

    Args:
        completed: Releases in a healthy state.
        total: All releases.

    Returns:
        Completion percentage (0-100). An empty collection gives 0.
    """
    if total == 0:
        return 0.0
    return (completed / total) * 100


def compute_analytics(
    releases: Sequence[Release],
    groups: Sequence[TitleGroup] | None = None,
    gap_report: GapReport | None = None,
) -> LibraryAnalytics:
    """Compute analytics for a release collection.

    Args:
        releases: The full release collection.
        groups: Title groups for ``releases``. Grouped here if not given.
        gap_report: Gap report for ``groups``. Analysed here if not given.

    Returns:
        Aggregated analytics.
    """
    if gap_report is None:
        if groups is None:
            groups = group_releases(releases)
        gap_report = EpisodeGapAnalyzer().analyze(groups)

    type_counts: Counter[str] = Counter()
    quality_counts: Counter[str] = Counter()
    source_counts: Counter[str] = Counter()
    total_size = 0
    completed = 0

    for release in releases:
        total_size += release.size
        type_counts[release.type] += 1
        quality_counts[score_release(release).level.value] += 1
        if release.source:
            source_counts[release.source] += 1
        if release.is_complete:
            completed += 1

    return LibraryAnalytics(
        total_size=total_size,
        total_count=len(releases),
        completed_count=completed,
        type_counts=dict(type_counts),
        quality_counts=dict(quality_counts),
        source_counts=dict(source_counts),
        series_count=gap_report.series_count,
        missing_episodes=gap_report.total_missing,
    )
