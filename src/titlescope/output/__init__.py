"""Output formatting for grouped titles and upgrade recommendations.

Provides text, JSON and CSV renderings of engine results.
"""

from __future__ import annotations

import csv
import io
import json
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape

from titlescope.quality import score_release
from titlescope.titles.flatten import (
    GroupHeaderRow,
    LeafRow,
    SubGroupHeaderRow,
    iter_rows,
    row_height_hint,
)

if TYPE_CHECKING:
    from titlescope.models import Release
    from titlescope.titles.models import TitleGroup, UpgradeCandidate, UpgradeRecommendation


console = Console()

SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def format_size(size: int) -> str:
    """Format a byte count with binary units and two decimals ("0 B" for zero)."""
    if size <= 0:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f} {SIZE_UNITS[unit]}"


def format_date(timestamp: int) -> str:
    """Format a Unix timestamp in local time ("N/A" when unset)."""
    if not timestamp:
        return "N/A"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M")


def release_to_dict(release: Release) -> dict[str, Any]:
    """Serialize a release with its quality score."""
    quality = score_release(release)
    data = release.model_dump(mode="json", by_alias=True, exclude_none=True)
    data["quality"] = {
        "score": quality.score,
        "level": quality.level.value,
        "hdr": quality.hdr,
        "label": quality.label,
    }
    return data


def candidate_to_dict(candidate: UpgradeCandidate) -> dict[str, Any]:
    """Serialize an upgrade candidate."""
    return {
        "hash": candidate.release.hash,
        "name": candidate.release.name,
        "score": candidate.quality.score,
        "score_diff": candidate.score_diff,
        "improvements": list(candidate.improvements),
    }


class ReportFormatter(ABC):
    """Abstract base class for report formatting."""

    @abstractmethod
    def to_json(self) -> str:
        """Convert report to JSON string."""
        pass

    @abstractmethod
    def to_csv(self) -> str:
        """Convert report to CSV string."""
        pass

    @abstractmethod
    def to_text(self, verbose: bool = False) -> None:
        """Output report as formatted text to console."""
        pass

    @property
    @abstractmethod
    def report_name(self) -> str:
        """Short name used in saved file names."""

    def save_csv(self, directory: Path | None = None) -> Path:
        """Save the report as a dated CSV file and return its path."""
        filename = f"titlescope_{self.report_name}_{date.today().isoformat()}.csv"
        filepath = (directory or Path.cwd()) / filename

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            f.write(self.to_csv())

        return filepath


class TitlesReportFormatter(ReportFormatter):
    """Formatter for grouped titles."""

    report_name = "titles"

    def __init__(
        self,
        groups: Sequence[TitleGroup],
        expanded: frozenset[str] = frozenset(),
        row_heights: Mapping[tuple[str, int], int] | None = None,
    ) -> None:
        self.groups = groups
        self.expanded = expanded
        self.row_heights = row_heights

    def to_json(self) -> str:
        """Convert grouped titles to JSON string."""
        output = {
            "total_groups": len(self.groups),
            "groups": [
                {
                    "title": group.title,
                    "type": group.type,
                    "total_size": group.total_size,
                    "best": group.best_member.hash if group.best_member else None,
                    "sub_groups": {
                        key: [release_to_dict(r) for r in group.sub_group(key)]
                        for key in group.sorted_sub_group_keys()
                    },
                    "upgrades": [candidate_to_dict(c) for c in group.upgrade_candidates],
                }
                for group in self.groups
            ],
            # Visible rows in display order with their height hints
            "rows": [
                {
                    "id": row.row_id,
                    "kind": row.kind,
                    "depth": row.depth,
                    "height": row_height_hint(row.kind, row.depth, self.row_heights),
                }
                for row in iter_rows(self.groups, self.expanded)
            ],
        }
        return json.dumps(output, indent=2)

    def to_csv(self) -> str:
        """Convert grouped titles to CSV string, one row per release."""
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(
            ["Title", "Sub-group", "Name", "Hash", "Quality", "Score", "Best", "Size", "State"]
        )

        for group in self.groups:
            best_hash = group.best_member.hash if group.best_member else None
            for key in group.sorted_sub_group_keys():
                for release in group.sub_group(key):
                    quality = score_release(release)
                    writer.writerow(
                        [
                            group.title,
                            key,
                            release.name,
                            release.hash,
                            quality.label,
                            quality.score,
                            "yes" if release.hash == best_hash else "",
                            release.size,
                            release.state,
                        ]
                    )

        return output.getvalue()

    def to_text(self, verbose: bool = False) -> None:
        """Print the visible rows as an indented tree."""
        if not self.groups:
            console.print("[dim]No titles found matching your filters[/dim]")
            return

        for row in iter_rows(self.groups, self.expanded):
            if isinstance(row, GroupHeaderRow):
                group = row.group
                marker = "▾" if group.id in self.expanded else "▸"
                plural = "s" if group.member_count != 1 else ""
                best = ""
                if group.best_member is not None:
                    best = f" [green]best: {score_release(group.best_member).label}[/green]"
                console.print(
                    f"{marker} [bold]{escape(group.title)}[/bold] [dim]({group.type})[/dim] "
                    f"{group.member_count} release{plural} • {format_size(group.total_size)}{best}"
                )
            elif isinstance(row, SubGroupHeaderRow):
                marker = "▾" if row.row_id in self.expanded else "▸"
                plural = "s" if len(row.members) != 1 else ""
                size = format_size(row.group.sub_group_size(row.sub_group_key))
                console.print(
                    f"    {marker} {escape(row.sub_group_key)} "
                    f"[dim]{len(row.members)} item{plural} • {size}[/dim]"
                )
            elif isinstance(row, LeafRow):
                self._print_leaf(row.release, verbose)

    @staticmethod
    def _print_leaf(release: Release, verbose: bool) -> None:
        quality = score_release(release)
        badges = [quality.label]
        if release.source:
            badges.append(release.source)
        badges.extend(release.codec)
        badges.extend(release.hdr)
        if release.group:
            badges.append(release.group)
        console.print(
            f"        {escape(release.name)} [cyan]{escape(' · '.join(badges))}[/cyan] "
            f"[dim]{format_size(release.size)}[/dim]"
        )
        if verbose:
            console.print(
                f"          [dim]{release.hash} • {release.state or 'unknown'} • "
                f"added {format_date(release.added_on)} • score {quality.score}[/dim]"
            )


class UpgradeReportFormatter(ReportFormatter):
    """Formatter for upgrade recommendations."""

    report_name = "upgrades"

    def __init__(
        self,
        recommendations: Sequence[UpgradeRecommendation],
        explained_only: bool = True,
    ) -> None:
        self.recommendations = recommendations
        self.explained_only = explained_only

    def _candidates(self, recommendation: UpgradeRecommendation) -> list[UpgradeCandidate]:
        if self.explained_only:
            return [c for c in recommendation.potential_upgrades if c.is_explained]
        return list(recommendation.potential_upgrades)

    def to_json(self) -> str:
        """Convert recommendations to JSON string."""
        output = {
            "total": len(self.recommendations),
            "recommendations": [
                {
                    "title": rec.title,
                    "type": rec.type,
                    "reason": rec.reason,
                    "current_best": release_to_dict(rec.current_best),
                    "upgrades": [candidate_to_dict(c) for c in self._candidates(rec)],
                }
                for rec in self.recommendations
            ],
        }
        return json.dumps(output, indent=2)

    def to_csv(self) -> str:
        """Convert recommendations to CSV string, one row per candidate."""
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(["Title", "Current Best", "Candidate", "Score Diff", "Improvements"])

        for rec in self.recommendations:
            for candidate in self._candidates(rec):
                writer.writerow(
                    [
                        rec.title,
                        rec.current_best.name,
                        candidate.release.name,
                        candidate.score_diff,
                        "; ".join(candidate.improvements),
                    ]
                )

        return output.getvalue()

    def to_text(self, verbose: bool = False) -> None:
        """Output recommendations as formatted text."""
        console.print()
        console.print(
            f"[bold blue]Upgrade Recommendations ({len(self.recommendations)} titles)[/bold blue]"
        )
        console.print()

        if not self.recommendations:
            console.print("[green]No upgrade recommendations found. Your collection is up to date![/green]")
            return

        for rec in self.recommendations:
            best_quality = score_release(rec.current_best)
            console.print(f"[bold]{escape(rec.title)}[/bold] [dim]{rec.reason}[/dim]")
            console.print(
                f"  Current: {escape(rec.current_best.name)} "
                f"[dim]({best_quality.label}, score {best_quality.score})[/dim]"
            )

            candidates = self._candidates(rec)
            max_display = 5 if not verbose else len(candidates)
            for candidate in candidates[:max_display]:
                reasons = ", ".join(candidate.improvements) or "similar quality"
                console.print(
                    f"  [yellow]↑[/yellow] {escape(candidate.release.name)} "
                    f"[dim]({candidate.score_diff:+d})[/dim] {escape(reasons)}"
                )

            remaining = len(candidates) - max_display
            if remaining > 0:
                console.print(f"    [dim]... and {remaining} more[/dim]")

            console.print()
