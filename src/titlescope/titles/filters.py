"""Release filters, filter presets and filter picker options.

Mirrors the filter object accepted by the titles endpoint so a snapshot
loaded from disk can be narrowed the same way the service would do it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from titlescope.models import Release

# Value meaning "no constraint on this field"
ALL = "all"

FILTER_KEYS = ("type", "source", "resolution", "codec", "audio", "group", "category", "year", "search")


class TitleFilter(BaseModel):
    """Constraints on a release collection. None means unconstrained."""

    model_config = ConfigDict(frozen=True)

    type: str | None = None
    source: str | None = None
    resolution: str | None = None
    codec: str | None = None
    audio: str | None = None
    group: str | None = None
    category: str | None = None
    year: int | None = None
    search: str | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> TitleFilter:
        """Build a filter, dropping unknown keys, empty values and "all"."""
        cleaned: dict[str, Any] = {}
        for key, value in (values or {}).items():
            if key not in FILTER_KEYS or value is None:
                continue
            if isinstance(value, str) and (not value.strip() or value.strip().lower() == ALL):
                continue
            if key == "year":
                try:
                    value = int(value)
                except (TypeError, ValueError):
                    continue
                if value == 0:
                    continue
            cleaned[key] = value
        return cls.model_validate(cleaned)

    def to_params(self) -> dict[str, Any]:
        """Constrained fields only, for the endpoint's JSON filter parameter."""
        return self.model_dump(exclude_none=True)

    @property
    def active_count(self) -> int:
        """Number of constrained fields."""
        return len(self.to_params())

    @property
    def is_empty(self) -> bool:
        """Check if no field is constrained."""
        return self.active_count == 0

    def matches(self, release: Release) -> bool:
        """Check if a release satisfies every constraint."""
        if not _equals(self.type, release.type):
            return False
        if not _equals(self.source, release.source):
            return False
        if not _equals(self.resolution, release.resolution):
            return False
        if self.codec is not None and not _any_equals(self.codec, release.codec):
            return False
        if self.audio is not None and not _any_equals(self.audio, release.audio):
            return False
        if not _equals(self.group, release.group):
            return False
        if not _equals(self.category, release.category):
            return False
        if self.year is not None and release.year != self.year:
            return False
        if self.search is not None:
            needle = self.search.lower()
            haystacks = (release.name, release.title or "", release.group or "")
            if not any(needle in h.lower() for h in haystacks):
                return False
        return True


def _equals(expected: str | None, actual: str | None) -> bool:
    if expected is None:
        return True
    return (actual or "").lower() == expected.lower()


def _any_equals(expected: str, values: Iterable[str]) -> bool:
    return any(value.lower() == expected.lower() for value in values)


PRESETS: dict[str, TitleFilter] = {
    "recent-4k": TitleFilter(resolution="2160p", type="movie"),
    "incomplete-series": TitleFilter(type="episode"),
    "high-quality": TitleFilter(resolution="1080p", source="bluray"),
    "new-releases": TitleFilter(),
}


def preset_filter(name: str) -> TitleFilter:
    """Look up a named preset. Unknown names give an empty filter."""
    return PRESETS.get(name, TitleFilter())


def sort_newest_first(releases: Iterable[Release]) -> list[Release]:
    """Order releases by ``added_on``, newest first (stable)."""
    return sorted(releases, key=lambda r: r.added_on, reverse=True)


def apply_filter(releases: Iterable[Release], title_filter: TitleFilter | None = None) -> list[Release]:
    """Keep matching releases, newest first.

    Args:
        releases: Releases to narrow.
        title_filter: Constraints. None or an empty filter keeps everything.

    Returns:
        Matching releases ordered by ``added_on`` descending.
    """
    if title_filter is None or title_filter.is_empty:
        return sort_newest_first(releases)
    return sort_newest_first(r for r in releases if title_filter.matches(r))


class FilterOptions(BaseModel):
    """Distinct values available to each filter picker."""

    types: list[str] = []
    sources: list[str] = []
    resolutions: list[str] = []
    groups: list[str] = []
    years: list[int] = []


def collect_filter_options(releases: Iterable[Release]) -> FilterOptions:
    """Collect sorted distinct values for the filter pickers (years newest first)."""
    types: set[str] = set()
    sources: set[str] = set()
    resolutions: set[str] = set()
    groups: set[str] = set()
    years: set[int] = set()

    for release in releases:
        if release.type:
            types.add(release.type)
        if release.source:
            sources.add(release.source)
        if release.resolution:
            resolutions.add(release.resolution)
        if release.group:
            groups.add(release.group)
        if release.year:
            years.add(release.year)

    return FilterOptions(
        types=sorted(types),
        sources=sorted(sources),
        resolutions=sorted(resolutions),
        groups=sorted(groups),
        years=sorted(years, reverse=True),
    )
