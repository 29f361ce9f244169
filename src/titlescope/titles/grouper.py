"""Cluster a flat release collection into title groups and sub-groups."""

from __future__ import annotations

from collections.abc import Iterable

from titlescope.models import Release
from titlescope.titles.models import TitleGroup

OTHER_SUB_GROUP = "Other"


def sub_group_key(release: Release) -> str:
    """Pick the sub-group a release belongs to within its title group.

    Series and episode releases with a known season (including season 0) go
    under "Season N"; anything else with a year goes under the year; the rest
    under "Other".
    """
    if release.is_series_like and release.season is not None:
        return f"Season {release.season}"
    if release.year is not None:
        return str(release.year)
    return OTHER_SUB_GROUP


def title_sort_key(title: str) -> tuple[str, str]:
    """Case-insensitive ordering with a case-sensitive tie-break."""
    return (title.casefold(), title)


def group_releases(releases: Iterable[Release]) -> list[TitleGroup]:
    """Group releases by title.

    Every release lands in exactly one group (keyed by ``title``, else
    ``name``, else "Unknown") and in exactly one sub-group of it. Groups are
    returned ordered by title. Member order follows input order.

    Args:
        releases: Flat collection of parsed releases. May be empty.

    Returns:
        Unranked title groups (no best member or upgrades yet).
    """
    members: dict[str, list[Release]] = {}
    sub_groups: dict[str, dict[str, list[Release]]] = {}

    for release in releases:
        key = release.display_key
        members.setdefault(key, []).append(release)
        sub_groups.setdefault(key, {}).setdefault(sub_group_key(release), []).append(release)

    groups = [
        TitleGroup(
            title=title,
            type=items[0].type,
            members=tuple(items),
            sub_groups=tuple(
                (sub_key, tuple(sub_members))
                for sub_key, sub_members in sorted(
                    sub_groups[title].items(), key=lambda item: item[0], reverse=True
                )
            ),
        )
        for title, items in members.items()
    ]
    groups.sort(key=lambda g: title_sort_key(g.title))
    return groups
