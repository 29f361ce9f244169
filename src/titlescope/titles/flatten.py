"""Flatten the title → sub-group → release hierarchy into display rows.

The caller owns the expansion state, an immutable set of node ids: a group's
id is its title and a sub-group's id is ``"{title}::{key}"``. Rows are yielded
lazily so a windowed list only pulls what it renders.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import ClassVar, Literal

from titlescope.models import Release
from titlescope.titles.models import SUB_GROUP_SEPARATOR, TitleGroup

RowKind = Literal["group", "subgroup", "leaf"]

GROUP_ROW_HEIGHT = 80
SUBGROUP_ROW_HEIGHT = 60
LEAF_ROW_HEIGHT = 120

DEFAULT_ROW_HEIGHTS: dict[tuple[str, int], int] = {
    ("group", 0): GROUP_ROW_HEIGHT,
    ("subgroup", 1): SUBGROUP_ROW_HEIGHT,
    ("leaf", 2): LEAF_ROW_HEIGHT,
}


@dataclass(frozen=True)
class GroupHeaderRow:
    """Header of a title group."""

    kind: ClassVar[RowKind] = "group"
    depth: ClassVar[int] = 0

    group: TitleGroup

    @property
    def row_id(self) -> str:
        return self.group.id


@dataclass(frozen=True)
class SubGroupHeaderRow:
    """Header of a season/year sub-group."""

    kind: ClassVar[RowKind] = "subgroup"
    depth: ClassVar[int] = 1

    group: TitleGroup
    sub_group_key: str
    members: tuple[Release, ...] = field(default=())

    @property
    def row_id(self) -> str:
        return self.group.sub_group_id(self.sub_group_key)


@dataclass(frozen=True)
class LeafRow:
    """A single release."""

    kind: ClassVar[RowKind] = "leaf"
    depth: ClassVar[int] = 2

    release: Release
    group_title: str
    sub_group_key: str

    @property
    def row_id(self) -> str:
        return SUB_GROUP_SEPARATOR.join((self.group_title, self.sub_group_key, self.release.hash))


Row = GroupHeaderRow | SubGroupHeaderRow | LeafRow


def iter_rows(groups: Iterable[TitleGroup], expanded: frozenset[str] | set[str]) -> Iterator[Row]:
    """Yield the visible rows in display order.

    Every group yields its header. Sub-group headers follow only when the
    group id is expanded, ordered by key descending. Releases of a sub-group
    follow only when its composite id is expanded too.

    Args:
        groups: Title groups in display order.
        expanded: Expanded node ids. Never modified.

    Yields:
        Display rows.
    """
    for group in groups:
        yield GroupHeaderRow(group)

        if group.id not in expanded:
            continue

        for key in group.sorted_sub_group_keys():
            members = group.sub_group(key)
            yield SubGroupHeaderRow(group, key, members)

            if group.sub_group_id(key) not in expanded:
                continue

            for release in members:
                yield LeafRow(release, group.title, key)


def count_rows(groups: Iterable[TitleGroup], expanded: frozenset[str] | set[str]) -> int:
    """Number of rows :func:`iter_rows` would yield, without building them."""
    total = 0
    for group in groups:
        total += 1
        if group.id not in expanded:
            continue
        for key, members in group.sub_groups:
            total += 1
            if group.sub_group_id(key) in expanded:
                total += len(members)
    return total


def toggle_expanded(expanded: frozenset[str], node_id: str) -> frozenset[str]:
    """Return a new expansion set with ``node_id`` toggled.

    Collapsing a node also collapses every descendant (ids prefixed with
    ``"{node_id}::"``), so leaves can't reappear under a closed parent.
    """
    if node_id in expanded:
        prefix = f"{node_id}{SUB_GROUP_SEPARATOR}"
        return frozenset(
            other for other in expanded if other != node_id and not other.startswith(prefix)
        )
    return expanded | {node_id}


def expand_all(groups: Iterable[TitleGroup]) -> frozenset[str]:
    """Expansion set that opens every group and sub-group."""
    ids: set[str] = set()
    for group in groups:
        ids.add(group.id)
        ids.update(group.sub_group_id(key) for key in group.sub_group_keys)
    return frozenset(ids)


def row_height_hint(
    kind: str,
    depth: int,
    hints: Mapping[tuple[str, int], int] | None = None,
) -> int:
    """Estimated pixel height of a row, from its kind and depth only.

    Args:
        kind: Row kind ("group", "subgroup" or "leaf").
        depth: Row depth.
        hints: Overrides keyed by (kind, depth).

    Returns:
        Height hint. Unknown combinations fall back to the leaf height.
    """
    table = {**DEFAULT_ROW_HEIGHTS, **(hints or {})}
    return table.get((kind, depth), LEAF_ROW_HEIGHT)
