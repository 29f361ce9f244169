"""Grouping, ranking, gap detection and flattening of parsed releases.

The memoizing pipeline lives in :mod:`titlescope.titles.engine`.
"""

from titlescope.titles.actions import (
    ActionHandler,
    TorrentAction,
    UnknownActionError,
    dispatch_action,
    dispatch_category_change,
    toggle_selection,
)
from titlescope.titles.filters import (
    PRESETS,
    FilterOptions,
    TitleFilter,
    apply_filter,
    collect_filter_options,
    preset_filter,
)
from titlescope.titles.flatten import (
    GroupHeaderRow,
    LeafRow,
    Row,
    SubGroupHeaderRow,
    count_rows,
    expand_all,
    iter_rows,
    row_height_hint,
    toggle_expanded,
)
from titlescope.titles.gaps import EpisodeGapAnalyzer, analyze_gaps, find_missing_episodes
from titlescope.titles.grouper import group_releases, sub_group_key
from titlescope.titles.models import (
    GapReport,
    SeriesGap,
    TitleGroup,
    UpgradeCandidate,
    UpgradeRecommendation,
    sub_group_id,
)
from titlescope.titles.ranking import (
    UPGRADE_TOLERANCE,
    describe_improvements,
    explained_only,
    find_upgrade_candidates,
    pick_best,
    rank_group,
    rank_groups,
    recommend_upgrades,
)

__all__ = [
    # Grouping
    "group_releases",
    "sub_group_key",
    "sub_group_id",
    "TitleGroup",
    # Ranking
    "UPGRADE_TOLERANCE",
    "pick_best",
    "find_upgrade_candidates",
    "describe_improvements",
    "explained_only",
    "rank_group",
    "rank_groups",
    "recommend_upgrades",
    "UpgradeCandidate",
    "UpgradeRecommendation",
    # Gaps
    "EpisodeGapAnalyzer",
    "analyze_gaps",
    "find_missing_episodes",
    "GapReport",
    "SeriesGap",
    # Flattening
    "Row",
    "GroupHeaderRow",
    "SubGroupHeaderRow",
    "LeafRow",
    "iter_rows",
    "count_rows",
    "toggle_expanded",
    "expand_all",
    "row_height_hint",
    # Filters
    "TitleFilter",
    "FilterOptions",
    "PRESETS",
    "apply_filter",
    "collect_filter_options",
    "preset_filter",
    # Actions
    "TorrentAction",
    "ActionHandler",
    "UnknownActionError",
    "dispatch_action",
    "dispatch_category_change",
    "toggle_selection",
]
