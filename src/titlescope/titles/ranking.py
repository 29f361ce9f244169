"""Best-release selection and upgrade detection."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from titlescope.models import Release
from titlescope.quality import QualityScore, has_efficient_codec, score_release
from titlescope.titles.models import TitleGroup, UpgradeCandidate, UpgradeRecommendation

# A release within this many points of the best one is surfaced as a candidate.
UPGRADE_TOLERANCE = 10

UPGRADE_REASON = "Quality improvements available"

Scorer = Callable[[Release], QualityScore]


def pick_best(members: Sequence[Release], scorer: Scorer = score_release) -> Release | None:
    """Return the highest-scoring release.

    The incumbent is only replaced on a strictly greater score, so ties go to
    the first release in ``members`` order.

    Args:
        members: Releases to choose from.
        scorer: Scoring function.

    Returns:
        The best release, or None if ``members`` is empty.
    """
    if not members:
        return None

    best = members[0]
    best_score = scorer(best).score
    for member in members[1:]:
        score = scorer(member).score
        if score > best_score:
            best = member
            best_score = score
    return best


def describe_improvements(
    candidate: Release,
    best: Release,
    scorer: Scorer = score_release,
) -> list[str]:
    """List human-readable reasons a candidate improves on the best release."""
    candidate_quality = scorer(candidate)
    best_quality = scorer(best)
    improvements: list[str] = []

    if candidate_quality.level is not best_quality.level:
        improvements.append(f"{best_quality.level.value} → {candidate_quality.level.value}")

    if candidate.resolution and best.resolution and candidate.resolution != best.resolution:
        improvements.append(f"Resolution: {best.resolution} → {candidate.resolution}")

    if candidate.hdr and not best.hdr:
        improvements.append("Adds HDR")

    if has_efficient_codec(candidate.codec) and not has_efficient_codec(best.codec):
        improvements.append("Better codec (x265/HEVC)")

    return improvements


def find_upgrade_candidates(
    best: Release,
    members: Iterable[Release],
    tolerance: int = UPGRADE_TOLERANCE,
    scorer: Scorer = score_release,
) -> list[UpgradeCandidate]:
    """Find members scoring within ``tolerance`` points of the best release.

    The best release itself (matched by hash) is never a candidate. Candidates
    with no explained improvement are still returned; use
    :func:`explained_only` to drop them.
    """
    best_score = scorer(best).score
    candidates: list[UpgradeCandidate] = []

    for member in members:
        if member.hash == best.hash:
            continue
        quality = scorer(member)
        if quality.score >= best_score - tolerance:
            candidates.append(
                UpgradeCandidate(
                    release=member,
                    quality=quality,
                    score_diff=quality.score - best_score,
                    improvements=tuple(describe_improvements(member, best, scorer)),
                )
            )

    return candidates


def explained_only(candidates: Iterable[UpgradeCandidate]) -> list[UpgradeCandidate]:
    """Keep only candidates with at least one explained improvement."""
    return [candidate for candidate in candidates if candidate.is_explained]


def rank_group(
    group: TitleGroup,
    tolerance: int = UPGRADE_TOLERANCE,
    scorer: Scorer = score_release,
) -> TitleGroup:
    """Return a copy of ``group`` with best member and upgrade candidates filled in."""
    best = pick_best(group.members, scorer)
    if best is None:
        return group

    candidates = find_upgrade_candidates(best, group.members, tolerance, scorer)
    return group.model_copy(
        update={"best_member": best, "upgrade_candidates": tuple(candidates)}
    )


def rank_groups(
    groups: Iterable[TitleGroup],
    tolerance: int = UPGRADE_TOLERANCE,
    scorer: Scorer = score_release,
) -> list[TitleGroup]:
    """Rank every group, preserving order."""
    return [rank_group(group, tolerance, scorer) for group in groups]


def recommend_upgrades(groups: Iterable[TitleGroup]) -> list[UpgradeRecommendation]:
    """Build upgrade recommendations for ranked groups.

    A group is recommended when at least one of its candidates has an
    explained improvement. Recommendations with more potential upgrades come
    first.
    """
    recommendations: list[UpgradeRecommendation] = []

    for group in groups:
        if group.best_member is None or not group.upgrade_candidates:
            continue
        if not any(candidate.is_explained for candidate in group.upgrade_candidates):
            continue

        recommendations.append(
            UpgradeRecommendation(
                title=group.title,
                type=group.type,
                current_best=group.best_member,
                potential_upgrades=group.upgrade_candidates,
                reason=UPGRADE_REASON,
            )
        )

    recommendations.sort(key=lambda r: len(r.potential_upgrades), reverse=True)
    return recommendations
