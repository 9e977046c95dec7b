"""Priority scoring for discovered work items.

The score is a sum of independent components (type base, label bonus,
age bonus, recency bonus) minus penalties (draft, recent review). The
scorer never reads the clock or any state itself: both time and review
history come in through injected callables, so a fixed pair of stubs
makes the result fully deterministic.
"""

from collections.abc import Callable, Collection, Iterable
from datetime import datetime

from ..config import ScoringConfig
from ..models import ItemType, ScoredItem, WorkItem

DaysSince = Callable[[datetime], int]
RecentlyReviewed = Callable[[str, ItemType, int], bool]

_DEFAULT_WEIGHTS = ScoringConfig()


def label_bonus(labels: Iterable[str], weights: ScoringConfig) -> int:
    """Highest weight among matched labels, 0 when nothing matches."""
    table = {name.lower(): weight for name, weight in weights.label_weights.items()}
    matched = [table[label.lower()] for label in labels if label.lower() in table]
    return max(matched, default=0)


def age_bonus(age_days: int, weights: ScoringConfig) -> int:
    """Bonus of the highest age tier the item has reached."""
    for tier in sorted(weights.age_tiers, key=lambda t: t.min_days, reverse=True):
        if age_days >= tier.min_days:
            return tier.bonus
    return 0


def calculate_priority_score(
    item_type: ItemType | str,
    labels: Collection[str],
    created_at: datetime,
    updated_at: datetime,
    is_draft: bool,
    repo: str,
    number: int,
    *,
    days_since: DaysSince,
    recently_reviewed: RecentlyReviewed,
    weights: ScoringConfig | None = None,
) -> int:
    """Calculate the priority score for one work item.

    Args:
        item_type: Issue or pull request
        labels: Label names on the item
        created_at: Creation timestamp, passed to days_since
        updated_at: Last update timestamp, passed to days_since
        is_draft: Draft flag (only meaningful for pull requests)
        repo: Repository in owner/name form
        number: Item number
        days_since: Returns whole days elapsed since a timestamp
        recently_reviewed: Returns True if (repo, type, number) was reviewed
            within the cooldown window
        weights: Scoring weights (defaults to ScoringConfig())

    Returns:
        Integer score, higher means review sooner. May be negative.
    """
    weights = weights or _DEFAULT_WEIGHTS
    item_type = ItemType(item_type)

    score = weights.pr_base if item_type is ItemType.PR else weights.issue_base
    score += label_bonus(labels, weights)
    score += age_bonus(days_since(created_at), weights)

    if days_since(updated_at) <= weights.recency_window_days:
        score += weights.recency_bonus

    if item_type is ItemType.PR and is_draft:
        score -= weights.draft_penalty

    if recently_reviewed(repo, item_type, number):
        score -= weights.recent_review_penalty

    return score


def score_work_item(
    item: WorkItem,
    *,
    days_since: DaysSince,
    recently_reviewed: RecentlyReviewed,
    weights: ScoringConfig | None = None,
) -> int:
    """Calculate the priority score for a parsed work item."""
    return calculate_priority_score(
        item.type,
        item.labels,
        item.created_at,
        item.updated_at,
        item.is_draft,
        item.repo,
        item.number,
        days_since=days_since,
        recently_reviewed=recently_reviewed,
        weights=weights,
    )


def rank_work_items(
    items: Iterable[WorkItem],
    *,
    days_since: DaysSince,
    recently_reviewed: RecentlyReviewed,
    weights: ScoringConfig | None = None,
) -> list[ScoredItem]:
    """Score items and order them by descending score.

    Ties keep discovery order.
    """
    scored = [
        ScoredItem(
            item=item,
            score=score_work_item(
                item,
                days_since=days_since,
                recently_reviewed=recently_reviewed,
                weights=weights,
            ),
        )
        for item in items
    ]
    return sorted(scored, key=lambda s: s.score, reverse=True)
