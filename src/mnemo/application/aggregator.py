"""
Aggregator for review statistics and due queues.

Classifies items (each with its latest scheduling state, possibly absent) into
new / learning / review buckets, counts due items, and builds the due queue.
Pure data transformation: the storage layer hands over a materialized list.

Due queue order:
1. Never-reviewed items, in input order
2. Reviewed items by next_review ascending (earliest due first), ties in input order
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from mnemo.application.scheduler import Clock, is_due, utc_now
from mnemo.domain.constants import LEARNING_REPETITIONS_THRESHOLD
from mnemo.domain.errors import InvalidLimitError
from mnemo.domain.review.models import ReviewState, StudyItem

logger = logging.getLogger(__name__)


class ItemStatus(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"


@dataclass
class ReviewStats:
    """
    Counts over a set of items.

    new + learning + review == total. due is counted independently: an item can
    be learning (or review) and due at the same time.
    """

    total: int = 0
    new: int = 0
    learning: int = 0
    review: int = 0
    due: int = 0


@dataclass(frozen=True)
class DueItem:
    """An item that is due, with its latest state (None for never-reviewed items)."""

    item_id: str
    deck_id: str
    latest_state: ReviewState | None = None


@dataclass
class ReviewSummary:
    """Result of summarize()."""

    stats: ReviewStats
    due_queue: list[DueItem] = field(default_factory=list)


def classify(item: StudyItem) -> ItemStatus:
    state = item.latest_state
    if state is None:
        return ItemStatus.NEW
    if state.repetitions < LEARNING_REPETITIONS_THRESHOLD:
        return ItemStatus.LEARNING
    return ItemStatus.REVIEW


def item_is_due(item: StudyItem, now: datetime) -> bool:
    """Never-reviewed items are always due."""
    if item.latest_state is None:
        return True
    return is_due(item.latest_state.next_review, now)


def validate_limit(limit: object) -> int | None:
    """
    Accept None (no truncation) or a positive integer.

    Raises:
        InvalidLimitError: For zero, negative, or non-integer limits.
    """
    if limit is None:
        return None
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidLimitError(limit)
    return limit


def _filter_deck(items: Iterable[StudyItem], deck_filter: str | None) -> list[StudyItem]:
    if deck_filter is None:
        return list(items)
    return [item for item in items if item.deck_id == deck_filter]


def _due_order_key(item: StudyItem) -> tuple:
    if item.latest_state is None:
        return (0,)
    return (1, item.latest_state.next_review)


def compute_stats(
    items: Iterable[StudyItem],
    now: datetime,
    deck_filter: str | None = None,
) -> ReviewStats:
    """
    Count items per status, plus due items.

    Args:
        items: Items with their latest state attached.
        now: Reference time for the due check.
        deck_filter: If given, items outside this deck are excluded first.
    """
    stats = ReviewStats()

    for item in _filter_deck(items, deck_filter):
        stats.total += 1

        status = classify(item)
        if status is ItemStatus.NEW:
            stats.new += 1
        elif status is ItemStatus.LEARNING:
            stats.learning += 1
        else:
            stats.review += 1

        if item_is_due(item, now):
            stats.due += 1

    return stats


def build_due_queue(
    items: Iterable[StudyItem],
    now: datetime,
    deck_filter: str | None = None,
    limit: int | None = None,
) -> list[DueItem]:
    """
    Select due items, earliest due first, capped at `limit`.

    Raises:
        InvalidLimitError: If limit is not None and not a positive integer.
    """
    limit = validate_limit(limit)

    due = [item for item in _filter_deck(items, deck_filter) if item_is_due(item, now)]
    # sorted() is stable, so ties keep input order
    due = sorted(due, key=_due_order_key)

    if limit is not None:
        due = due[:limit]

    return [DueItem(item.item_id, item.deck_id, item.latest_state) for item in due]


def summarize(
    items: Iterable[StudyItem],
    now: datetime,
    deck_filter: str | None = None,
    limit: int | None = None,
) -> ReviewSummary:
    """
    Compute stats and the due queue in one pass over the input.

    Args:
        items: Items with their latest state attached.
        now: Reference time for the due check.
        deck_filter: If given, only items in this deck are considered.
        limit: Maximum due-queue length; None for no cap.

    Returns:
        ReviewSummary. Empty input yields all-zero stats and an empty queue.

    Raises:
        InvalidLimitError: If limit is not None and not a positive integer.
    """
    limit = validate_limit(limit)
    selected = _filter_deck(items, deck_filter)

    stats = compute_stats(selected, now)
    queue = build_due_queue(selected, now, limit=limit)

    logger.debug(
        f"Summarized {stats.total} items (deck={deck_filter}): "
        f"new={stats.new} learning={stats.learning} review={stats.review} "
        f"due={stats.due} queued={len(queue)}"
    )
    return ReviewSummary(stats=stats, due_queue=queue)


class Aggregator:
    """
    Stats and due-queue builder bound to a clock.

    Stateless and side-effect free.
    """

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or utc_now

    def stats(self, items: Iterable[StudyItem], deck_filter: str | None = None) -> ReviewStats:
        return compute_stats(items, self._clock(), deck_filter)

    def due_queue(
        self,
        items: Iterable[StudyItem],
        deck_filter: str | None = None,
        limit: int | None = None,
    ) -> list[DueItem]:
        return build_due_queue(items, self._clock(), deck_filter, limit)

    def summarize(
        self,
        items: Iterable[StudyItem],
        deck_filter: str | None = None,
        limit: int | None = None,
    ) -> ReviewSummary:
        return summarize(items, self._clock(), deck_filter, limit)
