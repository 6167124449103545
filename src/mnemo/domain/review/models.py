"""
Domain models for SM-2 review scheduling.

These are pure data structures with no I/O or external dependencies.
All timestamps are timezone-aware (UTC).
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ReviewState:
    """
    Scheduling state produced by a single review.

    Attributes:
        easiness_factor: SM-2 multiplier for interval growth (never below 1.3).
        interval: Days until the next review.
        repetitions: Consecutive successful reviews since the last failure.
        next_review: When the item becomes due again.
        last_reviewed: When this state was produced.
    """

    easiness_factor: float
    interval: int
    repetitions: int
    next_review: datetime
    last_reviewed: datetime


@dataclass(frozen=True)
class ReviewEvent:
    """
    One submitted rating and the state it produced. Append-only.

    Attributes:
        event_id: Time-ordered identifier (rev_<ULID>).
        item_id: The item that was reviewed.
        reviewer_id: Who reviewed it.
        quality: Raw rating, 0-5.
        state: Scheduling state resulting from this review.
    """

    event_id: str
    item_id: str
    reviewer_id: str
    quality: int
    state: ReviewState


@dataclass(frozen=True)
class StudyItem:
    """
    An item as seen by the scheduler: its identity, its deck, and the latest
    scheduling state for one reviewer (None if never reviewed).
    """

    item_id: str
    deck_id: str
    latest_state: ReviewState | None = None
