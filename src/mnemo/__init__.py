"""mnemo: SM-2 review scheduling and study statistics."""

from mnemo.application.aggregator import (
    Aggregator,
    DueItem,
    ItemStatus,
    ReviewStats,
    ReviewSummary,
    summarize,
)
from mnemo.application.scheduler import Scheduler, compute_next_review, is_due
from mnemo.domain.errors import (
    InvalidLimitError,
    InvalidRatingError,
    ItemNotFoundError,
    MnemoError,
    SnapshotError,
)
from mnemo.domain.review.models import ReviewEvent, ReviewState, StudyItem

__all__ = [
    "Aggregator",
    "DueItem",
    "InvalidLimitError",
    "InvalidRatingError",
    "ItemNotFoundError",
    "ItemStatus",
    "MnemoError",
    "ReviewEvent",
    "ReviewState",
    "ReviewStats",
    "ReviewSummary",
    "Scheduler",
    "SnapshotError",
    "StudyItem",
    "compute_next_review",
    "is_due",
    "summarize",
]
