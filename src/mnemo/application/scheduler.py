"""
SM-2 scheduler.

Computes the next scheduling state from a quality rating and the prior state.
This is a pure computation module with no I/O; the only ambient input is the
clock, which callers inject for reproducible results.

Quality ratings:
    0 - Complete blackout
    1 - Incorrect, but the answer was recognized
    2 - Incorrect, but the answer seemed easy once shown
    3 - Correct, with serious difficulty
    4 - Correct, after some hesitation
    5 - Perfect recall
"""

import logging
import math
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from mnemo.domain.constants import (
    FIRST_INTERVAL_DAYS,
    INITIAL_EASINESS_FACTOR,
    MAX_QUALITY,
    MIN_EASINESS_FACTOR,
    MIN_QUALITY,
    PASSING_QUALITY,
    SECOND_INTERVAL_DAYS,
)
from mnemo.domain.errors import InvalidRatingError
from mnemo.domain.review.models import ReviewState

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

QUALITY_DESCRIPTIONS = (
    "Complete blackout",
    "Incorrect, but recognized",
    "Incorrect, but seemed easy",
    "Correct with difficulty",
    "Correct with hesitation",
    "Perfect recall",
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_quality(quality: object) -> int:
    """
    Return the rating unchanged if it is an integer in [0, 5].

    Raises:
        InvalidRatingError: for anything else. Out-of-range values are never clamped.
    """
    # bool is an int subclass
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidRatingError(quality)
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidRatingError(quality)
    return quality


def describe_quality(quality: int) -> str:
    """Human-readable description of a rating."""
    return QUALITY_DESCRIPTIONS[validate_quality(quality)]


def next_easiness_factor(easiness_factor: float, quality: int) -> float:
    """
    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at 1.3.
    """
    shortfall = MAX_QUALITY - quality
    updated = easiness_factor + (0.1 - shortfall * (0.08 + shortfall * 0.02))
    return max(updated, MIN_EASINESS_FACTOR)


def _round_half_up(value: float) -> int:
    # round() is banker's rounding: round(2.5) == 2
    return math.floor(value + 0.5)


def compute_next_review(
    quality: int,
    prior: ReviewState | None = None,
    *,
    now: datetime | None = None,
) -> ReviewState:
    """
    Apply one SM-2 step.

    Args:
        quality: Rating for this attempt, 0-5.
        prior: The item's latest state, or None if it was never reviewed
            (EF 2.5, interval 0, repetitions 0).
        now: Evaluation time. Defaults to the current UTC time.

    Returns:
        The new ReviewState. next_review is exactly `interval` days after now.

    Raises:
        InvalidRatingError: If quality is not an integer in [0, 5].
    """
    quality = validate_quality(quality)
    if now is None:
        now = utc_now()

    if prior is None:
        easiness_factor = INITIAL_EASINESS_FACTOR
        interval = 0
        repetitions = 0
    else:
        easiness_factor = prior.easiness_factor
        interval = prior.interval
        repetitions = prior.repetitions

    new_ef = next_easiness_factor(easiness_factor, quality)

    if quality < PASSING_QUALITY:
        # Failed recall restarts the ladder
        new_repetitions = 0
        new_interval = FIRST_INTERVAL_DAYS
    elif repetitions == 0:
        new_repetitions = 1
        new_interval = FIRST_INTERVAL_DAYS
    elif repetitions == 1:
        new_repetitions = 2
        new_interval = SECOND_INTERVAL_DAYS
    else:
        new_repetitions = repetitions + 1
        # Floor of one day keeps next_review strictly after now
        new_interval = max(_round_half_up(interval * new_ef), FIRST_INTERVAL_DAYS)

    logger.debug(
        f"SM-2 q={quality} ef={easiness_factor:.2f}->{new_ef:.2f} "
        f"interval={interval}->{new_interval} reps={repetitions}->{new_repetitions}"
    )

    return ReviewState(
        easiness_factor=new_ef,
        interval=new_interval,
        repetitions=new_repetitions,
        next_review=now + timedelta(days=new_interval),
        last_reviewed=now,
    )


def is_due(next_review: datetime, now: datetime) -> bool:
    return now >= next_review


class Scheduler:
    """
    SM-2 scheduler bound to a clock.

    Stateless and side-effect free; safe to share between concurrent callers.
    """

    def __init__(self, clock: Clock | None = None):
        """
        Args:
            clock: Returns the current time; defaults to UTC wall-clock time.
        """
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    def compute(self, quality: int, prior: ReviewState | None = None) -> ReviewState:
        return compute_next_review(quality, prior, now=self._clock())

    def is_due(self, next_review: datetime) -> bool:
        return is_due(next_review, self._clock())
