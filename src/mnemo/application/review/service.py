"""
Review Service: Application layer orchestrator.

Coordinates reading items and history from the repository, running the SM-2
scheduler and the aggregator, and appending new review events.
"""

import logging

from mnemo.application.aggregator import Aggregator, DueItem, ReviewStats, validate_limit
from mnemo.application.history import current_state, order_history
from mnemo.application.id_service import generate_event_id
from mnemo.application.scheduler import Scheduler, validate_quality
from mnemo.domain.constants import DEFAULT_DUE_LIMIT, MAX_DUE_LIMIT
from mnemo.domain.errors import InvalidLimitError, InvalidRatingError, ItemNotFoundError
from mnemo.domain.review.models import ReviewEvent
from mnemo.domain.review.ports import ReviewRepository

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Application service for submitting reviews and reading study progress.

    Follows Dependency Inversion: depends on the ReviewRepository abstraction,
    not concrete adapter implementations.
    """

    def __init__(
        self,
        review_repo: ReviewRepository,
        scheduler: Scheduler | None = None,
        aggregator: Aggregator | None = None,
        default_limit: int = DEFAULT_DUE_LIMIT,
        max_limit: int = MAX_DUE_LIMIT,
    ):
        """
        Args:
            review_repo: The repository (port) for items and review events.
            scheduler: Optional scheduler; uses a wall-clock one if not provided.
            aggregator: Optional aggregator; shares the scheduler's clock if not provided.
            default_limit: Due-queue size when the caller does not pass one.
            max_limit: Largest due-queue size a caller may request.
        """
        self._repo = review_repo
        self._scheduler = scheduler or Scheduler()
        self._aggregator = aggregator or Aggregator(clock=self._scheduler.now)
        self._default_limit = default_limit
        self._max_limit = max_limit

    async def submit_review(self, item_id: str, reviewer_id: str, quality: int) -> ReviewEvent:
        """
        Rate one recall attempt and record the resulting state.

        Returns:
            The newly appended ReviewEvent.

        Raises:
            InvalidRatingError: If quality is not an integer in [0, 5].
            ItemNotFoundError: If the item does not exist.
        """
        try:
            quality = validate_quality(quality)
        except InvalidRatingError:
            logger.warning(f"Rejected rating {quality!r} for item {item_id}")
            raise

        item = await self._repo.get_item(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)

        prior = current_state(await self._repo.get_events(item_id, reviewer_id))
        state = self._scheduler.compute(quality, prior)

        event = ReviewEvent(
            event_id=generate_event_id(),
            item_id=item_id,
            reviewer_id=reviewer_id,
            quality=quality,
            state=state,
        )
        await self._repo.append_event(event)

        logger.info(
            f"Review {event.event_id}: item={item_id} reviewer={reviewer_id} q={quality} "
            f"interval={state.interval}d next={state.next_review.isoformat()}"
        )
        return event

    async def get_stats(self, reviewer_id: str, deck_id: str | None = None) -> ReviewStats:
        items = await self._repo.list_items(reviewer_id, deck_id)
        return self._aggregator.stats(items, deck_filter=deck_id)

    async def get_due_items(
        self,
        reviewer_id: str,
        deck_id: str | None = None,
        limit: int | None = None,
    ) -> list[DueItem]:
        """
        Fetch the reviewer's due items, earliest due first.

        Args:
            reviewer_id: Whose schedule to read.
            deck_id: Optional deck to restrict to.
            limit: Maximum number of items; defaults to the configured default.

        Raises:
            InvalidLimitError: If limit is non-positive or above the configured maximum.
        """
        limit = self._resolve_limit(limit)
        items = await self._repo.list_items(reviewer_id, deck_id)
        return self._aggregator.due_queue(items, deck_filter=deck_id, limit=limit)

    async def get_history(self, item_id: str, reviewer_id: str) -> list[ReviewEvent]:
        """
        Fetch every review of an item by a reviewer, newest first.

        Raises:
            ItemNotFoundError: If the item does not exist.
        """
        if await self._repo.get_item(item_id) is None:
            raise ItemNotFoundError(item_id)
        return order_history(await self._repo.get_events(item_id, reviewer_id))

    def _resolve_limit(self, limit: int | None) -> int:
        if limit is None:
            return self._default_limit

        try:
            validate_limit(limit)
        except InvalidLimitError:
            logger.warning(f"Rejected due-queue limit {limit!r}")
            raise

        if limit > self._max_limit:
            logger.warning(f"Rejected due-queue limit {limit!r} (max {self._max_limit})")
            raise InvalidLimitError(
                limit, f"Limit must be at most {self._max_limit}, got {limit!r}"
            )
        return limit
