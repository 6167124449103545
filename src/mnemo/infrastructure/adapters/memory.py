"""
In-Memory Review Repository: Infrastructure adapter backed by process-local dicts.

Implements ReviewRepository for tests and for embedding the service in an
application that manages persistence itself.
"""

import logging
from collections.abc import Iterable

from mnemo.application.history import latest_states
from mnemo.domain.review.models import ReviewEvent, StudyItem
from mnemo.domain.review.ports import ReviewRepository

logger = logging.getLogger(__name__)


class InMemoryReviewRepository(ReviewRepository):
    """
    Holds items keyed by ID and an append-only list of review events.

    Not synchronized; meant for single-process use.
    """

    def __init__(
        self,
        items: Iterable[StudyItem] | None = None,
        events: Iterable[ReviewEvent] | None = None,
    ):
        self._items: dict[str, StudyItem] = {}
        for item in items or []:
            self.add_item(item.item_id, item.deck_id)
        self._events: list[ReviewEvent] = list(events or [])

    @property
    def items(self) -> list[StudyItem]:
        return list(self._items.values())

    @property
    def events(self) -> list[ReviewEvent]:
        return list(self._events)

    def add_item(self, item_id: str, deck_id: str) -> StudyItem:
        if item_id in self._items:
            raise ValueError(f"Duplicate item id: {item_id!r}")
        item = StudyItem(item_id=item_id, deck_id=deck_id)
        self._items[item_id] = item
        return item

    async def get_item(self, item_id: str) -> StudyItem | None:
        return self._items.get(item_id)

    async def list_items(self, reviewer_id: str, deck_id: str | None = None) -> list[StudyItem]:
        states = latest_states(e for e in self._events if e.reviewer_id == reviewer_id)

        return [
            StudyItem(
                item_id=item.item_id,
                deck_id=item.deck_id,
                latest_state=states.get((item.item_id, reviewer_id)),
            )
            for item in self._items.values()
            if deck_id is None or item.deck_id == deck_id
        ]

    async def get_events(self, item_id: str, reviewer_id: str) -> list[ReviewEvent]:
        return [
            e for e in self._events if e.item_id == item_id and e.reviewer_id == reviewer_id
        ]

    async def append_event(self, event: ReviewEvent) -> None:
        self._events.append(event)
        logger.debug(f"Appended {event.event_id} for item {event.item_id}")
