"""
Ports (interfaces) for review storage.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import ReviewEvent, StudyItem


class ReviewRepository(ABC):
    """
    Port for reading items and appending review events.

    Implementations:
        - InMemoryReviewRepository: Process-local dicts, for tests and embedding.
        - YamlReviewRepository: A YAML snapshot file, used by the CLI.
    """

    @abstractmethod
    async def get_item(self, item_id: str) -> StudyItem | None:
        """
        Look up an item by ID.

        Returns:
            The item (latest_state is not populated), or None if unknown.
        """
        pass

    @abstractmethod
    async def list_items(self, reviewer_id: str, deck_id: str | None = None) -> list[StudyItem]:
        """
        List items, each paired with the reviewer's latest scheduling state.

        Args:
            reviewer_id: Whose review history to attach.
            deck_id: If given, only items in this deck.

        Returns:
            StudyItem objects in storage order.
        """
        pass

    @abstractmethod
    async def get_events(self, item_id: str, reviewer_id: str) -> list[ReviewEvent]:
        """
        Fetch every review event for an (item, reviewer) pair, in append order.
        """
        pass

    @abstractmethod
    async def append_event(self, event: ReviewEvent) -> None:
        """
        Persist a new review event. Existing events are never modified.
        """
        pass
