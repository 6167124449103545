"""
Review history reconstruction.

Events are append-only; the current state of an (item, reviewer) pair is the
state carried by its newest event, ordered by last_reviewed.
"""

from collections.abc import Iterable

from mnemo.domain.review.models import ReviewEvent, ReviewState


def order_history(events: Iterable[ReviewEvent]) -> list[ReviewEvent]:
    """
    Sort events newest first by last_reviewed.

    Events with the same timestamp keep the later-appended one first.
    """
    indexed = list(enumerate(events))
    indexed.sort(key=lambda pair: (pair[1].state.last_reviewed, pair[0]), reverse=True)
    return [event for _, event in indexed]


def latest_event(events: Iterable[ReviewEvent]) -> ReviewEvent | None:
    ordered = order_history(events)
    return ordered[0] if ordered else None


def current_state(events: Iterable[ReviewEvent]) -> ReviewState | None:
    event = latest_event(events)
    return event.state if event else None


def latest_states(events: Iterable[ReviewEvent]) -> dict[tuple[str, str], ReviewState]:
    """
    Map each (item_id, reviewer_id) pair to its current state.
    """
    latest: dict[tuple[str, str], ReviewEvent] = {}

    for event in events:
        key = (event.item_id, event.reviewer_id)
        existing = latest.get(key)
        if existing is None or event.state.last_reviewed >= existing.state.last_reviewed:
            latest[key] = event

    return {key: event.state for key, event in latest.items()}
