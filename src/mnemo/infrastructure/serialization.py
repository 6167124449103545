"""
Plain-dict records for review data.

Used by the YAML snapshot adapter and the CLI's JSON output. Timestamps are
written as ISO-8601 strings; naive timestamps read back are taken as UTC.
"""

from datetime import datetime, timezone
from typing import Any

from mnemo.application.scheduler import validate_quality
from mnemo.domain.constants import MIN_EASINESS_FACTOR
from mnemo.domain.review.models import ReviewEvent, ReviewState, StudyItem


def parse_timestamp(value: Any) -> datetime:
    # PyYAML already turns unquoted timestamps into datetime objects
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if not isinstance(value, datetime):
        raise ValueError(f"not a timestamp: {value!r}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def state_to_record(state: ReviewState) -> dict[str, Any]:
    return {
        "easiness_factor": state.easiness_factor,
        "interval": state.interval,
        "repetitions": state.repetitions,
        "next_review": state.next_review.isoformat(),
        "last_reviewed": state.last_reviewed.isoformat(),
    }


def record_to_state(record: dict[str, Any]) -> ReviewState:
    easiness_factor = float(record["easiness_factor"])
    interval = int(record["interval"])
    repetitions = int(record["repetitions"])
    if easiness_factor < MIN_EASINESS_FACTOR:
        raise ValueError(
            f"easiness_factor must be at least {MIN_EASINESS_FACTOR}, got {easiness_factor!r}"
        )
    if interval < 0 or repetitions < 0:
        raise ValueError(
            f"interval and repetitions must be non-negative, got {interval!r} and {repetitions!r}"
        )
    return ReviewState(
        easiness_factor=easiness_factor,
        interval=interval,
        repetitions=repetitions,
        next_review=parse_timestamp(record["next_review"]),
        last_reviewed=parse_timestamp(record["last_reviewed"]),
    )


def item_to_record(item: StudyItem) -> dict[str, Any]:
    return {"id": item.item_id, "deck": item.deck_id}


def record_to_item(record: dict[str, Any]) -> StudyItem:
    # YAML may hand back numeric IDs
    return StudyItem(item_id=str(record["id"]), deck_id=str(record["deck"]))


def event_to_record(event: ReviewEvent) -> dict[str, Any]:
    return {
        "id": event.event_id,
        "item": event.item_id,
        "reviewer": event.reviewer_id,
        "quality": event.quality,
        **state_to_record(event.state),
    }


def record_to_event(record: dict[str, Any]) -> ReviewEvent:
    return ReviewEvent(
        event_id=str(record["id"]),
        item_id=str(record["item"]),
        reviewer_id=str(record["reviewer"]),
        quality=validate_quality(record["quality"]),
        state=record_to_state(record),
    )
