"""
YAML Review Repository: Infrastructure adapter for a snapshot file.

The whole snapshot is loaded on construction and rewritten after every
appended event. Snapshot layout:

    items:
      - id: c1
        deck: spanish
    events:
      - id: rev_01J...
        item: c1
        reviewer: alice
        quality: 4
        easiness_factor: 2.5
        interval: 1
        repetitions: 1
        next_review: '2026-10-20T09:00:00+00:00'
        last_reviewed: '2026-10-19T09:00:00+00:00'
"""

import logging
import os
import tempfile
from pathlib import Path

import yaml

from mnemo.domain.errors import SnapshotError
from mnemo.domain.review.models import ReviewEvent, StudyItem
from mnemo.infrastructure.adapters.memory import InMemoryReviewRepository
from mnemo.infrastructure.serialization import (
    event_to_record,
    item_to_record,
    record_to_event,
    record_to_item,
)

logger = logging.getLogger(__name__)


def load_snapshot(path: Path) -> tuple[list[StudyItem], list[ReviewEvent]]:
    """
    Read items and events from a snapshot file.

    A missing file is an empty snapshot.

    Raises:
        SnapshotError: If the file is not valid YAML or a record is malformed.
    """
    if not path.exists():
        logger.debug(f"No snapshot at {path}; starting empty")
        return [], []

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise SnapshotError(f"{path}: could not read snapshot: {e}") from e

    if not isinstance(data, dict):
        raise SnapshotError(f"{path}: expected a mapping with 'items' and 'events'")

    raw_items = data.get("items") or []
    raw_events = data.get("events") or []
    if not isinstance(raw_items, list) or not isinstance(raw_events, list):
        raise SnapshotError(f"{path}: 'items' and 'events' must be lists")

    items: list[StudyItem] = []
    seen: set[str] = set()
    for i, record in enumerate(raw_items):
        try:
            item = record_to_item(record)
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"{path}: invalid item #{i}: {e!r}") from e
        if item.item_id in seen:
            raise SnapshotError(f"{path}: duplicate item id {item.item_id!r}")
        seen.add(item.item_id)
        items.append(item)

    events: list[ReviewEvent] = []
    for i, record in enumerate(raw_events):
        try:
            events.append(record_to_event(record))
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"{path}: invalid event #{i}: {e!r}") from e

    logger.debug(f"Loaded {len(items)} items and {len(events)} events from {path}")
    return items, events


def dump_snapshot(path: Path, items: list[StudyItem], events: list[ReviewEvent]) -> None:
    """
    Write a snapshot atomically (temp file in the same directory, then replace).
    """
    payload = {
        "items": [item_to_record(item) for item in items],
        "events": [event_to_record(event) for event in events],
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(payload, f, sort_keys=False, allow_unicode=True)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug(f"Saved {len(items)} items and {len(events)} events to {path}")


class YamlReviewRepository(InMemoryReviewRepository):
    """
    Snapshot-file repository used by the CLI.

    Not safe for concurrent writers.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        items, events = load_snapshot(self.path)
        super().__init__(items, events)

    async def append_event(self, event: ReviewEvent) -> None:
        # Only record the event in memory once it is on disk
        dump_snapshot(self.path, self.items, self.events + [event])
        await super().append_event(event)
