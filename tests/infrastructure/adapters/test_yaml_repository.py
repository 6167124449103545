from pathlib import Path

import pytest
import yaml

from mnemo.application.review.service import ReviewService
from mnemo.application.scheduler import Scheduler
from mnemo.domain.errors import SnapshotError
from mnemo.domain.review.models import ReviewEvent, StudyItem
from mnemo.infrastructure.adapters.yaml_store import (
    YamlReviewRepository,
    dump_snapshot,
    load_snapshot,
)

SNAPSHOT = """\
items:
  - id: c1
    deck: spanish
  - id: 2
    deck: spanish
events:
  - id: rev_a
    item: c1
    reviewer: alice
    quality: 4
    easiness_factor: 2.5
    interval: 1
    repetitions: 1
    next_review: 2026-10-20T09:30:00+00:00
    last_reviewed: 2026-10-19T09:30:00+00:00
"""


@pytest.fixture
def store(tmp_path) -> Path:
    path = tmp_path / "reviews.yaml"
    path.write_text(SNAPSHOT, encoding="utf-8")
    return path


def test_missing_file_is_empty(tmp_path):
    assert load_snapshot(tmp_path / "missing.yaml") == ([], [])


def test_empty_file_is_empty(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_snapshot(path) == ([], [])


def test_load_snapshot(store, now):
    items, events = load_snapshot(store)

    assert items == [StudyItem("c1", "spanish"), StudyItem("2", "spanish")]
    assert len(events) == 1
    assert events[0].event_id == "rev_a"
    assert events[0].state.last_reviewed == now
    assert events[0].state.next_review.tzinfo is not None


@pytest.mark.parametrize(
    "body, message",
    [
        ("items: [\n", "could not read"),
        ("- just\n- a list\n", "expected a mapping"),
        ("items: {c1: spanish}\n", "must be lists"),
        ("items:\n  - deck: spanish\n", "invalid item #0"),
        ("items:\n  - id: a\n    deck: x\n  - id: a\n    deck: y\n", "duplicate item id"),
        ("events:\n  - id: e\n    item: c1\n", "invalid event #0"),
    ],
)
def test_malformed_snapshots(tmp_path, body, message):
    path = tmp_path / "bad.yaml"
    path.write_text(body, encoding="utf-8")

    with pytest.raises(SnapshotError, match=message):
        load_snapshot(path)


def test_invalid_quality_in_snapshot(store):
    store.write_text(SNAPSHOT.replace("quality: 4", "quality: 7"), encoding="utf-8")
    with pytest.raises(SnapshotError, match="invalid event #0"):
        load_snapshot(store)


def test_dump_then_load_keeps_items_and_events(tmp_path, make_state):
    path = tmp_path / "nested" / "reviews.yaml"
    items = [StudyItem("c1", "d")]
    events = [ReviewEvent("rev_x", "c1", "alice", 5, make_state(repetitions=2, interval=6))]

    dump_snapshot(path, items, events)

    assert load_snapshot(path) == (items, events)
    # No stray temp files
    assert [p.name for p in path.parent.iterdir()] == ["reviews.yaml"]


def test_dump_writes_plain_yaml(tmp_path, make_state):
    path = tmp_path / "reviews.yaml"
    dump_snapshot(path, [StudyItem("c1", "d")], [])

    assert yaml.safe_load(path.read_text(encoding="utf-8")) == {
        "items": [{"id": "c1", "deck": "d"}],
        "events": [],
    }


@pytest.mark.asyncio
async def test_repository_persists_appended_events(store, make_state):
    repo = YamlReviewRepository(store)
    # Reviewed a day after rev_a
    event = ReviewEvent("rev_b", "c1", "alice", 5, make_state(repetitions=2, interval=6, due_in=7))

    await repo.append_event(event)

    reopened = YamlReviewRepository(store)
    assert [e.event_id for e in reopened.events] == ["rev_a", "rev_b"]
    items = await reopened.list_items("alice")
    assert items[0].latest_state == event.state


@pytest.mark.asyncio
async def test_repository_reads_items(store):
    repo = YamlReviewRepository(store)
    assert await repo.get_item("2") == StudyItem("2", "spanish")
    assert [i.item_id for i in await repo.list_items("alice", deck_id="spanish")] == ["c1", "2"]


@pytest.mark.parametrize(
    "field, value",
    [("easiness_factor", "1.1"), ("interval", "-1"), ("repetitions", "-2")],
)
def test_out_of_range_state_in_snapshot(store, field, value):
    original = {"easiness_factor": "2.5", "interval": "1", "repetitions": "1"}[field]
    store.write_text(
        SNAPSHOT.replace(f"{field}: {original}", f"{field}: {value}"), encoding="utf-8"
    )
    with pytest.raises(SnapshotError, match="invalid event #0"):
        load_snapshot(store)


@pytest.mark.asyncio
async def test_failed_save_does_not_keep_event(store, make_state, monkeypatch):
    repo = YamlReviewRepository(store)
    before = store.read_text(encoding="utf-8")
    event = ReviewEvent("rev_b", "c1", "alice", 5, make_state(repetitions=2, interval=6, due_in=7))

    def fail_dump(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("mnemo.infrastructure.adapters.yaml_store.dump_snapshot", fail_dump)

    with pytest.raises(OSError, match="disk full"):
        await repo.append_event(event)

    assert [e.event_id for e in repo.events] == ["rev_a"]
    assert await repo.get_events("c1", "alice") == repo.events
    assert store.read_text(encoding="utf-8") == before


@pytest.mark.asyncio
async def test_retry_after_failed_save_schedules_from_scratch(store, now, monkeypatch):
    repo = YamlReviewRepository(store)
    service = ReviewService(repo, scheduler=Scheduler(clock=lambda: now))

    def fail_dump(*args, **kwargs):
        raise OSError("disk full")

    with monkeypatch.context() as m:
        m.setattr("mnemo.infrastructure.adapters.yaml_store.dump_snapshot", fail_dump)
        with pytest.raises(OSError):
            await service.submit_review("2", "alice", 5)

    event = await service.submit_review("2", "alice", 5)

    assert (event.state.repetitions, event.state.interval) == (1, 1)
    reopened = YamlReviewRepository(store)
    assert [e.item_id for e in reopened.events] == ["c1", "2"]
