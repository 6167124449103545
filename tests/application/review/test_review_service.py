from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from mnemo.application.review.service import ReviewService
from mnemo.application.scheduler import Scheduler
from mnemo.domain.errors import InvalidLimitError, InvalidRatingError, ItemNotFoundError
from mnemo.domain.review.models import ReviewEvent, StudyItem
from mnemo.infrastructure.adapters.memory import InMemoryReviewRepository


class FakeClock:
    def __init__(self, start):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, days):
        self.current += timedelta(days=days)


@pytest.fixture
def fake_clock(now):
    return FakeClock(now)


@pytest.fixture
def repo():
    repo = InMemoryReviewRepository()
    repo.add_item("c1", "spanish")
    repo.add_item("c2", "spanish")
    repo.add_item("c3", "french")
    return repo


@pytest.fixture
def service(repo, fake_clock):
    return ReviewService(repo, scheduler=Scheduler(clock=fake_clock), default_limit=2, max_limit=5)


@pytest.fixture
def mock_repo():
    return AsyncMock()


# ---------- submit_review ----------


@pytest.mark.asyncio
async def test_first_review_appends_event(service, repo, now):
    event = await service.submit_review("c1", "alice", 5)

    assert event.item_id == "c1"
    assert event.reviewer_id == "alice"
    assert event.quality == 5
    assert event.event_id.startswith("rev_")
    assert event.state.interval == 1
    assert event.state.repetitions == 1
    assert event.state.easiness_factor == pytest.approx(2.6)
    assert event.state.last_reviewed == now
    assert repo.events == [event]


@pytest.mark.asyncio
async def test_consecutive_reviews_build_on_latest_state(service, fake_clock):
    intervals = []
    for _ in range(3):
        event = await service.submit_review("c1", "alice", 4)
        intervals.append(event.state.interval)
        fake_clock.advance(event.state.interval)

    assert intervals == [1, 6, 15]


@pytest.mark.asyncio
async def test_failure_restarts_ladder(service, fake_clock):
    await service.submit_review("c1", "alice", 5)
    fake_clock.advance(1)
    await service.submit_review("c1", "alice", 5)
    fake_clock.advance(6)

    event = await service.submit_review("c1", "alice", 1)

    assert event.state.repetitions == 0
    assert event.state.interval == 1


@pytest.mark.asyncio
async def test_reviewers_are_scheduled_independently(service):
    await service.submit_review("c1", "alice", 5)
    event = await service.submit_review("c1", "bob", 5)

    assert event.state.repetitions == 1


@pytest.mark.asyncio
async def test_invalid_rating_touches_nothing(mock_repo):
    service = ReviewService(mock_repo)

    with pytest.raises(InvalidRatingError):
        await service.submit_review("c1", "alice", 6)

    mock_repo.get_item.assert_not_called()
    mock_repo.append_event.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_item(mock_repo):
    mock_repo.get_item.return_value = None
    service = ReviewService(mock_repo)

    with pytest.raises(ItemNotFoundError) as exc_info:
        await service.submit_review("missing", "alice", 4)

    assert exc_info.value.item_id == "missing"
    mock_repo.append_event.assert_not_called()


@pytest.mark.asyncio
async def test_submit_orchestration(mock_repo, clock, now):
    mock_repo.get_item.return_value = StudyItem("c1", "d")
    mock_repo.get_events.return_value = []
    service = ReviewService(mock_repo, scheduler=Scheduler(clock=clock))

    event = await service.submit_review("c1", "alice", 3)

    mock_repo.get_events.assert_called_once_with("c1", "alice")
    mock_repo.append_event.assert_awaited_once_with(event)
    assert event.state.next_review == now + timedelta(days=1)


# ---------- stats / due ----------


@pytest.mark.asyncio
async def test_stats(service, fake_clock):
    await service.submit_review("c1", "alice", 5)
    fake_clock.advance(1)
    await service.submit_review("c1", "alice", 5)
    await service.submit_review("c2", "alice", 4)

    stats = await service.get_stats("alice")

    assert stats.total == 3
    assert stats.new == 1
    assert stats.learning == 1
    assert stats.review == 1
    assert stats.due == 1

    spanish = await service.get_stats("alice", deck_id="spanish")
    assert spanish.total == 2
    assert spanish.new == 0
    assert spanish.due == 0

    assert (await service.get_stats("bob")).new == 3


@pytest.mark.asyncio
async def test_due_items_default_limit(service, fake_clock):
    await service.submit_review("c1", "alice", 5)
    fake_clock.advance(2)

    due = await service.get_due_items("alice")

    # default_limit=2; new items come first
    assert [d.item_id for d in due] == ["c2", "c3"]

    due = await service.get_due_items("alice", limit=5)
    assert [d.item_id for d in due] == ["c2", "c3", "c1"]
    assert due[2].latest_state.repetitions == 1


@pytest.mark.asyncio
async def test_due_items_deck_filter(service):
    due = await service.get_due_items("alice", deck_id="french")
    assert [d.item_id for d in due] == ["c3"]


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [0, -3, 6])
async def test_due_items_rejects_bad_limits(service, limit):
    with pytest.raises(InvalidLimitError):
        await service.get_due_items("alice", limit=limit)


@pytest.mark.asyncio
async def test_due_items_empty_store():
    service = ReviewService(InMemoryReviewRepository())
    assert await service.get_due_items("alice") == []
    stats = await service.get_stats("alice")
    assert (stats.total, stats.due) == (0, 0)


# ---------- history ----------


@pytest.mark.asyncio
async def test_history_newest_first(service, fake_clock):
    first = await service.submit_review("c1", "alice", 5)
    fake_clock.advance(1)
    second = await service.submit_review("c1", "alice", 2)
    await service.submit_review("c1", "bob", 3)

    history = await service.get_history("c1", "alice")

    assert history == [second, first]
    assert all(isinstance(e, ReviewEvent) for e in history)


@pytest.mark.asyncio
async def test_history_of_unreviewed_item(service):
    assert await service.get_history("c2", "alice") == []


@pytest.mark.asyncio
async def test_history_unknown_item(service):
    with pytest.raises(ItemNotFoundError):
        await service.get_history("nope", "alice")
