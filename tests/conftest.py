from datetime import datetime, timedelta, timezone

import pytest

from mnemo.domain.review.models import ReviewState

NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    """A clock frozen at NOW."""
    return lambda: NOW


@pytest.fixture
def make_state():
    """Build a ReviewState reviewed `interval` days before NOW, due at `due_in` days from NOW."""

    def _make(
        repetitions: int = 1,
        interval: int = 1,
        easiness_factor: float = 2.5,
        due_in: float = 0,
    ) -> ReviewState:
        next_review = NOW + timedelta(days=due_in)
        return ReviewState(
            easiness_factor=easiness_factor,
            interval=interval,
            repetitions=repetitions,
            next_review=next_review,
            last_reviewed=next_review - timedelta(days=interval),
        )

    return _make


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate config files and MNEMO_* settings from the developer's machine
    monkeypatch.setenv("HOME", str(home))
    for var in ("MNEMO_STORE_PATH", "MNEMO_DEFAULT_REVIEWER", "MNEMO_DEFAULT_DUE_LIMIT", "MNEMO_MAX_DUE_LIMIT"):
        monkeypatch.delenv(var, raising=False)
    return home
