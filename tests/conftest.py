"""
Pytest Configuration and Fixtures.

Shared fixtures: a controllable clock, a seeded random source, and snapshot
stores (in-memory and SQLite).
"""
import random
from datetime import datetime, timedelta, timezone

import pytest

from progress_engine.persistence import MemorySnapshotStore, SqlSnapshotStore, get_engine
from progress_engine.progress import ProgressStore
from progress_engine.review import WordReviewScheduler


START = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeTimer:
    """Stand-in for threading.Timer that fires only when the test says so."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


class TimerRecorder:
    """timer_factory that keeps every timer it builds."""

    def __init__(self):
        self.timers: list[FakeTimer] = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = FakeTimer(interval, function, args=args, kwargs=kwargs)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def memory_store():
    return MemorySnapshotStore()


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite engine shared by every connection in the test."""
    engine = get_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sqlite_engine):
    return SqlSnapshotStore(engine=sqlite_engine, learner_id="test-learner")


@pytest.fixture
def progress_store(clock):
    return ProgressStore(clock=clock)


@pytest.fixture
def scheduler(clock, rng):
    return WordReviewScheduler(clock=clock, rng=rng)


@pytest.fixture
def timers():
    return TimerRecorder()
