"""
Integration tests for snapshot persistence (SQLite in memory).
"""
import pytest
from pydantic import BaseModel

from progress_engine import config
from progress_engine.persistence import (
    SESSION_SNAPSHOT,
    WORD_REVIEW_SNAPSHOT,
    SqlSnapshotStore,
    load_snapshot,
    reset_db,
    save_snapshot,
)
from progress_engine.progress import ActivityResult, ProgressStore
from progress_engine.review import WordReviewScheduler
from progress_engine.session import SessionController, SessionMode, SessionStorage


class _Envelope(BaseModel):
    value: int


class TestSqlSnapshotStore:

    def test_missing_name(self, sql_store):
        assert sql_store.load("nothing") is None

    def test_save_overwrites(self, sql_store):
        sql_store.save("blob", "one")
        sql_store.save("blob", "two")
        assert sql_store.load("blob") == "two"

    def test_delete(self, sql_store):
        sql_store.save("blob", "one")
        sql_store.delete("blob")
        sql_store.delete("blob")
        assert sql_store.load("blob") is None

    def test_scoped_per_learner(self, sqlite_engine):
        alice = SqlSnapshotStore(engine=sqlite_engine, learner_id="alice")
        bob = SqlSnapshotStore(engine=sqlite_engine, learner_id="bob")

        alice.save("blob", "a")
        assert bob.load("blob") is None
        assert alice.load("blob") == "a"

    def test_reset_db_drops_everything(self, sqlite_engine, sql_store):
        sql_store.save("blob", "one")
        reset_db(sqlite_engine)
        assert sql_store.load("blob") is None


class TestSnapshotHelpers:

    def test_round_trip(self, memory_store):
        save_snapshot(memory_store, "env", _Envelope(value=3))
        assert load_snapshot(memory_store, "env", _Envelope) == _Envelope(value=3)

    @pytest.mark.parametrize("payload", ["", "[1, 2", '{"value": "three"}', '{"other": 1}'])
    def test_unusable_payloads(self, memory_store, payload):
        memory_store.save("env", payload)
        assert load_snapshot(memory_store, "env", _Envelope) is None

    def test_no_store(self):
        save_snapshot(None, "env", _Envelope(value=1))
        assert load_snapshot(None, "env", _Envelope) is None


class TestStoresOverSqlite:

    def test_progress_round_trip(self, sql_store, clock):
        store = ProgressStore(snapshot_store=sql_store, clock=clock)
        store.record_item_attempt("reading", "cat", True)
        store.complete_lesson("reading", "lesson-1", 95)
        store.complete_activity(ActivityResult(
            activity_id="a", subject_id="reading", activity_type="tap",
            is_correct=True, score=95, xp_earned=40,
        ))
        store.save()

        restored = ProgressStore.load(sql_store, clock=clock)
        assert restored.subjects == store.subjects
        assert restored.global_state == store.global_state

    def test_word_reviews_round_trip(self, sql_store, clock):
        scheduler = WordReviewScheduler(snapshot_store=sql_store, clock=clock, autosave=True)
        scheduler.record_review("cat", 1, 0.9)
        scheduler.record_review("dog", 1, 0.4)

        restored = WordReviewScheduler.load(sql_store, clock=clock)
        assert restored.get_all_word_reviews() == scheduler.get_all_word_reviews()

    def test_wrong_version_is_ignored(self, sql_store):
        sql_store.save(WORD_REVIEW_SNAPSHOT, '{"version": 9, "reviews": {}}')
        assert WordReviewScheduler.load(sql_store).get_all_word_reviews() == {}

    def test_session_resume_after_restart(self, sqlite_engine, clock, rng):
        words = ["cat", "dog", "sun", "map"]
        first_store = SqlSnapshotStore(engine=sqlite_engine, learner_id="kid")
        controller = SessionController(
            WordReviewScheduler(clock=clock, rng=rng),
            lambda unit: words,
            storage=SessionStorage(first_store),
            advance_delay=0,
        )
        plan = controller.start(SessionMode.AUTO, 1)
        controller.complete_activity(0.9)

        # New process: fresh store objects over the same database
        second_store = SqlSnapshotStore(engine=sqlite_engine, learner_id="kid")
        restored = SessionStorage(second_store).load_session(current_unit=1)
        assert restored.steps == plan.steps
        assert restored.current_step_index == 1
        assert second_store.load(SESSION_SNAPSHOT) is not None


class TestConfig:

    def test_default_sqlite_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("TEST_MODE", "false")
        assert config.get_database_url().endswith("progress.db")
        assert not config.get_database_url().endswith("test_progress.db")

    def test_test_mode_sqlite_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("TEST_MODE", "true")
        assert config.get_database_url().endswith("test_progress.db")

    def test_test_mode_rewrites_database_name(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@localhost/progress_db")
        monkeypatch.setenv("TEST_MODE", "true")
        assert config.get_database_url() == "postgresql://u:p@localhost/test_progress_db"

    @pytest.mark.parametrize("raw,expected", [
        (None, 1.5), ("0", 0.0), ("2.5", 2.5), ("soon", 1.5), ("-1", 1.5),
    ])
    def test_advance_delay(self, monkeypatch, raw, expected):
        if raw is None:
            monkeypatch.delenv("SESSION_ADVANCE_DELAY", raising=False)
        else:
            monkeypatch.setenv("SESSION_ADVANCE_DELAY", raw)
        assert config.get_advance_delay() == expected

    def test_default_learner(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_LEARNER_ID", raising=False)
        assert config.get_default_learner_id() == "learner"
