"""
Unit tests for the word review scheduler and its pure update rules.
"""
import json
import random
from datetime import timedelta

import pytest
from pydantic import ValidationError

from progress_engine.persistence import WORD_REVIEW_SNAPSHOT
from progress_engine.review import (
    MAX_INTERVAL_DAYS,
    WordReviewRecord,
    WordReviewScheduler,
    initialize_new_record,
    process_review,
)
from progress_engine.review.pools import eligible_words, fill_in_order
from progress_engine.review.scheduling import next_ease_factor, next_interval
from progress_engine.schemas import VocabularyItem
from tests.conftest import START


# ============================================================================
# Pure update rules
# ============================================================================


class TestProcessReview:

    def test_first_success(self):
        record = initialize_new_record("cat", 1, START)
        updated, event = process_review(record, 0.9, timestamp=START)

        assert updated.review_count == 1
        assert updated.success_count == 1
        assert updated.interval_days == 1
        assert updated.next_due_at == START + timedelta(days=1)
        assert event["success"] is True
        assert event["became_mastered"] is False
        # Input record untouched
        assert record.review_count == 0

    def test_success_defaults_from_smoothness(self):
        record = initialize_new_record("cat", 1, START)
        assert process_review(record, 0.7, timestamp=START)[1]["success"] is True
        assert process_review(record, 0.69, timestamp=START)[1]["success"] is False

    def test_explicit_success_overrides_threshold(self):
        record = initialize_new_record("cat", 1, START)
        updated, _ = process_review(record, 0.4, success=True, timestamp=START)
        assert updated.success_count == 1

    def test_smoothness_is_clamped(self):
        record = initialize_new_record("cat", 1, START)
        updated, _ = process_review(record, 1.7, timestamp=START)
        assert updated.avg_smoothness_score == 1.0

    def test_failure_is_due_immediately(self):
        record = initialize_new_record("cat", 1, START)
        updated, _ = process_review(record, 0.3, timestamp=START)

        assert updated.failure_count == 1
        assert updated.interval_days == 0
        assert updated.next_due_at == START

    def test_interval_never_exceeds_cap(self):
        record = initialize_new_record("cat", 1, START)
        now = START
        for _ in range(10):
            record, _ = process_review(record, 1.0, timestamp=now)
            assert record.interval_days <= MAX_INTERVAL_DAYS
            now = record.next_due_at
        assert record.interval_days == MAX_INTERVAL_DAYS

    def test_next_interval(self):
        assert next_interval(0, 2.0, True) == 1
        assert next_interval(1, 2.0, True) == 2
        assert next_interval(3, 2.5, True) == 7
        assert next_interval(2, 1.3, True) == 3
        assert next_interval(5, 2.0, False) == 0

    def test_ease_factor_bounds(self):
        assert next_ease_factor(2.0, 0.95, True) == pytest.approx(2.15)
        assert next_ease_factor(2.0, 0.75, True) == pytest.approx(2.05)
        assert next_ease_factor(2.0, 0.3, False) == pytest.approx(1.8)
        assert next_ease_factor(1.35, 0.1, False) == pytest.approx(1.3)
        assert next_ease_factor(2.95, 1.0, True) == pytest.approx(3.0)

    def test_record_invariants(self):
        with pytest.raises(ValidationError):
            WordReviewRecord(
                word="cat", unit=1, review_count=2, success_count=1, failure_count=0,
                next_due_at=START,
            )
        with pytest.raises(ValidationError):
            WordReviewRecord(
                word="cat", unit=1, review_count=1, success_count=1,
                last_reviewed_at=START, next_due_at=START - timedelta(days=1),
            )


# ============================================================================
# Scheduler
# ============================================================================


class TestRecordReview:

    def test_running_average_and_mastery(self, scheduler):
        scheduler.record_review("cat", 1, 0.9, True)
        scheduler.record_review("cat", 1, 0.85, True)
        record = scheduler.record_review("cat", 1, 0.95, True)

        assert record.review_count == 3
        assert record.avg_smoothness_score == pytest.approx(0.9)
        assert record.blending_mastered is True

    def test_mastery_needs_three_reviews(self, scheduler):
        scheduler.record_review("cat", 1, 1.0)
        record = scheduler.record_review("cat", 1, 1.0)
        assert record.blending_mastered is False

    def test_mastery_is_sticky(self, scheduler):
        for _ in range(3):
            scheduler.record_review("cat", 1, 0.95)
        for _ in range(5):
            record = scheduler.record_review("cat", 1, 0.0, False)

        assert record.avg_smoothness_score < 0.8
        assert record.blending_mastered is True

    def test_failure_due_no_later_than_success(self, clock):
        failing = WordReviewScheduler(clock=clock)
        passing = WordReviewScheduler(clock=clock)
        for scheduler in (failing, passing):
            scheduler.record_review("dog", 1, 0.9, True)
        clock.advance(days=1)

        failed = failing.record_review("dog", 1, 0.2, False)
        passed = passing.record_review("dog", 1, 0.9, True)
        assert failed.next_due_at <= passed.next_due_at

    def test_first_failure_due_sooner_than_first_success(self, clock):
        failed = WordReviewScheduler(clock=clock).record_review("dog", 1, 0.2, False)
        passed = WordReviewScheduler(clock=clock).record_review("dog", 1, 0.9, True)

        assert failed.blending_mastered is False
        assert failed.next_due_at < passed.next_due_at

    def test_unit_is_kept_from_first_review(self, scheduler):
        scheduler.record_review("cat", 1, 0.9)
        record = scheduler.record_review("cat", 4, 0.9)
        assert record.unit == 1

    def test_lookup(self, scheduler):
        assert scheduler.get_word_review("cat") is None
        scheduler.record_review("cat", 1, 0.9)
        assert scheduler.get_word_review("cat").word == "cat"

        reviews = scheduler.get_all_word_reviews()
        reviews.clear()
        assert scheduler.get_word_review("cat") is not None

    def test_returned_records_are_read_only(self, scheduler):
        scheduler.record_review("cat", 1, 0.9)
        record = scheduler.get_all_word_reviews()["cat"]

        with pytest.raises(ValidationError):
            record.blending_mastered = True
        with pytest.raises(ValidationError):
            scheduler.get_word_review("cat").review_count = 99

        assert scheduler.get_word_review("cat").blending_mastered is False
        assert scheduler.get_word_review("cat").review_count == 1


class TestDueWords:

    def test_most_overdue_first(self, scheduler, clock):
        scheduler.record_review("sun", 1, 0.9)      # due in 1 day
        scheduler.record_review("cat", 1, 0.2)      # due now
        scheduler.record_review("map", 3, 0.2)
        clock.advance(days=2)

        due = scheduler.get_due_words()
        assert [record.word for record in due] == ["cat", "map", "sun"]
        assert [record.word for record in scheduler.get_due_words(max_unit=1)] == ["cat", "sun"]

    def test_mastered_words_still_report_due_dates(self, scheduler, clock):
        for _ in range(3):
            scheduler.record_review("cat", 1, 1.0)
        clock.advance(days=30)

        assert [record.word for record in scheduler.get_due_words()] == ["cat"]
        # ...but session selection treats them as fillers after new words
        assert scheduler.get_session_words(["cat", "dog"], unit=1, count=2) == ["dog", "cat"]

    def test_nothing_due_before_due_date(self, scheduler):
        scheduler.record_review("cat", 1, 0.9)
        assert scheduler.get_due_words() == []


class TestSessionWords:

    def test_overdue_word_comes_first(self, scheduler, clock):
        scheduler.record_review("cat", 3, 0.2, False)
        clock.advance(hours=1)

        words = scheduler.get_session_words(["cat", "dog", "sun"], unit=3, count=2)
        assert words[0] == "cat"
        assert len(words) == 2
        assert words[1] in ("dog", "sun")

    def test_priority_order(self, scheduler, clock):
        for _ in range(3):
            scheduler.record_review("map", 1, 1.0)       # mastered
        scheduler.record_review("pin", 1, 0.9)           # pending, due tomorrow
        scheduler.record_review("cat", 1, 0.1)           # due now

        words = scheduler.get_session_words(["pin", "map", "cat", "dog"], unit=1, count=10)
        assert words == ["cat", "dog", "map", "pin"]

    def test_mastered_least_recent_first(self, scheduler, clock):
        for word in ("map", "hat"):
            for _ in range(3):
                scheduler.record_review(word, 1, 1.0)
            clock.advance(hours=1)

        assert scheduler.get_session_words(["hat", "map"], unit=1, count=2) == ["map", "hat"]

    def test_no_duplicates_and_short_catalog(self, scheduler):
        words = scheduler.get_session_words(["cat", "cat", "dog"], unit=1, count=5)
        assert sorted(words) == ["cat", "dog"]

    def test_non_positive_count(self, scheduler):
        assert scheduler.get_session_words(["cat"], unit=1, count=0) == []
        assert scheduler.get_session_words(["cat"], unit=1, count=-2) == []

    def test_unlocked_letters_filter(self, scheduler):
        words = scheduler.get_session_words(
            ["cat", "sat", "dog"], unit=1, count=5, unlocked_letters={"s", "a", "t", "c"}
        )
        assert sorted(words) == ["cat", "sat"]

    def test_vocabulary_items_filtered_by_unit(self, scheduler):
        catalog = [
            VocabularyItem(word="cat", min_unit=1),
            VocabularyItem(word="ship", min_unit=4),
        ]
        assert scheduler.get_session_words(catalog, unit=2, count=5) == ["cat"]

    def test_seeded_rng_is_deterministic(self, clock):
        catalog = ["cat", "dog", "sun", "map", "pin", "hat", "bed", "fox"]
        first = WordReviewScheduler(clock=clock, rng=random.Random(7))
        second = WordReviewScheduler(clock=clock, rng=random.Random(7))

        assert first.get_session_words(catalog, 1, 5) == second.get_session_words(catalog, 1, 5)


def test_fill_in_order_dedupes():
    pools = {"a": [1, 2], "b": [2, 3, 4]}
    assert fill_in_order(pools, ["a", "b"], 3) == [1, 2, 3]


def test_eligible_words_skips_empty():
    assert eligible_words(["", "cat", "cat"], unit=1) == ["cat"]


# ============================================================================
# Stats, export, reset, persistence
# ============================================================================


class TestStats:

    def test_word_stats(self, scheduler, clock):
        scheduler.record_review("cat", 1, 0.9, True)
        scheduler.record_review("cat", 1, 0.5, False)
        scheduler.record_review("cat", 1, 0.9, True)

        stats = scheduler.get_word_stats("cat")
        assert stats.total_reviews == 3
        assert stats.success_rate == pytest.approx(2 / 3)
        assert stats.avg_smoothness == pytest.approx(0.7666, abs=1e-3)
        assert stats.is_mastered is False
        assert stats.days_until_due == 1
        assert scheduler.get_word_stats("dog") is None

    def test_overall_stats(self, scheduler):
        for _ in range(3):
            scheduler.record_review("cat", 1, 1.0)
        scheduler.record_review("dog", 1, 0.6)
        scheduler.record_review("ship", 4, 0.2)

        stats = scheduler.get_overall_blending_stats(max_unit=2)
        assert stats.total_words == 2
        assert stats.mastered_words == 1
        assert stats.in_progress_words == 1
        assert stats.total_reviews == 4
        assert stats.avg_smoothness == pytest.approx((3 * 1.0 + 0.6) / 4)

        assert scheduler.get_overall_blending_stats().total_words == 3

    def test_empty_stats(self, scheduler):
        stats = scheduler.get_overall_blending_stats()
        assert stats.total_words == 0
        assert stats.avg_smoothness == 0.0

    def test_export_is_pure_json(self, scheduler):
        scheduler.record_review("cat", 1, 0.9)
        before = scheduler.get_all_word_reviews()

        data = json.loads(scheduler.export_review_data())
        assert data["cat"]["review_count"] == 1
        assert scheduler.get_all_word_reviews() == before

    def test_reset(self, scheduler):
        scheduler.record_review("cat", 1, 0.9)
        scheduler.reset_all_reviews()
        assert scheduler.get_all_word_reviews() == {}


class TestPersistence:

    def test_round_trip(self, memory_store, clock, rng):
        scheduler = WordReviewScheduler(snapshot_store=memory_store, clock=clock, rng=rng)
        scheduler.record_review("cat", 1, 0.9)
        scheduler.record_review("dog", 2, 0.3)
        scheduler.save()

        restored = WordReviewScheduler.load(memory_store, clock=clock)
        assert restored.get_all_word_reviews() == scheduler.get_all_word_reviews()

    def test_autosave(self, memory_store, clock):
        scheduler = WordReviewScheduler(snapshot_store=memory_store, clock=clock, autosave=True)
        scheduler.record_review("cat", 1, 0.9)
        assert WordReviewScheduler.load(memory_store).get_word_review("cat") is not None

    def test_corrupt_snapshot_loads_empty(self, memory_store):
        memory_store.save(WORD_REVIEW_SNAPSHOT, '{"version": 1, "reviews": {"cat": {"word": 3}}}')
        assert WordReviewScheduler.load(memory_store).get_all_word_reviews() == {}
