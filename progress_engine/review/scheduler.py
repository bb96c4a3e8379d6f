"""
Word Review Scheduler - Spaced repetition for blending practice

Tracks a review ledger per word, independent from the generic ProgressStore:
review cadence is measured in days while lesson mastery is session-local.

Quick start:
    scheduler = WordReviewScheduler.load(snapshot_store)
    scheduler.record_review("cat", unit=1, smoothness_score=0.9, success=True)
    words = scheduler.get_session_words(["cat", "dog", "sun"], unit=1, count=2)
    scheduler.save()
"""

from __future__ import annotations
import json
import math
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from loguru import logger

from progress_engine.persistence.snapshots import (
    WORD_REVIEW_SNAPSHOT,
    load_snapshot,
    persist_after,
    save_snapshot,
)
from progress_engine.persistence.stores import SnapshotStore
from progress_engine.review.pools import (
    POOL_ORDER,
    Candidate,
    build_word_pools,
    eligible_words,
    fill_in_order,
)
from progress_engine.review.record import (
    WordReviewRecord,
    WordReviewSnapshot,
    initialize_new_record,
)
from progress_engine.review.scheduling import process_review


@dataclass(frozen=True)
class BlendingStats:
    """Aggregate review statistics over a set of words."""
    total_words: int
    mastered_words: int
    in_progress_words: int
    total_reviews: int
    avg_smoothness: float


@dataclass(frozen=True)
class WordStats:
    """Review statistics for a single word."""
    total_reviews: int
    success_rate: float
    avg_smoothness: float
    is_mastered: bool
    days_until_due: int


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WordReviewScheduler:
    """
    Per-learner spaced-repetition ledger keyed by word string.
    """

    def __init__(
        self,
        snapshot_store: Optional[SnapshotStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
        autosave: bool = False
    ):
        """
        Args:
            snapshot_store: Where save() writes (None keeps reviews in memory only)
            clock: Returns the current UTC time (injectable for tests)
            rng: Random source used to order new words (seed it for determinism)
            autosave: Save after every mutating call
        """
        self.snapshot_store = snapshot_store
        self.clock = clock or _utc_now
        self.rng = rng or random.Random()
        self.autosave = autosave
        self._reviews: dict[str, WordReviewRecord] = {}

    # ---- Persistence ----

    @classmethod
    def load(cls, snapshot_store: SnapshotStore, **kwargs) -> "WordReviewScheduler":
        """
        Restore the ledger from its snapshot, or start empty if none is usable.
        """
        scheduler = cls(snapshot_store=snapshot_store, **kwargs)
        snapshot = load_snapshot(snapshot_store, WORD_REVIEW_SNAPSHOT, WordReviewSnapshot)
        if snapshot is None:
            logger.debug("No usable word review snapshot, starting empty")
            return scheduler

        scheduler._reviews = dict(snapshot.reviews)
        return scheduler

    def save(self) -> None:
        """Write the ledger to the snapshot store."""
        save_snapshot(
            self.snapshot_store,
            WORD_REVIEW_SNAPSHOT,
            WordReviewSnapshot(reviews=self._reviews)
        )

    # ---- Reviews ----

    @persist_after
    def record_review(
        self,
        word: str,
        unit: int,
        smoothness_score: float,
        success: Optional[bool] = None
    ) -> WordReviewRecord:
        """
        Record a review attempt and update scheduling.

        Args:
            word: Word that was practiced
            unit: Unit the learner is in (stored on first review)
            smoothness_score: Blending smoothness in [0, 1]
            success: Outcome; defaults to smoothness_score >= SMOOTH_THRESHOLD

        Returns:
            Updated WordReviewRecord
        """
        now = self.clock()
        record = self._reviews.get(word) or initialize_new_record(word, unit, now)

        updated, event_data = process_review(record, smoothness_score, success, timestamp=now)
        self._reviews[word] = updated

        if event_data["became_mastered"]:
            logger.info(f"Word {word!r} blending mastered after {updated.review_count} reviews")
        logger.debug(
            f"Review {word!r}: success={event_data['success']} "
            f"interval {event_data['interval_before']}d -> {event_data['interval_after']}d"
        )
        return updated

    def get_word_review(self, word: str) -> Optional[WordReviewRecord]:
        return self._reviews.get(word)

    def get_all_word_reviews(self) -> dict[str, WordReviewRecord]:
        """Copy of the full ledger (word -> record)."""
        return dict(self._reviews)

    def get_due_words(self, max_unit: Optional[int] = None) -> list[WordReviewRecord]:
        """
        Records due now or overdue, most overdue first.
        """
        now = self.clock()
        due = [
            record for record in self._reviews.values()
            if (max_unit is None or record.unit <= max_unit) and record.is_due(now)
        ]
        due.sort(key=lambda record: record.next_due_at)
        return due

    # ---- Session selection ----

    def get_session_words(
        self,
        available_words: Iterable[Candidate],
        unit: int,
        count: int,
        unlocked_letters: Optional[set[str]] = None
    ) -> list[str]:
        """
        Pick words for a session.

        Priority order: overdue unmastered words (most overdue first), then
        never-reviewed words, then mastered words (least recently reviewed
        first), then reviewed words that are not yet due. No word appears
        twice; when the catalog runs short, fewer than `count` words come back.

        Args:
            available_words: Catalog words (strings or VocabularyItem records)
            unit: Learner's current unit
            count: Number of words wanted
            unlocked_letters: Optional letter set the words must be spelled from

        Returns:
            Ordered list of words
        """
        if count <= 0:
            return []

        words = eligible_words(available_words, unit, unlocked_letters)
        pools = build_word_pools(self._reviews, words, self.clock(), self.rng)
        session = fill_in_order(pools.as_dict(), POOL_ORDER, count)

        if len(session) < count:
            logger.debug(f"Session words short: wanted {count}, got {len(session)}")
        return session

    # ---- Stats ----

    def get_word_stats(self, word: str) -> Optional[WordStats]:
        """Statistics for one word, or None if it was never reviewed."""
        record = self._reviews.get(word)
        if record is None or record.is_new:
            return None

        seconds_until_due = (record.next_due_at - self.clock()).total_seconds()
        return WordStats(
            total_reviews=record.review_count,
            success_rate=record.success_count / record.review_count,
            avg_smoothness=record.avg_smoothness_score,
            is_mastered=record.blending_mastered,
            days_until_due=math.ceil(seconds_until_due / 86400),
        )

    def get_overall_blending_stats(self, max_unit: Optional[int] = None) -> BlendingStats:
        """
        Aggregate statistics over words whose unit is <= max_unit.

        avg_smoothness is weighted by review count.
        """
        records = [
            record for record in self._reviews.values()
            if max_unit is None or record.unit <= max_unit
        ]

        total_reviews = sum(record.review_count for record in records)
        avg_smoothness = (
            sum(record.avg_smoothness_score * record.review_count for record in records) / total_reviews
            if total_reviews > 0
            else 0.0
        )

        return BlendingStats(
            total_words=len(records),
            mastered_words=sum(1 for record in records if record.blending_mastered),
            in_progress_words=sum(
                1 for record in records if record.review_count > 0 and not record.blending_mastered
            ),
            total_reviews=total_reviews,
            avg_smoothness=avg_smoothness,
        )

    def export_review_data(self) -> str:
        """
        Human-readable JSON snapshot of every record, for backups or a parent view.
        """
        data = {
            word: record.model_dump(mode="json")
            for word, record in sorted(self._reviews.items())
        }
        return json.dumps(data, indent=2)

    # ---- Reset ----

    @persist_after
    def reset_all_reviews(self) -> None:
        self._reviews = {}
        logger.info("All word reviews reset")
