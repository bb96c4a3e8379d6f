"""
Progress Store - Per-subject learning progress

The only writer of item, lesson and unit progress and of the learner's global
XP / level / streak. Every recorded attempt or completion goes through the
mastery model.

The store is forgiving: operations on a subject that was never initialized
create it on the fly, and queries for unknown ids return neutral defaults.

Lifecycle:
    store = ProgressStore.load(snapshot_store)   # or ProgressStore()
    store.record_item_attempt("reading", "cat", True)
    store.save()
"""

from __future__ import annotations
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

from loguru import logger

from progress_engine.mastery import (
    DEFAULT_MASTERY_CONFIG,
    DecayPolicy,
    MasteryConfig,
    calculate_mastery,
    calculate_stars,
    clamp_score,
    level_for_xp,
)
from progress_engine.persistence.snapshots import (
    PROGRESS_SNAPSHOT,
    load_snapshot,
    persist_after,
    save_snapshot,
)
from progress_engine.persistence.stores import SnapshotStore
from progress_engine.progress.state import (
    ActivityResult,
    GlobalState,
    ItemProgress,
    LessonProgress,
    ProgressSnapshot,
    SubjectProgress,
    UnitProgress,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProgressStore:
    """
    Authoritative progress state for one learner.
    """

    def __init__(
        self,
        snapshot_store: Optional[SnapshotStore] = None,
        config: Optional[MasteryConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        decay_policy: Optional[DecayPolicy] = None,
        autosave: bool = False
    ):
        """
        Args:
            snapshot_store: Where save() writes (None keeps the store in memory only)
            config: Mastery parameters (defaults to DEFAULT_MASTERY_CONFIG)
            clock: Returns the current UTC time (injectable for tests)
            decay_policy: Read-time forgetting transform for get_item_mastery
            autosave: Save after every mutating call
        """
        self.snapshot_store = snapshot_store
        self.config = config or DEFAULT_MASTERY_CONFIG
        self.clock = clock or _utc_now
        self.decay_policy = decay_policy
        self.autosave = autosave

        self.subjects: dict[str, SubjectProgress] = {}
        self.global_state = GlobalState()

    # ---- Persistence ----

    @classmethod
    def load(cls, snapshot_store: SnapshotStore, **kwargs) -> "ProgressStore":
        """
        Restore a store from its snapshot, or start empty if none is usable.
        """
        store = cls(snapshot_store=snapshot_store, **kwargs)
        snapshot = load_snapshot(snapshot_store, PROGRESS_SNAPSHOT, ProgressSnapshot)
        if snapshot is None:
            logger.debug("No usable progress snapshot, starting empty")
            return store

        store.subjects = dict(snapshot.subjects)
        store.global_state = snapshot.global_state
        return store

    def save(self) -> None:
        """Write the current state to the snapshot store."""
        snapshot = ProgressSnapshot(subjects=self.subjects, global_state=self.global_state)
        save_snapshot(self.snapshot_store, PROGRESS_SNAPSHOT, snapshot)

    # ---- Subjects ----

    def _ensure_subject(self, subject_id: str) -> SubjectProgress:
        subject = self.subjects.get(subject_id)
        if subject is None:
            subject = SubjectProgress(subject_id=subject_id, started_at=self.clock())
            self.subjects[subject_id] = subject
            logger.debug(f"Initialized progress for subject {subject_id!r}")
        return subject

    @persist_after
    def initialize_subject(self, subject_id: str) -> None:
        """Create empty progress for a subject; existing history is left untouched."""
        self._ensure_subject(subject_id)

    # ---- Attempts & completions ----

    @persist_after
    def record_item_attempt(self, subject_id: str, item_id: str, is_correct: bool) -> ItemProgress:
        """
        Record an attempt on a content item and update its mastery.

        Args:
            subject_id: Subject the item belongs to
            item_id: Item identifier
            is_correct: Whether the attempt succeeded

        Returns:
            Updated ItemProgress
        """
        subject = self._ensure_subject(subject_id)
        existing = subject.item_progress.get(item_id) or ItemProgress(
            item_id=item_id,
            subject_id=subject_id
        )
        now = self.clock()

        attempts = existing.attempts + 1
        correct_attempts = existing.correct_attempts + 1 if is_correct else existing.correct_attempts
        mastery = calculate_mastery(existing.mastery, is_correct, attempts, self.config)

        completed_at = existing.completed_at
        if (
            completed_at is None
            and mastery >= self.config.completion_threshold
            and attempts >= self.config.min_attempts_for_mastery
        ):
            completed_at = now

        updated = ItemProgress(
            item_id=item_id,
            subject_id=subject_id,
            attempts=attempts,
            correct_attempts=correct_attempts,
            mastery=mastery,
            streak_count=existing.streak_count + 1 if is_correct else 0,
            last_attempt_at=now,
            completed_at=completed_at
        )

        subject.item_progress[item_id] = updated
        subject.last_activity_at = now
        return updated

    @persist_after
    def complete_lesson(
        self,
        subject_id: str,
        lesson_id: str,
        score: float,
        unit_id: Optional[str] = None
    ) -> LessonProgress:
        """
        Mark a lesson completed, keeping the best score and stars ever earned.
        """
        subject = self._ensure_subject(subject_id)
        existing = subject.lesson_progress.get(lesson_id)

        score = int(round(clamp_score(score)))
        best_score = max(score, existing.best_score if existing else 0)

        updated = LessonProgress(
            lesson_id=lesson_id,
            subject_id=subject_id,
            unit_id=unit_id or (existing.unit_id if existing else None),
            completed=True,
            best_score=best_score,
            stars_earned=calculate_stars(best_score),
            completed_at=existing.completed_at if existing and existing.completed_at else self.clock()
        )

        subject.lesson_progress[lesson_id] = updated
        return updated

    def _update_unit(self, subject_id: str, unit_id: str, **changes) -> None:
        subject = self._ensure_subject(subject_id)
        unit = subject.unit_progress.get(unit_id) or UnitProgress(unit_id=unit_id, subject_id=subject_id)
        subject.unit_progress[unit_id] = unit.model_copy(update=changes)

    @persist_after
    def unlock_unit(self, subject_id: str, unit_id: str) -> None:
        if not self.is_unit_unlocked(subject_id, unit_id):
            self._update_unit(subject_id, unit_id, unlocked=True, unlocked_at=self.clock())

    @persist_after
    def complete_unit(self, subject_id: str, unit_id: str) -> None:
        progress = self.get_unit_progress(subject_id, unit_id)
        if progress is None or not progress.completed:
            self._update_unit(subject_id, unit_id, completed=True, completed_at=self.clock())

    @persist_after
    def complete_activity(self, result: ActivityResult) -> GlobalState:
        """
        Award XP for a finished activity and update level and daily streak.

        Returns:
            Updated GlobalState
        """
        now = self.clock()
        subject = self._ensure_subject(result.subject_id)

        total_xp = self.global_state.total_xp + result.xp_earned
        # Level is derived from XP but never decremented
        current_level = max(self.global_state.current_level, level_for_xp(total_xp))
        if current_level > self.global_state.current_level:
            logger.info(f"Level up: {self.global_state.current_level} -> {current_level}")

        subject.total_xp += result.xp_earned
        subject.last_activity_at = result.timestamp or now

        daily_streak, last_activity_date = self._next_streak(now)
        self.global_state = GlobalState(
            total_xp=total_xp,
            current_level=current_level,
            daily_streak=daily_streak,
            last_activity_date=last_activity_date
        )
        return self.global_state

    # ---- Streak ----

    def _next_streak(self, now: datetime) -> tuple[int, date]:
        """Streak and activity date after practicing at `now`."""
        today = now.date()
        last = self.global_state.last_activity_date

        if last == today:
            # Already practiced today, no streak change
            return self.global_state.daily_streak, today

        if last == today - timedelta(days=1):
            return self.global_state.daily_streak + 1, today
        # First activity or streak broken
        return 1, today

    def get_streak_days(self) -> int:
        """Current streak, or 0 if the learner missed a day."""
        last = self.global_state.last_activity_date
        if last is None:
            return 0
        today = self.clock().date()
        if last in (today, today - timedelta(days=1)):
            return self.global_state.daily_streak
        return 0

    # ---- Queries ----

    def get_subject_progress(self, subject_id: str) -> Optional[SubjectProgress]:
        """Detached copy of a subject; changes to it do not reach the store."""
        subject = self.subjects.get(subject_id)
        return subject.model_copy(deep=True) if subject else None

    def get_item_progress(self, subject_id: str, item_id: str) -> Optional[ItemProgress]:
        subject = self.subjects.get(subject_id)
        return subject.item_progress.get(item_id) if subject else None

    def get_lesson_progress(self, subject_id: str, lesson_id: str) -> Optional[LessonProgress]:
        subject = self.subjects.get(subject_id)
        return subject.lesson_progress.get(lesson_id) if subject else None

    def get_unit_progress(self, subject_id: str, unit_id: str) -> Optional[UnitProgress]:
        subject = self.subjects.get(subject_id)
        return subject.unit_progress.get(unit_id) if subject else None

    def get_item_mastery(self, subject_id: str, item_id: str, apply_decay: bool = False) -> float:
        """
        Mastery for an item (0 for unknown items).

        With apply_decay and a configured decay policy, the value is reported
        with forgetting applied; stored mastery is not changed.
        """
        progress = self.get_item_progress(subject_id, item_id)
        if progress is None:
            return 0.0
        if apply_decay and self.decay_policy is not None:
            return self.decay_policy(progress.mastery, progress.last_attempt_at, self.clock())
        return progress.mastery

    def is_item_completed(
        self,
        subject_id: str,
        item_id: str,
        threshold: Optional[float] = None
    ) -> bool:
        if threshold is None:
            threshold = self.config.completion_threshold
        return self.get_item_mastery(subject_id, item_id) >= threshold

    def is_lesson_completed(self, subject_id: str, lesson_id: str) -> bool:
        progress = self.get_lesson_progress(subject_id, lesson_id)
        return progress.completed if progress else False

    def is_unit_unlocked(self, subject_id: str, unit_id: str) -> bool:
        progress = self.get_unit_progress(subject_id, unit_id)
        return progress.unlocked if progress else False

    # ---- Reset ----

    @persist_after
    def reset_subject_progress(self, subject_id: str) -> None:
        """Replace one subject's progress with an empty record."""
        self.subjects[subject_id] = SubjectProgress(subject_id=subject_id, started_at=self.clock())

    @persist_after
    def reset_all_progress(self) -> None:
        """Clear every subject and reset XP, level and streak."""
        self.subjects = {}
        self.global_state = GlobalState()
        logger.info("All progress reset")
