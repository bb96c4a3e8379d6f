"""
Session lifecycle controller.

States:
    MODE_SELECTION -> RUNNING -> COMPLETE                 (auto-flow)
    MODE_SELECTION -> HUB <-> ACTIVITY_IN_PROGRESS        (menu mode)

The controller owns no content: words come from a catalog callable filtered
through the WordReviewScheduler, sentences from an optional provider.
"""

from __future__ import annotations
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, Union

from loguru import logger

from progress_engine import config
from progress_engine.progress.store import ProgressStore
from progress_engine.review.constants import SESSION_SIZE, SMOOTH_THRESHOLD
from progress_engine.review.pools import Candidate
from progress_engine.review.record import WordReviewRecord
from progress_engine.review.scheduler import WordReviewScheduler
from progress_engine.session.flow import (
    advance_step,
    create_auto_flow_session,
    create_menu_mode_session,
    get_next_step,
    get_recommended_mode,
    get_session_progress,
)
from progress_engine.session.storage import SessionStorage
from progress_engine.session.types import (
    ActivityType,
    SessionMode,
    SessionPlan,
    SessionProgress,
)


WordSource = Callable[[int], Iterable[Candidate]]
SentenceProvider = Callable[[int], Optional[str]]
TimerFactory = Callable[..., "threading.Timer"]

DEFAULT_SUBJECT_ID = "blending"


class FlowState(str, Enum):
    MODE_SELECTION = "mode_selection"
    RUNNING = "running"
    COMPLETE = "complete"
    HUB = "hub"
    ACTIVITY_IN_PROGRESS = "activity_in_progress"


class SessionStateError(RuntimeError):
    """Raised when an event arrives in a state that cannot handle it."""


@dataclass(frozen=True)
class CurrentActivity:
    """
    The activity on screen. step_index is None for menu activities.
    """
    activity_type: ActivityType
    word: Optional[str] = None
    sentence: Optional[str] = None
    step_index: Optional[int] = None


class SessionController:
    """
    Drives one learner's session: start or resume, activity completion,
    delayed auto-advance, and teardown.

    Public events and the auto-advance timer run under one lock. A timer-driven
    load releases it while waiting on the sentence provider and re-checks the
    session token afterwards, so teardown never waits on content and a load
    that outlives its session is dropped.
    """

    def __init__(
        self,
        scheduler: WordReviewScheduler,
        word_source: WordSource,
        storage: Optional[SessionStorage] = None,
        sentence_provider: Optional[SentenceProvider] = None,
        progress_store: Optional[ProgressStore] = None,
        subject_id: str = DEFAULT_SUBJECT_ID,
        session_size: int = SESSION_SIZE,
        advance_delay: Optional[float] = None,
        timer_factory: Optional[TimerFactory] = None,
        unlocked_letters: Optional[set[str]] = None
    ):
        """
        Args:
            scheduler: Word review ledger used for word selection and review recording
            word_source: Returns the catalog words available at a unit
            storage: Session persistence (in-memory only when None)
            sentence_provider: Returns a decodable sentence for a unit, or None
            progress_store: Optional store that also receives item attempts
            subject_id: Subject used for progress store item attempts
            session_size: Words drawn for an auto-flow session
            advance_delay: Seconds between completing an activity and loading
                the next (defaults to SESSION_ADVANCE_DELAY; 0 advances immediately)
            timer_factory: Builds the auto-advance timer (threading.Timer signature)
            unlocked_letters: Optional letter set session words must be spelled from
        """
        self.scheduler = scheduler
        self.word_source = word_source
        self.storage = storage or SessionStorage()
        self.sentence_provider = sentence_provider
        self.progress_store = progress_store
        self.subject_id = subject_id
        self.session_size = session_size
        self.advance_delay = config.get_advance_delay() if advance_delay is None else advance_delay
        self.timer_factory = timer_factory or threading.Timer
        self.unlocked_letters = unlocked_letters

        self.state = FlowState.MODE_SELECTION
        self.plan: Optional[SessionPlan] = None
        self.current_activity: Optional[CurrentActivity] = None
        self._timer = None
        # Bumped on every teardown so stale timers are ignored
        self._token = 0
        self._lock = threading.RLock()

    # ---- Queries ----

    @property
    def unit(self) -> Optional[int]:
        return self.plan.unit if self.plan else None

    @property
    def progress(self) -> Optional[SessionProgress]:
        return get_session_progress(self.plan) if self.plan else None

    @property
    def has_pending_advance(self) -> bool:
        return self._timer is not None

    def recommended_mode(self, completed_units: Iterable[int]) -> SessionMode:
        """Recommend a mode from completed units and review history."""
        completed_units = list(completed_units)
        max_unit = max(completed_units) if completed_units else 1
        stats = self.scheduler.get_overall_blending_stats(max_unit)
        return get_recommended_mode(completed_units, stats.total_reviews)

    # ---- Lifecycle ----

    def resume(self, unit: int) -> bool:
        """
        Restore a saved plan for `unit`.

        Returns:
            True if a plan was resumed
        """
        with self._lock:
            plan = self.storage.load_session(current_unit=unit)
            if plan is None:
                return False

            self._teardown()
            self.plan = plan
            logger.info(
                f"Resuming {plan.mode.value} session for unit {unit} at step {plan.current_step_index}"
            )

            if plan.mode == SessionMode.AUTO:
                self.state = FlowState.RUNNING
                self._load_next_activity(self._token)
            else:
                self.state = FlowState.HUB
            return True

    def start(self, mode: Union[SessionMode, str], unit: int) -> SessionPlan:
        """
        Start a new session, replacing any saved one.
        """
        mode = SessionMode(mode)
        with self._lock:
            self._teardown()

            if mode == SessionMode.AUTO:
                words = self.scheduler.get_session_words(
                    self.word_source(unit), unit, self.session_size, self.unlocked_letters
                )
                plan = create_auto_flow_session(unit, words)
            else:
                plan = create_menu_mode_session(unit)

            self.plan = plan
            self.storage.save_session(plan)
            logger.info(f"Started {mode.value} session for unit {unit} with {plan.total_steps} steps")

            if mode == SessionMode.AUTO:
                self.state = FlowState.RUNNING
                self._load_next_activity(self._token)
            else:
                self.state = FlowState.HUB
            return plan

    def suspend(self) -> None:
        """
        Leave the session without discarding it; resume() picks it up later.
        """
        with self._lock:
            self._teardown()
            self.plan = None
            self.state = FlowState.MODE_SELECTION

    def exit(self) -> None:
        """Abandon the session and clear the stored plan."""
        with self._lock:
            self._teardown()
            self.storage.clear_session()
            self.plan = None
            self.state = FlowState.MODE_SELECTION
            logger.info("Session exited")

    # ---- Events ----

    def choose_activity(self, activity_type: Union[ActivityType, str]) -> Optional[CurrentActivity]:
        """
        Menu mode: draw content for the chosen activity.

        Returns:
            The new CurrentActivity, or None when no content is available
            (the controller stays in the hub)
        """
        with self._lock:
            if self.state != FlowState.HUB:
                raise SessionStateError(f"Cannot choose an activity in state {self.state.value}")

            activity_type = ActivityType(activity_type)
            unit = self.plan.unit

            if activity_type == ActivityType.SENTENCE:
                sentence = self._draw_sentence(unit)
                if sentence is None:
                    logger.info(f"No sentence available for unit {unit}")
                    return None
                activity = CurrentActivity(activity_type=activity_type, sentence=sentence)
            else:
                words = self.scheduler.get_session_words(
                    self.word_source(unit), unit, 1, self.unlocked_letters
                )
                if not words:
                    logger.info(f"No words available for unit {unit}")
                    return None
                activity = CurrentActivity(activity_type=activity_type, word=words[0])

            self.current_activity = activity
            self.state = FlowState.ACTIVITY_IN_PROGRESS
            return activity

    def complete_activity(self, score: Optional[float] = None) -> Optional[WordReviewRecord]:
        """
        Finish the current activity.

        A score on a word activity is recorded as a blending review (and as an
        item attempt when a progress store is attached). Auto mode then
        advances, saves, and loads the next activity after advance_delay;
        menu mode returns to the hub.

        Args:
            score: Smoothness score in [0, 1], or None when not scored

        Returns:
            Updated WordReviewRecord when a review was recorded
        """
        with self._lock:
            if self.current_activity is None or self.state not in (
                FlowState.RUNNING, FlowState.ACTIVITY_IN_PROGRESS
            ):
                raise SessionStateError(f"No activity to complete in state {self.state.value}")

            activity = self.current_activity
            self.current_activity = None

            record = None
            if score is not None and activity.word is not None:
                record = self.scheduler.record_review(activity.word, self.plan.unit, score)
                if self.progress_store is not None:
                    self.progress_store.record_item_attempt(
                        self.subject_id, activity.word, is_correct=score >= SMOOTH_THRESHOLD
                    )

            if self.plan.mode == SessionMode.AUTO:
                self.plan = advance_step(self.plan)
                self.storage.save_session(self.plan)
                self._schedule_advance()
            else:
                self.state = FlowState.HUB

            return record

    # ---- Internals ----

    def _draw_sentence(self, unit: int) -> Optional[str]:
        if self.sentence_provider is None:
            return None
        return self.sentence_provider(unit) or None

    def _is_live(self, token: int) -> bool:
        return token == self._token and self.state == FlowState.RUNNING

    def _load_next_activity(self, token: int) -> Optional[CurrentActivity]:
        """
        Load the current step, skipping narrative steps with no sentence and
        finishing the session at the end of the plan.

        Does nothing once the session identified by `token` is torn down.
        """
        while True:
            with self._lock:
                if not self._is_live(token):
                    logger.debug("Dropping activity load for a torn-down session")
                    return None

                step = get_next_step(self.plan)
                if step is None:
                    self._finish()
                    return None

                if not step.is_narrative:
                    self.current_activity = CurrentActivity(
                        activity_type=step.activity_type,
                        word=step.word,
                        step_index=self.plan.current_step_index,
                    )
                    logger.debug(
                        f"Loaded step {self.plan.current_step_index}: "
                        f"{step.activity_type.value} {step.word!r}"
                    )
                    return self.current_activity

                unit = self.plan.unit
                step_index = self.plan.current_step_index

            # Called outside the lock on the timer thread
            sentence = self._draw_sentence(unit)

            with self._lock:
                if not self._is_live(token) or self.plan.current_step_index != step_index:
                    logger.debug("Dropping sentence for a torn-down session")
                    return None

                if sentence is not None:
                    self.current_activity = CurrentActivity(
                        activity_type=step.activity_type,
                        sentence=sentence,
                        step_index=step_index,
                    )
                    return self.current_activity

                logger.info(f"Skipping sentence step {step_index}: no sentence available")
                self.plan = advance_step(self.plan)
                self.storage.save_session(self.plan)

    def _schedule_advance(self) -> None:
        if self.advance_delay <= 0:
            self._load_next_activity(self._token)
            return

        self._timer = self.timer_factory(self.advance_delay, self._on_advance_timer, args=(self._token,))
        self._timer.daemon = True
        self._timer.start()

    def _on_advance_timer(self, token: int) -> None:
        with self._lock:
            if not self._is_live(token):
                logger.debug("Ignoring advance timer for a torn-down session")
                return
            self._timer = None
        self._load_next_activity(token)

    def _finish(self) -> None:
        self.storage.clear_session()
        self.current_activity = None
        self.state = FlowState.COMPLETE
        logger.info(f"Session complete for unit {self.plan.unit}")

    def _teardown(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._token += 1
        self.current_activity = None
