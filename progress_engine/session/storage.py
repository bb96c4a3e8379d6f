"""
Session storage - persist the in-flight plan so a learner can resume it.
"""

from __future__ import annotations
from typing import Literal, Optional

from loguru import logger
from pydantic import BaseModel, Field

from progress_engine.persistence.snapshots import (
    SESSION_SNAPSHOT,
    SNAPSHOT_VERSION,
    load_snapshot,
    save_snapshot,
)
from progress_engine.persistence.stores import SnapshotStore
from progress_engine.session.types import ActivityType, SessionMode, SessionPlan, SessionStep


class SessionStepSnapshot(BaseModel):
    activity_type: ActivityType
    word: Optional[str] = None
    difficulty: int = Field(1, ge=1)


class SessionSnapshot(BaseModel):
    """Versioned envelope for the current session plan."""
    version: Literal[1] = SNAPSHOT_VERSION
    mode: SessionMode
    unit: int = Field(..., ge=0)
    steps: list[SessionStepSnapshot] = Field(default_factory=list)
    current_step_index: int = Field(0, ge=0)

    @classmethod
    def from_plan(cls, plan: SessionPlan) -> "SessionSnapshot":
        return cls(
            mode=plan.mode,
            unit=plan.unit,
            steps=[
                SessionStepSnapshot(
                    activity_type=step.activity_type,
                    word=step.word,
                    difficulty=step.difficulty,
                )
                for step in plan.steps
            ],
            current_step_index=plan.current_step_index,
        )

    def to_plan(self) -> SessionPlan:
        return SessionPlan(
            mode=self.mode,
            unit=self.unit,
            steps=tuple(
                SessionStep(
                    activity_type=step.activity_type,
                    word=step.word,
                    difficulty=step.difficulty,
                )
                for step in self.steps
            ),
            current_step_index=self.current_step_index,
        )


class SessionStorage:
    """
    Save, load and clear the current session under one snapshot name.
    """

    def __init__(self, snapshot_store: Optional[SnapshotStore] = None):
        self.snapshot_store = snapshot_store

    def save_session(self, plan: SessionPlan) -> None:
        save_snapshot(self.snapshot_store, SESSION_SNAPSHOT, SessionSnapshot.from_plan(plan))

    def load_session(self, current_unit: Optional[int] = None) -> Optional[SessionPlan]:
        """
        Restore the saved plan.

        An unreadable snapshot, or a plan recorded for another unit, is
        discarded and cleared.

        Args:
            current_unit: Learner's current unit (None skips the unit check)

        Returns:
            SessionPlan, or None when nothing resumable is stored
        """
        snapshot = load_snapshot(self.snapshot_store, SESSION_SNAPSHOT, SessionSnapshot)
        if snapshot is None:
            # Drops an unreadable blob; a no-op when nothing was stored
            self.clear_session()
            return None

        if snapshot.current_step_index > len(snapshot.steps):
            logger.warning(
                f"Discarding session with step {snapshot.current_step_index} "
                f"of {len(snapshot.steps)}"
            )
            self.clear_session()
            return None

        if current_unit is not None and snapshot.unit != current_unit:
            logger.warning(
                f"Discarding stale session for unit {snapshot.unit} (learner is on unit {current_unit})"
            )
            self.clear_session()
            return None

        return snapshot.to_plan()

    def clear_session(self) -> None:
        if self.snapshot_store is None:
            return
        self.snapshot_store.delete(SESSION_SNAPSHOT)
