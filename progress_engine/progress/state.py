"""
Progress State - Records owned by the ProgressStore

Records are pydantic models so that an out-of-range value (mastery above 100,
more correct attempts than attempts, ...) fails at construction instead of
silently reaching persisted state. Item, lesson and unit records and the
global state are frozen; the store replaces them rather than editing them.
"""

from __future__ import annotations
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from progress_engine.persistence.snapshots import SNAPSHOT_VERSION


class ItemProgress(BaseModel):
    """Attempt history and mastery for one practice item."""
    model_config = ConfigDict(frozen=True)

    item_id: str
    subject_id: str
    attempts: int = Field(0, ge=0)
    correct_attempts: int = Field(0, ge=0)
    mastery: float = Field(0.0, ge=0.0, le=100.0)
    streak_count: int = Field(0, ge=0)
    last_attempt_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None  # First time mastery crossed the completion threshold

    @model_validator(mode="after")
    def _check_counts(self) -> "ItemProgress":
        if self.correct_attempts > self.attempts:
            raise ValueError("correct_attempts cannot exceed attempts")
        return self


class LessonProgress(BaseModel):
    """Best-of-all-attempts result for one lesson."""
    model_config = ConfigDict(frozen=True)

    lesson_id: str
    subject_id: str
    unit_id: Optional[str] = None
    completed: bool = False
    best_score: int = Field(0, ge=0, le=100)
    stars_earned: int = Field(0, ge=0, le=3)
    completed_at: Optional[datetime] = None


class UnitProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    unit_id: str
    subject_id: str
    unlocked: bool = False
    unlocked_at: Optional[datetime] = None
    completed: bool = False
    completed_at: Optional[datetime] = None


class SubjectProgress(BaseModel):
    """All progress for one subject (reading, math, ...)."""
    subject_id: str
    item_progress: dict[str, ItemProgress] = Field(default_factory=dict)
    lesson_progress: dict[str, LessonProgress] = Field(default_factory=dict)
    unit_progress: dict[str, UnitProgress] = Field(default_factory=dict)
    total_xp: int = Field(0, ge=0)
    started_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None


class GlobalState(BaseModel):
    """Learner-wide XP, level and daily streak."""
    model_config = ConfigDict(frozen=True)

    total_xp: int = Field(0, ge=0)
    current_level: int = Field(1, ge=1)
    daily_streak: int = Field(0, ge=0)
    last_activity_date: Optional[date] = None


class ActivityResult(BaseModel):
    """Outcome of one finished activity, as reported by the presentation layer."""
    activity_id: str
    subject_id: str
    activity_type: str
    item_id: Optional[str] = None
    is_correct: bool
    score: float = Field(..., ge=0, le=100)
    xp_earned: int = Field(0, ge=0)
    duration_seconds: float = Field(0.0, ge=0)
    attempts: int = Field(1, ge=0)
    timestamp: Optional[datetime] = None


class ProgressSnapshot(BaseModel):
    """Persisted form of the ProgressStore."""
    version: Literal[1] = SNAPSHOT_VERSION
    subjects: dict[str, SubjectProgress] = Field(default_factory=dict)
    global_state: GlobalState = Field(default_factory=GlobalState)
