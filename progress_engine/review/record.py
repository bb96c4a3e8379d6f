"""
Word Review Record - Spaced-repetition state for one word

Key concepts:
- Smoothness: per-review blending quality in [0, 1], averaged over all reviews
- Interval: days between last review and next due date
- Ease factor: multiplier growing the interval after each success
- Blending mastered: sticky flag, once true it never goes back
"""

from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from progress_engine.persistence.snapshots import SNAPSHOT_VERSION
from progress_engine.review.constants import INITIAL_EASE_FACTOR


class WordReviewRecord(BaseModel):
    """
    Review ledger entry for a single word. Immutable; reviews produce a new record.
    """
    model_config = ConfigDict(frozen=True)

    word: str
    unit: int = Field(..., ge=0)

    # Review tracking
    review_count: int = Field(0, ge=0)
    success_count: int = Field(0, ge=0)
    failure_count: int = Field(0, ge=0)

    # Smoothness (running mean over every recorded score)
    avg_smoothness_score: float = Field(0.0, ge=0.0, le=1.0)
    last_smoothness_score: Optional[float] = Field(None, ge=0.0, le=1.0)

    blending_mastered: bool = False

    # Scheduling
    last_reviewed_at: Optional[datetime] = None
    next_due_at: datetime
    interval_days: int = Field(0, ge=0)
    ease_factor: float = INITIAL_EASE_FACTOR

    @model_validator(mode="after")
    def _check_invariants(self) -> "WordReviewRecord":
        if self.success_count + self.failure_count != self.review_count:
            raise ValueError("success_count + failure_count must equal review_count")
        if self.last_reviewed_at is not None and self.next_due_at < self.last_reviewed_at:
            raise ValueError("next_due_at cannot precede last_reviewed_at")
        return self

    @property
    def is_new(self) -> bool:
        return self.review_count == 0

    def is_due(self, now: datetime) -> bool:
        """Due when reviewed at least once and the due date has passed."""
        return not self.is_new and self.next_due_at <= now


def initialize_new_record(word: str, unit: int, now: datetime) -> WordReviewRecord:
    """
    Initialize state for a word that has never been reviewed.

    Args:
        word: Word string
        unit: Unit the word is practiced in
        now: Current time (becomes the initial due date)

    Returns:
        New WordReviewRecord with zero reviews
    """
    return WordReviewRecord(
        word=word,
        unit=max(0, int(unit)),
        next_due_at=now,
    )


class WordReviewSnapshot(BaseModel):
    """Persisted form of the WordReviewScheduler."""
    version: Literal[1] = SNAPSHOT_VERSION
    reviews: dict[str, WordReviewRecord] = Field(default_factory=dict)
