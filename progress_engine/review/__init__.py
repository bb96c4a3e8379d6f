"""
Word review scheduling (spaced repetition for blending practice).

Quick start:
    from progress_engine.review import WordReviewScheduler

    scheduler = WordReviewScheduler()
    scheduler.record_review("cat", unit=1, smoothness_score=0.9)
    due = scheduler.get_due_words()
"""

from progress_engine.review.constants import (
    MAX_INTERVAL_DAYS,
    SESSION_SIZE,
    SMOOTH_THRESHOLD,
)
from progress_engine.review.record import (
    WordReviewRecord,
    WordReviewSnapshot,
    initialize_new_record,
)
from progress_engine.review.scheduler import (
    BlendingStats,
    WordReviewScheduler,
    WordStats,
)
from progress_engine.review.scheduling import process_review


__all__ = [
    # Scheduler
    "WordReviewScheduler",
    "BlendingStats",
    "WordStats",

    # Records
    "WordReviewRecord",
    "WordReviewSnapshot",
    "initialize_new_record",

    # Algorithm
    "process_review",

    # Parameters
    "MAX_INTERVAL_DAYS",
    "SESSION_SIZE",
    "SMOOTH_THRESHOLD",
]
