"""
Scheduling - Word review update rules

Pure spaced-repetition updates (no storage calls).

Main workflow:
1. Load the word's record (caller's responsibility, may be new)
2. Update counts and running smoothness mean
3. Grow or reset the interval and adjust the ease factor
4. Derive the next due date and the sticky mastery flag
5. Return updated record + event data dict

Storage is handled by the WordReviewScheduler.
"""

from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from progress_engine.review.constants import (
    FAILURE_EASE_PENALTY,
    FAILURE_INTERVAL_DAYS,
    INITIAL_INTERVAL_DAYS,
    MASTERY_MIN_REVIEWS,
    MASTERY_MIN_SMOOTHNESS,
    MAX_EASE_FACTOR,
    MAX_INTERVAL_DAYS,
    MIN_EASE_FACTOR,
    SMOOTH_EASE_BONUS,
    SMOOTH_THRESHOLD,
    VERY_SMOOTH_EASE_BONUS,
    VERY_SMOOTH_THRESHOLD,
)
from progress_engine.review.record import WordReviewRecord


def clamp_smoothness(score: float) -> float:
    """Clamp a smoothness score into [0, 1]."""
    return max(0.0, min(1.0, float(score)))


def next_interval(interval_days: int, ease_factor: float, success: bool) -> int:
    """
    Compute the next review interval in days.

    Success grows the previous interval by the ease factor (a first success
    starts at INITIAL_INTERVAL_DAYS); failure resets to FAILURE_INTERVAL_DAYS.
    The result never exceeds MAX_INTERVAL_DAYS.
    """
    if not success:
        return FAILURE_INTERVAL_DAYS

    if interval_days <= 0:
        interval = INITIAL_INTERVAL_DAYS
    else:
        # Always move forward at least one day after a success
        interval = max(interval_days + 1, round(interval_days * ease_factor))

    return min(MAX_INTERVAL_DAYS, interval)


def next_ease_factor(ease_factor: float, smoothness: float, success: bool) -> float:
    """Adjust the ease factor based on how smooth the review was."""
    if not success:
        return max(MIN_EASE_FACTOR, ease_factor - FAILURE_EASE_PENALTY)

    if smoothness >= VERY_SMOOTH_THRESHOLD:
        # Very smooth: make it easier (longer intervals)
        return min(MAX_EASE_FACTOR, ease_factor + VERY_SMOOTH_EASE_BONUS)
    if smoothness >= SMOOTH_THRESHOLD:
        return min(MAX_EASE_FACTOR, ease_factor + SMOOTH_EASE_BONUS)
    return ease_factor


def process_review(
    record: WordReviewRecord,
    smoothness_score: float,
    success: Optional[bool] = None,
    timestamp: Optional[datetime] = None
) -> Tuple[WordReviewRecord, dict]:
    """
    Apply one review to a word record.

    Args:
        record: Current record (may be new, review_count == 0)
        smoothness_score: Blending smoothness in [0, 1] (clamped)
        success: Outcome; defaults to smoothness_score >= SMOOTH_THRESHOLD
        timestamp: Review time (defaults to now)

    Returns:
        Tuple of (updated_record, event_data_dict). The input record is not modified.
    """
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)

    smoothness = clamp_smoothness(smoothness_score)
    if success is None:
        success = smoothness >= SMOOTH_THRESHOLD

    review_count = record.review_count + 1
    avg_smoothness = (
        record.avg_smoothness_score * record.review_count + smoothness
    ) / review_count

    interval_days = next_interval(record.interval_days, record.ease_factor, success)
    ease_factor = next_ease_factor(record.ease_factor, smoothness, success)

    # Mastery is sticky: later failures never clear it
    blending_mastered = record.blending_mastered or (
        review_count >= MASTERY_MIN_REVIEWS and avg_smoothness >= MASTERY_MIN_SMOOTHNESS
    )

    updated = WordReviewRecord(
        word=record.word,
        unit=record.unit,
        review_count=review_count,
        success_count=record.success_count + (1 if success else 0),
        failure_count=record.failure_count + (0 if success else 1),
        avg_smoothness_score=clamp_smoothness(avg_smoothness),
        last_smoothness_score=smoothness,
        blending_mastered=blending_mastered,
        last_reviewed_at=timestamp,
        next_due_at=timestamp + timedelta(days=interval_days),
        interval_days=interval_days,
        ease_factor=ease_factor,
    )

    event_data = {
        'word': record.word,
        'unit': record.unit,
        'timestamp': timestamp,
        'smoothness_score': smoothness,
        'success': success,
        'interval_before': record.interval_days,
        'interval_after': interval_days,
        'ease_before': record.ease_factor,
        'ease_after': ease_factor,
        'became_mastered': blending_mastered and not record.blending_mastered,
    }

    return updated, event_data
