"""
Mastery Model - Pure scoring functions

Converts attempt outcomes into mastery values, XP awards, star ratings and
levels. No state and no I/O, so every function here is safe to call from
anywhere.

Key behaviours:
- Mastery gain shrinks with the number of attempts it took (gain / attempt)
- Failures cost a flat penalty regardless of attempt number
- Levels follow a geometric XP curve and never go down while XP grows
- Forgetting is applied at read time only (see decayed_mastery)
"""

from __future__ import annotations
import math
from datetime import datetime
from typing import Callable, Optional, Sequence

from progress_engine.mastery.constants import (
    DEFAULT_MASTERY_CONFIG,
    DIFFICULTY_MAX,
    DIFFICULTY_MIN,
    FIRST_COMPLETION_BONUS,
    LEVEL_SCALING,
    MASTERY_MAX,
    MASTERY_MIN,
    SCORE_MAX,
    SCORE_MIN,
    STAR_BANDS,
    XP_PER_DIFFICULTY,
    XP_PER_LEVEL,
    MasteryConfig,
)


DecayPolicy = Callable[[float, Optional[datetime], datetime], float]


# ---- Boundary helpers ----

def clamp_score(score: float) -> float:
    """Clamp a score into [0, 100]."""
    return max(float(SCORE_MIN), min(float(SCORE_MAX), float(score)))


def clamp_mastery(mastery: float) -> float:
    return max(MASTERY_MIN, min(MASTERY_MAX, float(mastery)))


def clamp_difficulty(difficulty: int) -> int:
    return max(DIFFICULTY_MIN, min(DIFFICULTY_MAX, int(difficulty)))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ---- Mastery ----

def calculate_mastery(
    current: float,
    is_correct: bool,
    attempt_number: int,
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG
) -> float:
    """
    Calculate the new mastery value after one attempt.

    Formula:
        success: min(100, current + correct_gain / attempt_number)
        failure: max(0, current - incorrect_loss)

    Args:
        current: Mastery before this attempt (clamped to [0, 100])
        is_correct: Whether the attempt succeeded
        attempt_number: 1-based ordinal of this attempt (values < 1 count as 1)
        config: Mastery tuning parameters

    Returns:
        New mastery value in [0, 100]
    """
    current = clamp_mastery(current)
    attempt_number = max(1, int(attempt_number))

    if is_correct:
        gain = config.correct_gain / attempt_number
        return min(MASTERY_MAX, current + gain)

    return max(MASTERY_MIN, current - config.incorrect_loss)


def decayed_mastery(
    mastery: float,
    last_attempt_at: Optional[datetime],
    now: datetime,
    decay_rate: float = DEFAULT_MASTERY_CONFIG.decay_rate
) -> float:
    """
    Report mastery with forgetting applied, without touching stored state.

    Decay only kicks in once more than one whole day has passed since the last
    attempt: mastery * (1 - decay_rate) ** days_elapsed.
    """
    if last_attempt_at is None:
        return clamp_mastery(mastery)

    days_elapsed = int((now - last_attempt_at).total_seconds() // 86400)
    if days_elapsed <= 1:
        return clamp_mastery(mastery)

    rate = max(0.0, min(1.0, decay_rate))
    return clamp_mastery(mastery * (1.0 - rate) ** days_elapsed)


def exponential_decay(decay_rate: float = DEFAULT_MASTERY_CONFIG.decay_rate) -> DecayPolicy:
    """Build a decay policy usable by ProgressStore(decay_policy=...)."""
    def _policy(mastery: float, last_attempt_at: Optional[datetime], now: datetime) -> float:
        return decayed_mastery(mastery, last_attempt_at, now, decay_rate)

    return _policy


# ---- XP & Stars ----

def calculate_xp(score: float, difficulty: int, is_first_completion: bool) -> int:
    """
    Calculate XP earned for a completed activity.

    xp = round(score / 10) + difficulty * 2 + (5 if first completion)
    """
    base_xp = _round_half_up(clamp_score(score) / 10.0)
    difficulty_bonus = clamp_difficulty(difficulty) * XP_PER_DIFFICULTY
    first_completion_bonus = FIRST_COMPLETION_BONUS if is_first_completion else 0

    return base_xp + difficulty_bonus + first_completion_bonus


def calculate_stars(score: float) -> int:
    """Calculate stars earned (0-3) for a score."""
    score = clamp_score(score)
    for min_score, stars in STAR_BANDS:
        if score >= min_score:
            return stars
    return 0


def calculate_activity_score(answers: Sequence[bool]) -> int:
    """Percentage of correct answers, rounded; 0 for an empty activity."""
    if not answers:
        return 0
    correct = sum(1 for answer in answers if answer)
    return _round_half_up(correct / len(answers) * 100)


# ---- Levels ----

def xp_for_next_level(level: int) -> int:
    """XP needed to go from `level` to `level + 1`."""
    level = max(1, int(level))
    return int(math.floor(XP_PER_LEVEL * LEVEL_SCALING ** (level - 1)))


def level_progress(total_xp: int) -> tuple[int, int, int]:
    """
    Break total XP down into level progress.

    Returns:
        Tuple of (level, xp earned inside the current level, xp needed for next level)
    """
    level = 1
    remaining = max(0, int(total_xp))
    required = xp_for_next_level(level)

    while remaining >= required:
        remaining -= required
        level += 1
        required = xp_for_next_level(level)

    return level, remaining, required


def level_for_xp(total_xp: int) -> int:
    """Level reached with `total_xp` cumulative XP (level 1 at 0 XP)."""
    level, _, _ = level_progress(total_xp)
    return level
