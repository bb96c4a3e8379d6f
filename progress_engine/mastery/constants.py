"""
Mastery Constants and Parameters

All configurable parameters for mastery, XP and leveling in one place.
"""

from __future__ import annotations
from dataclasses import dataclass


# ---- Mastery Configuration ----

@dataclass(frozen=True)
class MasteryConfig:
    """Tuning knobs for the per-item mastery curve."""
    correct_gain: float = 25.0          # Points gained on a first-try success
    incorrect_loss: float = 10.0        # Flat points lost per failure
    min_attempts_for_mastery: int = 3   # Attempts needed before an item counts as completed
    completion_threshold: float = 80.0  # Mastery at which an item is "completed"
    decay_rate: float = 0.05            # Fraction forgotten per idle day (read-time only)


DEFAULT_MASTERY_CONFIG = MasteryConfig()

MASTERY_MIN = 0.0
MASTERY_MAX = 100.0


# ---- Scores & Stars ----

SCORE_MIN = 0
SCORE_MAX = 100

# (minimum score, stars) checked top-down; lower bounds are inclusive
STAR_BANDS = (
    (90, 3),
    (70, 2),
    (50, 1),
)


# ---- XP ----

DIFFICULTY_MIN = 1
DIFFICULTY_MAX = 5
XP_PER_DIFFICULTY = 2
FIRST_COMPLETION_BONUS = 5


# ---- Levels ----

XP_PER_LEVEL = 100      # XP needed to go from level 1 to level 2
LEVEL_SCALING = 1.2     # Each level requires 20% more XP than the previous one
