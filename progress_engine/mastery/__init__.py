"""
Mastery & XP model.

Quick start:
    from progress_engine import mastery

    new_value = mastery.calculate_mastery(40.0, True, attempt_number=2)
    stars = mastery.calculate_stars(92)
    level = mastery.level_for_xp(350)
"""

from progress_engine.mastery.constants import (
    DEFAULT_MASTERY_CONFIG,
    MasteryConfig,
    LEVEL_SCALING,
    XP_PER_LEVEL,
)
from progress_engine.mastery.model import (
    DecayPolicy,
    calculate_activity_score,
    calculate_mastery,
    calculate_stars,
    calculate_xp,
    clamp_score,
    decayed_mastery,
    exponential_decay,
    level_for_xp,
    level_progress,
    xp_for_next_level,
)


__all__ = [
    # Configuration
    "DEFAULT_MASTERY_CONFIG",
    "MasteryConfig",
    "LEVEL_SCALING",
    "XP_PER_LEVEL",

    # Scoring
    "calculate_mastery",
    "calculate_xp",
    "calculate_stars",
    "calculate_activity_score",
    "clamp_score",

    # Decay
    "DecayPolicy",
    "decayed_mastery",
    "exponential_decay",

    # Levels
    "level_for_xp",
    "level_progress",
    "xp_for_next_level",
]
