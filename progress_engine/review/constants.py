"""
Word Review Constants and Parameters

Spaced-repetition parameters for word blending practice, tuned for young
children: short maximum interval, gentle ease adjustments.
"""


# ---- Success & Mastery ----

SMOOTH_THRESHOLD = 0.7          # Smoothness needed for a review to count as a success
MASTERY_MIN_REVIEWS = 3         # Reviews needed before a word can be blending-mastered
MASTERY_MIN_SMOOTHNESS = 0.8    # Average smoothness needed for blending mastery


# ---- Intervals (days) ----

FAILURE_INTERVAL_DAYS = 0       # Failed words are due again right away
INITIAL_INTERVAL_DAYS = 1       # First success: show again tomorrow
MAX_INTERVAL_DAYS = 7           # Cap so words never disappear for long


# ---- Ease Factor ----
# Multiplier applied to the previous interval on success

INITIAL_EASE_FACTOR = 2.0
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 3.0

VERY_SMOOTH_THRESHOLD = 0.9
VERY_SMOOTH_EASE_BONUS = 0.15   # Smoothness >= 0.9
SMOOTH_EASE_BONUS = 0.05        # Smoothness >= SMOOTH_THRESHOLD
FAILURE_EASE_PENALTY = 0.2


# ---- Session Configuration ----

SESSION_SIZE = 10               # Words drawn for an auto-flow session
