"""
Session Flow - Pure plan functions

Auto-flow structure (about ten minutes):
1. Warm-up:     2 tap-to-blend words (easiest)
2. Practice:    3 sound segmenting words
3. Challenge:   2 blending slider words
4. Application: 1 sentence (unit 2 and up)
5. Cool-down:   2 tap-to-blend words

Word phases shrink when fewer words are supplied. Menu plans have no steps;
activities are drawn on demand by the SessionController.
"""

from __future__ import annotations
import dataclasses
import math
from typing import Iterable, Optional, Union

from progress_engine.session.types import (
    ACTIVITY_NAMES,
    ActivityType,
    SessionMode,
    SessionPlan,
    SessionProgress,
    SessionStep,
)


# (activity, word slots, difficulty); None slots mark the narrative step
AUTO_FLOW_PHASES = [
    (ActivityType.TAP, 2, 1),
    (ActivityType.SEGMENT, 3, 1),
    (ActivityType.SLIDER, 2, 2),
    (ActivityType.SENTENCE, None, 1),
    (ActivityType.TAP, 2, 1),
]

SENTENCE_MIN_UNIT = 2

# Beginners stay on auto-flow until both thresholds are met
MENU_MIN_COMPLETED_UNITS = 2
MENU_MIN_TOTAL_REVIEWS = 20


def _unique_in_order(words: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    unique = []
    for word in words:
        if word and word not in seen:
            seen.add(word)
            unique.append(word)
    return unique


def create_auto_flow_session(unit: int, words: Iterable[str]) -> SessionPlan:
    """
    Build a guided plan, pairing each word step with the next unused word.

    Args:
        unit: Learner's current unit
        words: Session words in priority order (see WordReviewScheduler.get_session_words)

    Returns:
        SessionPlan at step 0
    """
    queue = _unique_in_order(words)
    position = 0
    steps: list[SessionStep] = []

    for activity_type, slots, difficulty in AUTO_FLOW_PHASES:
        if slots is None:
            if unit >= SENTENCE_MIN_UNIT:
                steps.append(SessionStep(activity_type=activity_type, difficulty=difficulty))
            continue

        for word in queue[position:position + slots]:
            steps.append(SessionStep(activity_type=activity_type, word=word, difficulty=difficulty))
        position = min(len(queue), position + slots)

    return SessionPlan(mode=SessionMode.AUTO, unit=unit, steps=tuple(steps))


def create_menu_mode_session(unit: int) -> SessionPlan:
    """Build a free-choice plan (no predetermined steps)."""
    return SessionPlan(mode=SessionMode.MENU, unit=unit)


def get_next_step(plan: SessionPlan) -> Optional[SessionStep]:
    """Current step of an auto plan, or None for menu plans and finished plans."""
    if plan.mode != SessionMode.AUTO:
        return None
    if plan.current_step_index >= len(plan.steps):
        return None
    return plan.steps[plan.current_step_index]


def advance_step(plan: SessionPlan) -> SessionPlan:
    """Return a copy moved one step forward (never past the end)."""
    next_index = min(plan.current_step_index + 1, len(plan.steps))
    return dataclasses.replace(plan, current_step_index=next_index)


def get_session_progress(plan: SessionPlan) -> SessionProgress:
    if plan.mode == SessionMode.MENU or not plan.steps:
        return SessionProgress(completed=0, total=0, percentage=0)

    completed = min(plan.current_step_index, len(plan.steps))
    percentage = math.floor(completed * 100 / len(plan.steps) + 0.5)
    return SessionProgress(completed=completed, total=len(plan.steps), percentage=percentage)


def is_session_complete(plan: SessionPlan) -> bool:
    """Auto plans complete at the end of their steps; menu plans never do."""
    if plan.mode == SessionMode.MENU:
        return False
    return plan.current_step_index >= len(plan.steps)


def get_recommended_mode(completed_units: Iterable[int], total_reviews: int) -> SessionMode:
    """
    Recommend auto-flow for beginners, menu mode once the learner has
    completed enough units and reviews.
    """
    if len(set(completed_units)) < MENU_MIN_COMPLETED_UNITS or total_reviews < MENU_MIN_TOTAL_REVIEWS:
        return SessionMode.AUTO
    return SessionMode.MENU


def get_activity_name(activity_type: Union[ActivityType, str]) -> str:
    """
    Display name for an activity kind.

    Raises:
        ValueError: Unknown activity kind
    """
    return ACTIVITY_NAMES[ActivityType(activity_type)]
