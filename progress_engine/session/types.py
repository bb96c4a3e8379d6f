"""
Session plan types shared by the flow functions, storage and controller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SessionMode(str, Enum):
    """How a session is driven."""
    AUTO = "auto"   # pre-planned sequence
    MENU = "menu"   # learner picks each activity


class ActivityType(str, Enum):
    """Closed set of activity kinds."""
    TAP = "tap"
    SEGMENT = "segment"
    SLIDER = "slider"
    SENTENCE = "sentence"


ACTIVITY_NAMES = {
    ActivityType.TAP: "Tap to Blend",
    ActivityType.SEGMENT: "Sound Builder",
    ActivityType.SLIDER: "Blending Slider",
    ActivityType.SENTENCE: "Read Sentence",
}


@dataclass(frozen=True)
class SessionStep:
    """
    A single step within an auto-flow plan.

    Narrative (sentence) steps carry no word; the sentence is drawn when the
    step is reached.
    """
    activity_type: ActivityType
    word: Optional[str] = None
    difficulty: int = 1

    @property
    def is_narrative(self) -> bool:
        return self.activity_type == ActivityType.SENTENCE


@dataclass(frozen=True)
class SessionPlan:
    """
    An in-flight session. Plans are immutable; advancing returns a new plan.
    """
    mode: SessionMode
    unit: int
    steps: tuple[SessionStep, ...] = ()
    current_step_index: int = 0

    @property
    def total_steps(self) -> int:
        return len(self.steps)


@dataclass(frozen=True)
class SessionProgress:
    completed: int
    total: int
    percentage: int
