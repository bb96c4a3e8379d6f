"""Per-subject progress tracking."""

from progress_engine.progress.state import (
    ActivityResult,
    GlobalState,
    ItemProgress,
    LessonProgress,
    ProgressSnapshot,
    SubjectProgress,
    UnitProgress,
)
from progress_engine.progress.store import ProgressStore

__all__ = [
    "ActivityResult",
    "GlobalState",
    "ItemProgress",
    "LessonProgress",
    "ProgressSnapshot",
    "ProgressStore",
    "SubjectProgress",
    "UnitProgress",
]
