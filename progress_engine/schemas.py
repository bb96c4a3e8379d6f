"""
Pydantic models for inbound content records.

Content catalogs (word lists, lessons, units) live outside the engine. These
models describe the read-only records the engine accepts from them.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def spelled_from(word: str, letters: set[str]) -> bool:
    """True when every letter of `word` is in `letters` (lowercase)."""
    return all(ch in letters for ch in word.lower() if ch.isalpha())


class VocabularyItem(BaseModel):
    """A practice word with the unit at which its letters are unlocked."""
    model_config = ConfigDict(frozen=True)

    word: str = Field(..., min_length=1, description="Word as shown to the learner")
    min_unit: int = Field(1, ge=1, description="First unit whose letters cover the word")
    difficulty: int = Field(1, ge=1, le=5, description="Difficulty tag (1-5)")

    def uses_only(self, letters: set[str]) -> bool:
        """True when every letter of the word is in the given letter set."""
        return spelled_from(self.word, letters)


class LessonContent(BaseModel):
    """A lesson as published by a content catalog."""
    model_config = ConfigDict(frozen=True)

    lesson_id: str
    unit_id: Optional[str] = None
    problems: list[dict] = Field(default_factory=list)
    objectives: list[str] = Field(default_factory=list)


class UnitContent(BaseModel):
    """A unit grouping lessons."""
    model_config = ConfigDict(frozen=True)

    unit_id: str
    lessons: list[LessonContent] = Field(default_factory=list)

    @property
    def lesson_ids(self) -> list[str]:
        return [lesson.lesson_id for lesson in self.lessons]
