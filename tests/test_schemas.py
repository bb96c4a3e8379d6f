"""
Unit tests for inbound content records.
"""
import pytest
from pydantic import ValidationError

from progress_engine.schemas import LessonContent, UnitContent, VocabularyItem, spelled_from


def test_spelled_from_ignores_case_and_punctuation():
    assert spelled_from("Cat!", {"c", "a", "t"})
    assert not spelled_from("cats", {"c", "a", "t"})


def test_vocabulary_item_validation():
    item = VocabularyItem(word="sat", min_unit=2, difficulty=3)
    assert item.uses_only({"s", "a", "t"})

    with pytest.raises(ValidationError):
        VocabularyItem(word="")
    with pytest.raises(ValidationError):
        VocabularyItem(word="sat", difficulty=6)


def test_unit_lesson_ids():
    unit = UnitContent(
        unit_id="unit-1",
        lessons=[LessonContent(lesson_id="l1"), LessonContent(lesson_id="l2", unit_id="unit-1")],
    )
    assert unit.lesson_ids == ["l1", "l2"]
