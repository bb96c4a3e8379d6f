"""
Review pools for session word selection.

Candidate words are split into priority pools:
1. due:     reviewed, not mastered, next_due_at <= now (most overdue first)
2. new:     never reviewed (shuffled with the injected random source)
3. known:   blending mastered (least recently reviewed first)
4. pending: reviewed, not mastered, not yet due (soonest due first)

A session is filled by walking the pools in that order.
"""

from __future__ import annotations
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional, TypeVar, Union

from progress_engine.review.record import WordReviewRecord
from progress_engine.schemas import VocabularyItem, spelled_from


T = TypeVar("T")

Candidate = Union[str, VocabularyItem]

POOL_ORDER = ["due", "new", "known", "pending"]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class WordPools:
    """
    Selection-scoped pools, each already in draw order.
    """
    due: list[str] = field(default_factory=list)
    new: list[str] = field(default_factory=list)
    known: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, list[str]]:
        return {
            "due": self.due,
            "new": self.new,
            "known": self.known,
            "pending": self.pending,
        }


def fill_in_order(
    pools: dict[str, list[T]],
    order: list[str],
    target_size: int
) -> list[T]:
    """
    Fill a session by walking pools in order until target_size is reached.

    Items already taken from an earlier pool are skipped.
    """
    session: list[T] = []
    seen: set = set()
    for name in order:
        for item in pools.get(name, []):
            if len(session) >= target_size:
                return session
            if item in seen:
                continue
            seen.add(item)
            session.append(item)
    return session


def eligible_words(
    candidates: Iterable[Candidate],
    unit: int,
    unlocked_letters: Optional[set[str]] = None
) -> list[str]:
    """
    Normalize catalog candidates to unique words usable at `unit`.

    VocabularyItem records above the unit are dropped; with unlocked_letters
    every word must be spelled from those letters.
    """
    letters = {letter.lower() for letter in unlocked_letters} if unlocked_letters else None
    words: list[str] = []
    seen: set[str] = set()

    for candidate in candidates:
        if isinstance(candidate, VocabularyItem):
            if candidate.min_unit > unit:
                continue
            if letters is not None and not candidate.uses_only(letters):
                continue
            word = candidate.word
        else:
            word = candidate
            if letters is not None and not spelled_from(word, letters):
                continue

        if not word or word in seen:
            continue
        seen.add(word)
        words.append(word)

    return words


def build_word_pools(
    reviews: Mapping[str, WordReviewRecord],
    words: list[str],
    now: datetime,
    rng: random.Random
) -> WordPools:
    """
    Categorize eligible words into priority pools.
    """
    pools = WordPools()

    for word in words:
        record = reviews.get(word)
        if record is None or record.is_new:
            pools.new.append(word)
        elif record.blending_mastered:
            pools.known.append(word)
        elif record.is_due(now):
            pools.due.append(word)
        else:
            pools.pending.append(word)

    pools.due.sort(key=lambda w: reviews[w].next_due_at)
    rng.shuffle(pools.new)
    pools.known.sort(key=lambda w: reviews[w].last_reviewed_at or _EPOCH)
    pools.pending.sort(key=lambda w: reviews[w].next_due_at)

    return pools
