"""
Snapshot helpers - versioned envelopes on top of a SnapshotStore

Loading never raises on bad data: a payload that is not valid JSON, does not
match the envelope schema, or carries another version is discarded and the
caller starts from an empty state.
"""

from __future__ import annotations
import functools
from typing import Optional, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from progress_engine.persistence.stores import SnapshotStore


SNAPSHOT_VERSION = 1

# Fixed logical names, one blob per store
PROGRESS_SNAPSHOT = "learning-progress-storage"
WORD_REVIEW_SNAPSHOT = "word-review-schedule"
SESSION_SNAPSHOT = "current-session"

ModelT = TypeVar("ModelT", bound=BaseModel)


def load_snapshot(
    store: Optional[SnapshotStore],
    name: str,
    model: type[ModelT]
) -> Optional[ModelT]:
    """
    Load and validate a snapshot.

    Returns:
        Parsed envelope, or None when missing or unusable
    """
    if store is None:
        return None

    raw = store.load(name)
    if raw is None:
        return None

    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning(
            f"Discarding unreadable snapshot {name!r}: {exc.error_count()} validation error(s)"
        )
        return None


def save_snapshot(store: Optional[SnapshotStore], name: str, snapshot: BaseModel) -> None:
    """Serialize and write a snapshot (no-op without a store)."""
    if store is None:
        return
    store.save(name, snapshot.model_dump_json())


def persist_after(method):
    """
    Decorate a store mutator so it saves afterwards when autosave is enabled.

    The decorated object needs `autosave` and `save()`.
    """
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        result = method(self, *args, **kwargs)
        if self.autosave:
            self.save()
        return result

    return wrapper
