"""Snapshot persistence (SQLAlchemy-backed key-value blobs)."""

from progress_engine.persistence.database import get_engine, init_db, reset_db
from progress_engine.persistence.snapshots import (
    PROGRESS_SNAPSHOT,
    SESSION_SNAPSHOT,
    SNAPSHOT_VERSION,
    WORD_REVIEW_SNAPSHOT,
    load_snapshot,
    save_snapshot,
)
from progress_engine.persistence.stores import (
    MemorySnapshotStore,
    SnapshotStore,
    SqlSnapshotStore,
)

__all__ = [
    "get_engine",
    "init_db",
    "reset_db",
    "MemorySnapshotStore",
    "SnapshotStore",
    "SqlSnapshotStore",
    "PROGRESS_SNAPSHOT",
    "SESSION_SNAPSHOT",
    "SNAPSHOT_VERSION",
    "WORD_REVIEW_SNAPSHOT",
    "load_snapshot",
    "save_snapshot",
]
