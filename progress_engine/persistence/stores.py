"""
Snapshot Stores - Key-value persistence port

Stores hold opaque JSON payloads keyed by a logical snapshot name. The engine
stores depend on the SnapshotStore protocol only, so the SQL-backed store can
be swapped for the in-memory one in tests or embedded use.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional, Protocol

from loguru import logger
from sqlalchemy import Engine

from progress_engine import config
from progress_engine.persistence.database import get_engine, get_session_factory, init_db
from progress_engine.persistence.models import SnapshotRow


class SnapshotStore(Protocol):
    """Persistence port used by the progress, review and session stores."""

    def load(self, name: str) -> Optional[str]:
        """Return the stored payload, or None when nothing was saved."""
        ...

    def save(self, name: str, payload: str) -> None:
        """Replace the stored payload."""
        ...

    def delete(self, name: str) -> None:
        """Remove the payload if present."""
        ...


class MemorySnapshotStore:
    """Process-local snapshot store (no durability)."""

    def __init__(self):
        self._payloads: dict[str, str] = {}

    def load(self, name: str) -> Optional[str]:
        return self._payloads.get(name)

    def save(self, name: str, payload: str) -> None:
        self._payloads[name] = payload

    def delete(self, name: str) -> None:
        self._payloads.pop(name, None)


class SqlSnapshotStore:
    """
    SQLAlchemy-backed snapshot store scoped to one learner.

    Every call runs in its own transaction: commit on success, rollback and
    re-raise on error, so a reader never observes a half-written snapshot.
    """

    def __init__(self, engine: Optional[Engine] = None, learner_id: Optional[str] = None):
        """
        Args:
            engine: SQLAlchemy engine (defaults to one built from config)
            learner_id: Learner scope (defaults to DEFAULT_LEARNER_ID)
        """
        self.engine = engine if engine is not None else get_engine()
        self.learner_id = learner_id or config.get_default_learner_id()
        init_db(self.engine)
        self._session_factory = get_session_factory(self.engine)

    def load(self, name: str) -> Optional[str]:
        session = self._session_factory()
        try:
            row = session.get(SnapshotRow, (self.learner_id, name))
            return row.payload if row is not None else None
        finally:
            session.close()

    def save(self, name: str, payload: str) -> None:
        session = self._session_factory()
        try:
            row = session.get(SnapshotRow, (self.learner_id, name))
            now = datetime.now(timezone.utc)

            if row is None:
                row = SnapshotRow(
                    learner_id=self.learner_id,
                    name=name,
                    payload=payload,
                    updated_at=now
                )
                session.add(row)
            else:
                row.payload = payload
                row.updated_at = now

            session.commit()
        except Exception:
            session.rollback()
            logger.exception(f"Failed to save snapshot {name!r} for {self.learner_id!r}")
            raise
        finally:
            session.close()

    def delete(self, name: str) -> None:
        session = self._session_factory()
        try:
            row = session.get(SnapshotRow, (self.learner_id, name))
            if row is not None:
                session.delete(row)
                session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
