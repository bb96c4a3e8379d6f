"""
SQLAlchemy ORM Models for snapshot persistence

Each engine store (progress, word reviews, in-flight session) is persisted as
one JSON blob per learner, identified by a fixed logical name.
"""

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class SnapshotRow(Base):
    """
    Latest serialized snapshot of one store for one learner.
    """
    __tablename__ = 'progress_snapshots'

    # Primary key: composite of learner_id and snapshot name
    learner_id = Column(String(255), primary_key=True, nullable=False)
    name = Column(String(100), primary_key=True, nullable=False)

    payload = Column(Text, nullable=False)  # JSON document
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<SnapshotRow({self.learner_id}, {self.name})>"
