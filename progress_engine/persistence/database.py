"""
Database - Engine and session helpers for snapshot persistence

Handles connection setup and schema management only.
Snapshot reads/writes live in the stores module.
"""

from __future__ import annotations
from typing import Optional

from loguru import logger
from sqlalchemy import Engine, create_engine, inspect
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from progress_engine import config
from progress_engine.persistence.models import Base


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Get SQLAlchemy engine for snapshot persistence.

    SQLite URLs get a single shared connection for in-memory databases and
    the default pool otherwise. Server databases use connection pooling.

    Args:
        database_url: Connection string (defaults to config.get_database_url())

    Returns:
        SQLAlchemy Engine instance
    """
    db_url = database_url or config.get_database_url()

    if db_url.startswith("sqlite"):
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(
                db_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=False
            )
        config.DB_DIR.mkdir(parents=True, exist_ok=True)
        return create_engine(db_url, echo=False)

    return create_engine(
        db_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


def get_session_factory(engine: Engine) -> sessionmaker:
    """Build a session factory bound to the engine."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """
    Initialize database schema if tables don't exist.

    Safe to call multiple times - only creates tables if they don't exist.
    """
    inspector = inspect(engine)
    if "progress_snapshots" not in inspector.get_table_names():
        Base.metadata.create_all(engine)
        logger.debug("Created progress_snapshots table")


def reset_db(engine: Engine) -> None:
    """
    DANGEROUS: Delete all snapshots and recreate tables.

    All persisted progress for every learner will be lost!
    """
    Base.metadata.drop_all(engine)
    logger.info("All snapshot tables dropped")

    # Recreate tables
    init_db(engine)
