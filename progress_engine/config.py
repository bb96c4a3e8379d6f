"""
Configuration - Environment-driven settings

All runtime settings are read from environment variables (optionally loaded
from a local .env file). Getters are evaluated on every call so tests can
switch TEST_MODE or DATABASE_URL without reloading the module.
"""

from __future__ import annotations
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment
load_dotenv()

# Default SQLite location when DATABASE_URL is not set
DB_DIR = Path(__file__).parent.parent / "logs"

DEFAULT_ADVANCE_DELAY_SECONDS = 1.5


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_database_url() -> str:
    """
    Get the database URL for snapshot persistence.

    Uses DATABASE_URL when set. Otherwise falls back to a SQLite file under
    logs/, named test_progress.db in test mode and progress.db otherwise.

    Returns:
        SQLAlchemy database URL
    """
    base_url = os.getenv("DATABASE_URL")
    if base_url:
        if is_test_mode():
            # Replace production db name with test db name
            return base_url.replace("progress_db", "test_progress_db")
        return base_url

    db_name = "test_progress.db" if is_test_mode() else "progress.db"
    return f"sqlite:///{DB_DIR / db_name}"


def get_default_learner_id() -> str:
    """Get default learner id for scoping persisted snapshots."""
    return os.getenv("DEFAULT_LEARNER_ID", "learner")


def get_advance_delay() -> float:
    """
    Seconds to wait between a completed activity and the next auto-flow step.

    Invalid or negative values fall back to the default delay.
    """
    raw = os.getenv("SESSION_ADVANCE_DELAY")
    if raw is None:
        return DEFAULT_ADVANCE_DELAY_SECONDS
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_ADVANCE_DELAY_SECONDS
    return value if value >= 0 else DEFAULT_ADVANCE_DELAY_SECONDS
