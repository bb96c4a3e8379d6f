"""
Session flow: plan building, persistence and the session state machine.
"""

from progress_engine.session.controller import (
    CurrentActivity,
    FlowState,
    SessionController,
    SessionStateError,
)
from progress_engine.session.flow import (
    advance_step,
    create_auto_flow_session,
    create_menu_mode_session,
    get_activity_name,
    get_next_step,
    get_recommended_mode,
    get_session_progress,
    is_session_complete,
)
from progress_engine.session.storage import SessionSnapshot, SessionStorage
from progress_engine.session.types import (
    ActivityType,
    SessionMode,
    SessionPlan,
    SessionProgress,
    SessionStep,
)


__all__ = [
    # Types
    "ActivityType",
    "SessionMode",
    "SessionPlan",
    "SessionProgress",
    "SessionStep",

    # Plan functions
    "advance_step",
    "create_auto_flow_session",
    "create_menu_mode_session",
    "get_activity_name",
    "get_next_step",
    "get_recommended_mode",
    "get_session_progress",
    "is_session_complete",

    # Persistence
    "SessionSnapshot",
    "SessionStorage",

    # State machine
    "CurrentActivity",
    "FlowState",
    "SessionController",
    "SessionStateError",
]
