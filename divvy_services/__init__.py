"""
divvy_services -- stateful services of the planner.

Holds the session state value object, its JSON codec and the SQLAlchemy
backed ``PlannerStore``. Engines stay pure; everything that touches storage
lives here.
"""

from divvy_services.session_state import (
    DEFAULT_DIRECTOR,
    SessionState,
    default_session_state,
)
from divvy_services.storage import SETTINGS_KEY, STATE_KEY, PlannerStore

__all__ = [
    "DEFAULT_DIRECTOR",
    "SessionState",
    "default_session_state",
    "PlannerStore",
    "SETTINGS_KEY",
    "STATE_KEY",
]
