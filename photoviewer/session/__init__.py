"""Session lifecycle: volatile flag, foreground tracking, launch validation and login."""

from .auth import AuthFlow
from .state import SessionState, session_state
from .tracker import ForegroundTracker
from .validator import (
    SESSION_TIMEOUT_MS,
    SessionAction,
    SessionDecision,
    SessionReason,
    SessionValidator,
    evaluate_session,
)

__all__ = [
    'AuthFlow',
    'SessionState',
    'session_state',
    'ForegroundTracker',
    'SESSION_TIMEOUT_MS',
    'SessionAction',
    'SessionDecision',
    'SessionReason',
    'SessionValidator',
    'evaluate_session',
]
