"""
Launch-time session validation.

Decides whether the token left in the credential store may be reused.
Precedence matters:

1. Nothing stored -> nothing to do.
2. Token stored but the in-memory flag is False -> the process was killed
   and restarted since the token was issued. Clear, skip the timeout check.
3. Otherwise clear when the app has been in the background longer than
   SESSION_TIMEOUT_MS.
"""

from dataclasses import dataclass
from enum import Enum

from ..errors import SessionInvariantError
from ..logging import get_logger
from ..vault.store import CredentialRecord, CredentialStore
from .clock import Clock, current_time_ms
from .state import SessionState

logger = get_logger("session")

SESSION_TIMEOUT_MS = 600_000  # 10 minutes


class SessionAction(str, Enum):
    KEEP = "keep"
    CLEAR = "clear"


class SessionReason(str, Enum):
    NO_SESSION_DATA = "no_session_data"
    PROCESS_DEATH = "process_death"
    INACTIVITY_TIMEOUT = "inactivity_timeout"
    WITHIN_TIMEOUT = "within_timeout"


@dataclass(frozen=True)
class SessionDecision:
    action: SessionAction
    reason: SessionReason
    elapsed_ms: int | None = None

    @property
    def clears(self) -> bool:
        return self.action is SessionAction.CLEAR


def evaluate_session(
    record: CredentialRecord,
    session_active: bool,
    now_ms: int,
    timeout_ms: int = SESSION_TIMEOUT_MS,
) -> SessionDecision:
    """Pure decision over a store snapshot, the session flag and the current time."""
    if not record.has_session_data:
        return SessionDecision(SessionAction.KEEP, SessionReason.NO_SESSION_DATA)

    if record.has_token and not session_active:
        return SessionDecision(SessionAction.CLEAR, SessionReason.PROCESS_DEATH)

    elapsed = now_ms - record.last_active_time_ms
    if elapsed > timeout_ms:
        return SessionDecision(SessionAction.CLEAR, SessionReason.INACTIVITY_TIMEOUT, elapsed)
    return SessionDecision(SessionAction.KEEP, SessionReason.WITHIN_TIMEOUT, elapsed)


class SessionValidator:
    """Applies `evaluate_session` to the store. One instance per launch."""

    def __init__(
        self,
        store: CredentialStore,
        state: SessionState,
        clock: Clock = current_time_ms,
        timeout_ms: int = SESSION_TIMEOUT_MS,
    ):
        self.store = store
        self.state = state
        self._clock = clock
        self.timeout_ms = timeout_ms
        self._ran = False

    def validate_on_launch(self) -> SessionDecision:
        """Run the check and clear the store if needed. Must complete before routing."""
        if self._ran:
            logger.error("Session validator invoked twice for the same launch")
            raise SessionInvariantError("validate_on_launch() already ran for this launch")
        self._ran = True

        decision = evaluate_session(
            self.store.snapshot(),
            self.state.is_active,
            self._clock(),
            self.timeout_ms,
        )

        if decision.reason is SessionReason.NO_SESSION_DATA:
            logger.debug("No session data exists - first launch or already cleared")
        elif decision.reason is SessionReason.PROCESS_DEATH:
            logger.info("Process death detected (token stored, session flag False) - clearing session")
        elif decision.reason is SessionReason.INACTIVITY_TIMEOUT:
            logger.info(
                f"Inactivity timeout exceeded ({decision.elapsed_ms // 1000}s > "
                f"{self.timeout_ms // 1000}s) - clearing session"
            )
        else:
            logger.debug(f"Session still valid ({decision.elapsed_ms // 1000}s since last active)")

        if decision.clears:
            self.store.clear_session()
        return decision
