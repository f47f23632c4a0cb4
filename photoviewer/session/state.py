"""
Volatile session state - lives only in process memory.

The flag starts False when the process starts and is only ever set True
afterwards. A new process is the only thing that resets it, which is what
lets the launch validator tell "same process" from "killed and restarted".
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..errors import SessionInvariantError
from ..logging import get_logger

logger = get_logger("session")


@dataclass
class SessionState:
    """Holds the process-scoped "session active" flag."""

    _active: bool = False
    _activated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        """Whether a foreground surface has existed since process start."""
        return self._active

    @property
    def activated_at(self) -> Optional[datetime]:
        """When the flag first became True in this process."""
        return self._activated_at

    def set_active(self, active: bool) -> None:
        """Set the flag. Setting True is idempotent; going back to False is refused."""
        if active:
            if not self._active:
                self._activated_at = datetime.now()
                logger.debug("Session flag set active")
            self._active = True
            return

        if self._active:
            logger.error("Refusing to reset session flag to False within a live process")
            raise SessionInvariantError("Session flag cannot be reset while the process lives")


# Global singleton - the session flag for this process
session_state = SessionState()
