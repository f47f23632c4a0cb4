"""Foreground/background tracking of the client's screens."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from ..errors import SessionInvariantError
from ..logging import get_logger
from ..vault.store import CredentialStore
from .clock import Clock, current_time_ms
from .state import SessionState

logger = get_logger("session")


class ForegroundTracker:
    """Counts started screens and records when the app last went to the background.

    - Every screen start marks the session active.
    - When the last started screen stops, "now" is persisted as the
      last-active time. The session flag is left alone.
    """

    def __init__(
        self,
        store: CredentialStore,
        state: SessionState,
        clock: Clock = current_time_ms,
    ):
        self.store = store
        self.state = state
        self._clock = clock
        self._count = 0
        self._lock = threading.Lock()

    @property
    def active_count(self) -> int:
        return self._count

    def surface_started(self, name: str) -> None:
        with self._lock:
            self._count += 1
            logger.debug(f"Surface started: {name} (active count: {self._count})")
            self.state.set_active(True)

    def surface_stopped(self, name: str) -> None:
        with self._lock:
            if self._count == 0:
                logger.error(f"Surface stopped with no active surfaces: {name}")
                raise SessionInvariantError(
                    f"Foreground count would go negative stopping {name!r}"
                )
            self._count -= 1
            logger.debug(f"Surface stopped: {name} (active count: {self._count})")

            if self._count == 0:
                timestamp = self._clock()
                self.store.set_last_active_time(timestamp)
                logger.info(f"All surfaces stopped - last active time set to {timestamp}")

    @contextmanager
    def surface(self, name: str) -> Iterator[None]:
        """Keep `name` started for the duration of the block."""
        self.surface_started(name)
        try:
            yield
        finally:
            self.surface_stopped(name)
