"""
Application lifecycle owner.

Wires the credential store, the process-scoped session flag, the foreground
tracker, the backend client and the auth flow together, and runs the
launch sequence: validate the stored session first, then pick a screen.
"""

from enum import Enum
from typing import Any, Optional

import httpx

from .api.client import BackendClient
from .config import ClientConfig
from .logging import get_logger
from .session.auth import AuthFlow
from .session.clock import Clock, current_time_ms
from .session.state import SessionState, session_state
from .session.tracker import ForegroundTracker
from .session.validator import SessionDecision, SessionValidator
from .vault.store import CredentialStore

logger = get_logger("main")


class Screen(str, Enum):
    LOGIN = "login"
    FEED = "feed"


class Application:
    """One per process. Holds every session collaborator."""

    def __init__(
        self,
        config: ClientConfig,
        store: CredentialStore,
        state: SessionState = session_state,
        clock: Clock = current_time_ms,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.store = store
        self.state = state
        self._clock = clock
        self.tracker = ForegroundTracker(store, state, clock)
        self.client = BackendClient(config, transport=transport)
        self.auth = AuthFlow(self.client, store, state)
        self.last_decision: Optional[SessionDecision] = None

    @classmethod
    def create(
        cls,
        config: ClientConfig,
        keyring_backend: Any = None,
        **kwargs,
    ) -> "Application":
        """
        Open the credential store and build the application.

        Raises:
            SecurityInitializationError if the store cannot be opened safely
        """
        store = CredentialStore.open(
            config.store_path,
            service=config.keyring_service,
            keyring_backend=keyring_backend,
        )
        logger.debug(
            f"Startup state: session_active={kwargs.get('state', session_state).is_active}, "
            f"last_active_time={store.get_last_active_time()}, has_token={store.has_token()}"
        )
        return cls(config, store, **kwargs)

    def launch(self) -> Screen:
        """Validate the stored session, then route. Runs before any screen starts."""
        self.last_decision = SessionValidator(
            self.store, self.state, self._clock
        ).validate_on_launch()

        screen = Screen.FEED if self.auth.is_logged_in() else Screen.LOGIN
        logger.info(f"Launch routed to {screen.value} ({self.last_decision.reason.value})")
        return screen

    async def close(self) -> None:
        await self.client.close()
