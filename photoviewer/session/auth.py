"""Login/logout on top of the backend client and the credential store."""

from ..api.client import BackendClient
from ..errors import LoginError
from ..logging import get_logger
from ..vault.store import CredentialStore, mask_token
from .state import SessionState

logger = get_logger("session")


class AuthFlow:
    """Owns the credential side effects of logging in and out."""

    def __init__(self, client: BackendClient, store: CredentialStore, state: SessionState):
        self.client = client
        self.store = store
        self.state = state

    def is_logged_in(self) -> bool:
        return self.store.has_token()

    async def login(self, username: str, password: str, remember_username: bool = False) -> str:
        """
        Authenticate and persist the session.

        On failure a LoginError propagates and the store is not touched.
        """
        username = username.strip()
        password = password.strip()
        if not username or not password:
            raise LoginError("Username and password required")

        token = await self.client.login(username, password)

        self.store.save_token(token)
        if remember_username:
            self.store.save_username(username)
        else:
            self.store.delete_username()
        # A successful login implies a live foreground surface
        self.state.set_active(True)

        logger.info(f"Session saved for {username} (token {mask_token(token)})")
        return token

    def logout(self) -> None:
        """Drop every stored credential."""
        self.store.clear_all()
        logger.info("Logged out")
