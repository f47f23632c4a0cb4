"""Shared fixtures: in-memory keyring, temp credential store, controllable clock."""

from pathlib import Path

import pytest
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError

from photoviewer.config import ClientConfig
from photoviewer.session.state import SessionState
from photoviewer.vault.store import CredentialStore

START_MS = 1_700_000_000_000


class MemoryKeyring(KeyringBackend):
    """Keyring held in a dict, so tests never touch the OS keychain."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.entries: dict[tuple[str, str], str] = {}

    def get_password(self, service, username):
        return self.entries.get((service, username))

    def set_password(self, service, username, password):
        self.entries[(service, username)] = password

    def delete_password(self, service, username):
        self.entries.pop((service, username), None)


class LockedKeyring(KeyringBackend):
    """Keyring that refuses every operation, like a locked or missing keychain."""

    priority = 1

    def get_password(self, service, username):
        raise KeyringError("keychain is locked")

    def set_password(self, service, username, password):
        raise KeyringError("keychain is locked")

    def delete_password(self, service, username):
        raise KeyringError("keychain is locked")


class FakeClock:
    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def keyring_backend() -> MemoryKeyring:
    return MemoryKeyring()


@pytest.fixture
def locked_keyring() -> LockedKeyring:
    return LockedKeyring()


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "auth_prefs.json"


@pytest.fixture
def store(store_path: Path, keyring_backend: MemoryKeyring) -> CredentialStore:
    return CredentialStore.open(store_path, keyring_backend=keyring_backend)


@pytest.fixture
def state() -> SessionState:
    """A fresh session flag, as on a new process."""
    return SessionState()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config(tmp_path: Path) -> ClientConfig:
    return ClientConfig(
        api_url="http://testserver",
        data_dir=str(tmp_path),
        keyring_service="photoviewer-test",
        request_timeout=5.0,
    )
