"""
Encrypted, durable key-value store for the client's credentials.

Holds the auth token, the remembered username and the last-active
timestamp in a single AES-GCM encrypted document. Every mutation rewrites
the document atomically (temp file + fsync + rename) before returning.
"""

import json
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..errors import SecurityInitializationError
from ..logging import get_logger
from .crypto import decrypt_object, encrypt_object, load_or_create_master_key

logger = get_logger("vault")

TOKEN_KEY = "auth_token"
USERNAME_KEY = "remembered_username"
LAST_ACTIVE_TIME_KEY = "last_active_time"

SESSION_KEYS = (TOKEN_KEY, USERNAME_KEY, LAST_ACTIVE_TIME_KEY)

STORE_VERSION = 1


def mask_token(token: Optional[str]) -> str:
    """Short, log-safe rendering of a token."""
    if not token:
        return "<none>"
    return f"{token[:4]}..."


@dataclass(frozen=True)
class CredentialRecord:
    """A consistent snapshot of everything the store holds."""

    token: Optional[str] = None
    remembered_username: Optional[str] = None
    last_active_time_ms: int = 0
    has_last_active_time: bool = False

    @property
    def has_token(self) -> bool:
        return self.token is not None

    @property
    def has_session_data(self) -> bool:
        """True iff a last-active timestamp was recorded or a token exists."""
        return self.has_last_active_time or self.has_token


class CredentialStore:
    """Encrypted credential persistence. Construct with `CredentialStore.open()`."""

    def __init__(self, path: Path, key: bytes, values: Optional[dict[str, Any]] = None):
        self.path = Path(path)
        self._key = key
        self._values: dict[str, Any] = dict(values or {})
        self._lock = threading.RLock()

    @classmethod
    def open(
        cls,
        path: Path,
        service: str = "photoviewer",
        keyring_backend: Any = None,
    ) -> "CredentialStore":
        """
        Load (or create) the store at `path`, keyed by the keyring master key.

        Raises:
            SecurityInitializationError if the master key is unavailable or
            the existing document cannot be decrypted
        """
        path = Path(path)
        key = load_or_create_master_key(service, backend=keyring_backend)

        values: dict[str, Any] = {}
        if path.exists():
            try:
                envelope = json.loads(path.read_text(encoding="utf-8"))
                encrypted, iv = envelope["data"], envelope["iv"]
            except (ValueError, KeyError, TypeError) as e:
                raise SecurityInitializationError(
                    f"Credential store {path} is corrupt"
                ) from e
            values = decrypt_object(key, encrypted, iv)
            if not isinstance(values, dict):
                raise SecurityInitializationError(
                    f"Credential store {path} holds an unexpected document"
                )

        store = cls(path, key, values)
        logger.debug(f"Credential store opened at {path} ({len(values)} keys)")
        return store

    # --- Persistence ---

    def _persist(self, values: dict[str, Any]) -> None:
        """Encrypt `values` and atomically replace the store file, then adopt them.

        Caller holds the lock. In-memory state only changes once the write
        has landed.
        """
        encrypted, iv = encrypt_object(self._key, values)
        payload = json.dumps({"version": STORE_VERSION, "data": encrypted, "iv": iv})

        self.path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".auth_prefs.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self._sync_directory()
        self._values = values

    def _sync_directory(self) -> None:
        """Flush the directory entry so the rename itself survives a power loss."""
        dir_fd = os.open(self.path.parent, os.O_RDONLY | getattr(os, "O_DIRECTORY", 0))
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)

    def _put(self, key: str, value: Any) -> None:
        with self._lock:
            self._persist({**self._values, key: value})

    def _remove(self, *keys: str) -> None:
        with self._lock:
            self._persist({k: v for k, v in self._values.items() if k not in keys})

    # --- Token ---

    def save_token(self, token: str) -> None:
        self._put(TOKEN_KEY, token)

    def get_token(self) -> Optional[str]:
        with self._lock:
            return self._values.get(TOKEN_KEY)

    def has_token(self) -> bool:
        return self.get_token() is not None

    def delete_token(self) -> None:
        self._remove(TOKEN_KEY)

    # --- Remembered username ---

    def save_username(self, username: str) -> None:
        self._put(USERNAME_KEY, username)

    def get_username(self) -> str:
        with self._lock:
            return self._values.get(USERNAME_KEY) or ""

    def delete_username(self) -> None:
        self._remove(USERNAME_KEY)

    # --- Session bookkeeping ---

    def set_last_active_time(self, timestamp_ms: int) -> None:
        self._put(LAST_ACTIVE_TIME_KEY, int(timestamp_ms))

    def get_last_active_time(self) -> int:
        with self._lock:
            return int(self._values.get(LAST_ACTIVE_TIME_KEY, 0))

    def has_session_data(self) -> bool:
        """Check if any session data exists (token or timestamp)."""
        with self._lock:
            return LAST_ACTIVE_TIME_KEY in self._values or self.has_token()

    def snapshot(self) -> CredentialRecord:
        """Read all credential fields under one lock acquisition."""
        with self._lock:
            return CredentialRecord(
                token=self._values.get(TOKEN_KEY),
                remembered_username=self._values.get(USERNAME_KEY),
                last_active_time_ms=int(self._values.get(LAST_ACTIVE_TIME_KEY, 0)),
                has_last_active_time=LAST_ACTIVE_TIME_KEY in self._values,
            )

    def clear_session(self) -> None:
        """Remove token, username and last-active time in a single write."""
        with self._lock:
            logger.debug(
                f"Clearing session (last_active_time={self.get_last_active_time()}, "
                f"has_token={self.has_token()})"
            )
            self._remove(*SESSION_KEYS)
            logger.debug(
                f"Session cleared (last_active_time={self.get_last_active_time()}, "
                f"has_token={self.has_token()})"
            )

    def clear_all(self) -> None:
        """Remove every key in the store."""
        with self._lock:
            self._persist({})
        logger.info("Credential store wiped")
