"""Exception types raised by the PhotoViewer client."""

from typing import Optional


class PhotoViewerError(Exception):
    """Base class for all client errors."""


class SecurityInitializationError(PhotoViewerError):
    """The master key could not be produced/accessed, or stored data failed to decrypt.

    Fatal at startup: the credential store cannot be used safely.
    """


class SessionInvariantError(PhotoViewerError):
    """A session lifecycle invariant was broken (programming defect)."""


class LoginError(PhotoViewerError):
    """Login was rejected or could not be completed. `message` is user-facing."""

    def __init__(self, message: str = "Login failed"):
        super().__init__(message)
        self.message = message


class ApiError(PhotoViewerError):
    """A post resource request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
