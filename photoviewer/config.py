"""Client configuration with CLI > env var > defaults precedence."""

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_API_URL = "http://10.0.2.2:8000"
DEFAULT_DATA_DIR = Path.home() / ".photoviewer"
STORE_FILENAME = "auth_prefs.json"


@dataclass
class ClientConfig:
    """Configuration for a client process."""
    api_url: str = ""
    data_dir: str = ""
    log_dir: str = ""
    keyring_service: str = ""
    request_timeout: float = 0.0
    debug: bool = False

    def __post_init__(self):
        # Apply env var defaults before falling back to built-ins
        if not self.api_url:
            self.api_url = os.getenv("PHOTOVIEWER_API_URL", DEFAULT_API_URL)
        if not self.data_dir:
            self.data_dir = os.getenv("PHOTOVIEWER_DATA_DIR", str(DEFAULT_DATA_DIR))
        if not self.log_dir:
            self.log_dir = os.getenv(
                "PHOTOVIEWER_LOG_DIR", str(Path(self.data_dir) / "logs")
            )
        if not self.keyring_service:
            self.keyring_service = os.getenv("PHOTOVIEWER_KEYRING_SERVICE", "photoviewer")
        if not self.request_timeout:
            env_timeout = os.getenv("PHOTOVIEWER_TIMEOUT")
            self.request_timeout = float(env_timeout) if env_timeout else 10.0

    @property
    def store_path(self) -> Path:
        """Location of the encrypted credential document."""
        return Path(self.data_dir) / STORE_FILENAME
