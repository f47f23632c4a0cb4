"""
Credential store encryption using AES-256-GCM.

The master key lives in the OS keyring; it is created on first use and
never written to disk by this module.
"""

import base64
import os
import json
from typing import Any

import keyring
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from keyring.errors import KeyringError

from ..errors import SecurityInitializationError

KEY_LENGTH_BYTES = 32  # 256 bits

# AES-GCM configuration
IV_LENGTH_BYTES = 12  # 96 bits, recommended for AES-GCM

MASTER_KEY_USERNAME = "master_key"


def load_or_create_master_key(service: str, backend: Any = None) -> bytes:
    """
    Fetch the store's master key from the keyring, generating it on first use.

    Args:
        service: Keyring service name the key is filed under
        backend: Keyring backend to use. Defaults to the platform keyring.

    Returns:
        32-byte key suitable for AES-256-GCM

    Raises:
        SecurityInitializationError if the keyring is unavailable or holds
        a malformed key
    """
    ring = backend if backend is not None else keyring.get_keyring()
    try:
        stored = ring.get_password(service, MASTER_KEY_USERNAME)
        if stored is None:
            key = AESGCM.generate_key(bit_length=KEY_LENGTH_BYTES * 8)
            ring.set_password(
                service, MASTER_KEY_USERNAME, base64.b64encode(key).decode('ascii')
            )
            return key
    except KeyringError as e:
        raise SecurityInitializationError(f"Keyring unavailable: {e}") from e

    try:
        key = base64.b64decode(stored, validate=True)
    except ValueError as e:
        raise SecurityInitializationError("Stored master key is not valid base64") from e
    if len(key) != KEY_LENGTH_BYTES:
        raise SecurityInitializationError(
            f"Stored master key has wrong length ({len(key)} bytes)"
        )
    return key


def encrypt(key: bytes, plaintext: str) -> tuple[str, str]:
    """
    Encrypt plaintext using AES-256-GCM.

    Args:
        key: 32-byte encryption key
        plaintext: String to encrypt

    Returns:
        Tuple of (encrypted_base64, iv_base64)
    """
    # Fresh IV per write
    iv = os.urandom(IV_LENGTH_BYTES)

    aesgcm = AESGCM(key)
    ciphertext = aesgcm.encrypt(iv, plaintext.encode('utf-8'), None)

    return (
        base64.b64encode(ciphertext).decode('ascii'),
        base64.b64encode(iv).decode('ascii')
    )


def decrypt(key: bytes, encrypted_base64: str, iv_base64: str) -> str:
    """
    Decrypt ciphertext using AES-256-GCM.

    Raises:
        SecurityInitializationError if decryption fails (wrong key or
        tampered data)
    """
    try:
        ciphertext = base64.b64decode(encrypted_base64)
        iv = base64.b64decode(iv_base64)
        plaintext = AESGCM(key).decrypt(iv, ciphertext, None)
    except (InvalidTag, ValueError) as e:
        raise SecurityInitializationError(
            "Stored credentials could not be decrypted (key invalidated or data tampered)"
        ) from e

    return plaintext.decode('utf-8')


def encrypt_object(key: bytes, data: Any) -> tuple[str, str]:
    """Encrypt a JSON-serializable object. Returns (encrypted_base64, iv_base64)."""
    json_str = json.dumps(data)
    return encrypt(key, json_str)


def decrypt_object(key: bytes, encrypted_base64: str, iv_base64: str) -> Any:
    """Decrypt and parse a JSON object."""
    json_str = decrypt(key, encrypted_base64, iv_base64)
    return json.loads(json_str)
