"""Vault module for encrypted client-side credential storage."""

from .crypto import load_or_create_master_key, encrypt, decrypt, encrypt_object, decrypt_object
from .store import CredentialRecord, CredentialStore, mask_token

__all__ = [
    'load_or_create_master_key',
    'encrypt',
    'decrypt',
    'encrypt_object',
    'decrypt_object',
    'CredentialRecord',
    'CredentialStore',
    'mask_token',
]
