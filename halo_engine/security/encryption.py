"""
Security encryption utilities.

Encrypts tenant credential bundles before they are stored.
Uses Fernet (symmetric encryption) from the cryptography library.
"""

import base64
import hashlib
import json
from typing import Any, Dict

from cryptography.fernet import Fernet, InvalidToken


def _get_fernet_key() -> bytes:
    """
    Get Fernet-compatible key from ENCRYPTION_KEY.

    Fernet requires a 32-byte base64-encoded key, so the configured
    key material is hashed with SHA-256 first.
    """
    from halo_engine.config import settings

    hashed = hashlib.sha256(settings.ENCRYPTION_KEY.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(hashed)


def encrypt_value(value: str) -> str:
    """
    Encrypt a string value.

    Args:
        value: The plaintext string to encrypt

    Returns:
        Fernet token as a string ('gAAAAAB...')
    """
    if not value:
        return value

    fernet = Fernet(_get_fernet_key())
    return fernet.encrypt(value.encode("utf-8")).decode("utf-8")


def decrypt_value(encrypted_value: str) -> str:
    """
    Decrypt a value produced by encrypt_value.

    Raises:
        ValueError: If the token is invalid or was encrypted with another key
    """
    if not encrypted_value:
        return encrypted_value

    try:
        fernet = Fernet(_get_fernet_key())
        return fernet.decrypt(encrypted_value.encode("utf-8")).decode("utf-8")
    except InvalidToken as e:
        raise ValueError("Decryption failed: invalid token or wrong encryption key") from e


def encrypt_dict(data: Dict[str, Any]) -> str:
    """Serialize a credential map to JSON and encrypt it."""
    return encrypt_value(json.dumps(data))


def decrypt_dict(encrypted_value: str) -> Dict[str, Any]:
    """Inverse of encrypt_dict. An empty value decrypts to an empty map."""
    if not encrypted_value:
        return {}
    return json.loads(decrypt_value(encrypted_value))
