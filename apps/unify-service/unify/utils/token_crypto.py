"""
Secret generation, hashing and encryption helpers.

Responsibilities:
- Issue opaque connection tokens, webhook secrets and password reset tokens
- Hash API keys with SHA-256 for lookup (raw keys are never stored)
- Encrypt/decrypt provider credentials at rest with Fernet
- Sign webhook bodies with HMAC-SHA256
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import os
import secrets
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


_KDF_SALT = b"unify-credentials"


def generate_connection_token() -> str:
    """Return an opaque, url-safe token identifying a connection."""
    return secrets.token_urlsafe(32)


def generate_webhook_secret() -> str:
    return secrets.token_hex(32)


def generate_reset_token() -> str:
    """Return a 32-byte hex token used for password recovery."""
    return secrets.token_hex(32)


def hash_api_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def sign_payload(secret: str, body: bytes) -> str:
    """Hex HMAC-SHA256 signature of ``body`` keyed with ``secret``."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, body: bytes, signature: str) -> bool:
    return hmac.compare_digest(sign_payload(secret, body), signature or "")


def _get_encryption_key() -> bytes:
    """Return a Fernet key from CREDENTIALS_ENCRYPTION_KEY.

    A value that already decodes to 32 bytes is used as-is; any other string
    is stretched with PBKDF2.
    """
    key_str = os.getenv("CREDENTIALS_ENCRYPTION_KEY")
    if not key_str:
        raise ValueError("CREDENTIALS_ENCRYPTION_KEY environment variable not set")
    try:
        if len(base64.urlsafe_b64decode(key_str.encode())) == 32:
            return key_str.encode()
    except ValueError:
        pass
    kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=32, salt=_KDF_SALT, iterations=200_000)
    return base64.urlsafe_b64encode(kdf.derive(key_str.encode()))


_FERNET: Optional[Fernet] = None
_FERNET_SOURCE: Optional[str] = None


def _get_fernet() -> Fernet:
    global _FERNET, _FERNET_SOURCE
    source = os.getenv("CREDENTIALS_ENCRYPTION_KEY")
    if _FERNET is None or source != _FERNET_SOURCE:
        _FERNET = Fernet(_get_encryption_key())
        _FERNET_SOURCE = source
    return _FERNET


def encrypt_credential(plaintext: Optional[str]) -> Optional[str]:
    if not plaintext:
        return None
    return _get_fernet().encrypt(plaintext.encode("utf-8")).decode("ascii")


def decrypt_credential(ciphertext: Optional[str]) -> Optional[str]:
    """Decrypt a stored credential; raises ValueError when the key does not match."""
    if not ciphertext:
        return None
    try:
        return _get_fernet().decrypt(ciphertext.encode("ascii")).decode("utf-8")
    except InvalidToken as exc:
        raise ValueError("Stored credential cannot be decrypted with the configured key") from exc
