"""
Cryptographic helpers for password and reset-token hashing.

Uses argon2 for passwords (via argon2-cffi) and SHA-256 for reset tokens.
"""

from __future__ import annotations

import hashlib

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_password_hasher = PasswordHasher()


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id.

    Returns:
        Argon2 hash string (includes algorithm parameters and salt).
    """
    return _password_hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify *plain_password* against an argon2 *password_hash*.

    The comparison itself is constant-time inside argon2.

    Returns:
        ``True`` if the password matches, ``False`` for a mismatch or a
        malformed hash.
    """
    try:
        return _password_hasher.verify(password_hash, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def hash_token(token: str) -> str:
    """Return the hex-encoded SHA-256 digest of *token*.

    Reset-password tokens are stored only in this form; the raw value
    travels once, inside the emailed link.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
