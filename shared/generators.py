"""
Random code and token generators.

All generators use the ``secrets`` module.
"""

from __future__ import annotations

import secrets

from shared.crypto import hash_token

VERIFICATION_CODE_MIN = 10000
VERIFICATION_CODE_MAX = 99999


def generate_verification_code() -> int:
    """Generate a 5-digit one-time code whose first digit is never zero.

    Returns:
        Integer uniformly drawn from 10000–99999.
    """
    return VERIFICATION_CODE_MIN + secrets.randbelow(
        VERIFICATION_CODE_MAX - VERIFICATION_CODE_MIN + 1
    )


def generate_reset_token(nbytes: int = 20) -> tuple[str, str]:
    """Generate a password-reset token.

    Args:
        nbytes: Number of random bytes (default 20, i.e. 40 hex characters).

    Returns:
        ``(raw_token, token_hash)``. Only the hash may be persisted.
    """
    raw = secrets.token_hex(nbytes)
    return raw, hash_token(raw)
