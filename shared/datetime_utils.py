"""
Date/time helpers, framework-agnostic.

MongoDB hands datetimes back naive unless the client is tz-aware, so every
comparison in the auth flows goes through ensure_utc().
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise *value* to a timezone-aware UTC datetime.

    Naive datetimes (no ``tzinfo``) are assumed to be UTC.
    ``None`` passes through unchanged.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def expires_in(seconds: int, *, now: Optional[datetime] = None) -> datetime:
    """Return the UTC instant *seconds* after *now* (default: the current time)."""
    return (now or utc_now()) + timedelta(seconds=seconds)


def is_expired(expires_at: datetime, *, now: Optional[datetime] = None) -> bool:
    """True once *now* is strictly past *expires_at*."""
    return (now or utc_now()) > ensure_utc(expires_at)
