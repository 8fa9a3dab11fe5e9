"""
Account document model.

Maps to the `accounts` MongoDB collection.

Two creation paths produce slightly different shapes:
- Password registration: unverified, password_hash set, one verification attempt
- Google registration: verified from the start, no password_hash

verification_attempts is a newest-first log of issued one-time codes. It is
only ever rewritten through the AccountRepository methods that wrap the
helpers below (push / collapse / clear), never spliced in place.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, Field

from schemas.models.base import MongoBaseModel, UtcDatetime
from shared.datetime_utils import expires_in, is_expired, utc_now
from shared.generators import VERIFICATION_CODE_MAX, VERIFICATION_CODE_MIN


class VerificationAttempt(BaseModel):
    """One issued verification code."""

    code: int = Field(ge=VERIFICATION_CODE_MIN, le=VERIFICATION_CODE_MAX)
    expires_at: UtcDatetime
    created_at: UtcDatetime

    @classmethod
    def issue(
        cls, code: int, ttl_seconds: int, *, now: Optional[datetime] = None
    ) -> "VerificationAttempt":
        now = now or utc_now()
        return cls(
            code=code,
            expires_at=expires_in(ttl_seconds, now=now),
            created_at=now,
        )

    def matches(self, otp: int) -> bool:
        return self.code == otp

    def is_expired(self, *, now: Optional[datetime] = None) -> bool:
        return is_expired(self.expires_at, now=now)


class PasswordReset(BaseModel):
    """Outstanding reset-password request. token_hash is SHA-256(raw token)."""

    token_hash: str
    expires_at: UtcDatetime
    created_at: Optional[UtcDatetime] = None

    def is_expired(self, *, now: Optional[datetime] = None) -> bool:
        return is_expired(self.expires_at, now=now)


class AccountDoc(MongoBaseModel):
    """Document model for the `accounts` collection."""

    name: str
    email: str
    phone: Optional[str] = None
    password_hash: Optional[str] = None
    verified: bool = False
    verification_attempts: list[VerificationAttempt] = []
    password_reset: Optional[PasswordReset] = None
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None

    @property
    def latest_attempt(self) -> Optional[VerificationAttempt]:
        return self.verification_attempts[0] if self.verification_attempts else None

    def attempts_exhausted(self, max_attempts: int) -> bool:
        """True when no further attempt may be added to the log."""
        return len(self.verification_attempts) >= max_attempts

    def lockout_elapsed(
        self, lockout_seconds: int, *, now: Optional[datetime] = None
    ) -> bool:
        """True once the newest attempt is older than the lockout window."""
        latest = self.latest_attempt
        if latest is None:
            return True
        return (now or utc_now()) >= latest.created_at + timedelta(
            seconds=lockout_seconds
        )

    def attempts_with(
        self, attempt: VerificationAttempt, limit: int
    ) -> list[VerificationAttempt]:
        """Return the log with *attempt* prepended, bounded to *limit* entries."""
        return [attempt, *self.verification_attempts][:limit]

    def collapsed_attempts(self) -> list[VerificationAttempt]:
        """Return the log reduced to its newest entry."""
        return self.verification_attempts[:1]
