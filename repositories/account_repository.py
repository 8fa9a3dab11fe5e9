"""
AccountRepository: the credential store.

Wraps the async `accounts` collection. Every write to the verification log
or the reset-password fields goes through a named method here, so services
never build raw update documents.

Lookups by "contact" match on email OR phone, using only the identifiers
that were actually supplied; a missing phone never turns into a
``{"phone": None}`` clause that would match every phone-less account.
"""

from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from errors import ConflictError
from schemas.models.account import AccountDoc, PasswordReset, VerificationAttempt
from shared.datetime_utils import utc_now
from shared.logging import get_logger

log = get_logger(__name__)

ACCOUNTS_COLLECTION = "accounts"


def _contact_filter(email: Optional[str], phone: Optional[str]) -> Optional[dict]:
    clauses: list[dict[str, Any]] = []
    if email:
        clauses.append({"email": email})
    if phone:
        clauses.append({"phone": phone})
    if not clauses:
        return None
    return {"$or": clauses}


def _as_object_id(account_id: Any) -> Optional[ObjectId]:
    if isinstance(account_id, ObjectId):
        return account_id
    if isinstance(account_id, str) and ObjectId.is_valid(account_id):
        return ObjectId(account_id)
    return None


class AccountRepository:
    def __init__(self, collection: Any) -> None:
        self._col = collection

    async def ensure_indexes(self) -> None:
        await self._col.create_index([("email", ASCENDING)], unique=True)
        await self._col.create_index([("phone", ASCENDING)])
        await self._col.create_index(
            [("password_reset.token_hash", ASCENDING)], sparse=True
        )

    # ── Reads ────────────────────────────────────────────────────────────────

    async def _find_one(self, query: dict) -> Optional[AccountDoc]:
        return AccountDoc.from_mongo(await self._col.find_one(query))

    async def find_by_id(self, account_id: Any) -> Optional[AccountDoc]:
        oid = _as_object_id(account_id)
        if oid is None:
            return None
        return await self._find_one({"_id": oid})

    async def find_by_email(self, email: str) -> Optional[AccountDoc]:
        return await self._find_one({"email": email})

    async def find_verified_by_email(self, email: str) -> Optional[AccountDoc]:
        return await self._find_one({"email": email, "verified": True})

    async def find_by_contact(
        self,
        *,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        verified: bool,
    ) -> Optional[AccountDoc]:
        """Return an account matching *email* or *phone* with the given state."""
        query = _contact_filter(email, phone)
        if query is None:
            return None
        query["verified"] = verified
        return await self._find_one(query)

    async def find_by_reset_token_hash(self, token_hash: str) -> Optional[AccountDoc]:
        return await self._find_one({"password_reset.token_hash": token_hash})

    # ── Writes ───────────────────────────────────────────────────────────────

    async def create(self, account: AccountDoc) -> AccountDoc:
        now = utc_now()
        account = account.model_copy(update={"created_at": now, "updated_at": now})
        try:
            result = await self._col.insert_one(account.to_mongo())
        except DuplicateKeyError:
            log.warning("account_create_conflict", email=account.email)
            raise ConflictError("User already exists")
        return account.model_copy(update={"id": result.inserted_id})

    async def _set(
        self, account_id: ObjectId, fields: dict, unset: Optional[dict] = None
    ) -> None:
        update: dict[str, Any] = {"$set": {**fields, "updated_at": utc_now()}}
        if unset:
            update["$unset"] = unset
        await self._col.update_one({"_id": account_id}, update)

    async def push_verification_attempt(
        self,
        account: AccountDoc,
        attempt: VerificationAttempt,
        *,
        limit: int,
        restart: bool = False,
    ) -> AccountDoc:
        """Prepend *attempt* to the account's log, keeping at most *limit* entries.

        With ``restart=True`` the existing history is discarded first.
        """
        attempts = [attempt] if restart else account.attempts_with(attempt, limit)
        await self._set(
            account.id,
            {"verification_attempts": [a.model_dump() for a in attempts]},
        )
        return account.model_copy(update={"verification_attempts": attempts})

    async def collapse_verification_attempts(self, account: AccountDoc) -> AccountDoc:
        """Reduce the log to its newest entry; older codes stop being checkable."""
        attempts = account.collapsed_attempts()
        await self._set(
            account.id,
            {"verification_attempts": [a.model_dump() for a in attempts]},
        )
        return account.model_copy(update={"verification_attempts": attempts})

    async def mark_verified(self, account: AccountDoc) -> AccountDoc:
        """Flip the account to verified and clear its verification log."""
        await self._set(account.id, {"verified": True, "verification_attempts": []})
        return account.model_copy(
            update={"verified": True, "verification_attempts": []}
        )

    async def set_password_reset(
        self, account_id: ObjectId, reset: PasswordReset
    ) -> None:
        await self._set(account_id, {"password_reset": reset.model_dump()})

    async def clear_password_reset(self, account_id: ObjectId) -> None:
        await self._set(account_id, {}, unset={"password_reset": ""})

    async def update_password(self, account_id: ObjectId, password_hash: str) -> None:
        """Replace the password hash and consume any outstanding reset."""
        await self._set(
            account_id,
            {"password_hash": password_hash},
            unset={"password_reset": ""},
        )
