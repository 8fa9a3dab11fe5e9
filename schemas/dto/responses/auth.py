"""
Response DTOs for authentication endpoints.

AccountReply      — public account shape embedded in session responses
SessionResponse   — /otpverification, /login, /googleLogin, /googleRegister (201), /check (200)
MessageResponse   — /register, /logout, /forgotPassword, /resetPassword (200)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.account import AccountDoc


class AccountReply(BaseModel):
    """Account fields safe to return to the client.

    ``emailId`` duplicates ``email``; older frontend screens read that key.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    email: str
    email_id: str = Field(alias="emailId")

    @classmethod
    def from_account(cls, account: AccountDoc) -> "AccountReply":
        return cls(
            id=str(account.id),
            name=account.name,
            email=account.email,
            email_id=account.email,
        )


class SessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user: AccountReply
    message: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: Optional[bool] = None
    message: str
