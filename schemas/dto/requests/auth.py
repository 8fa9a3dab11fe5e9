"""
Request DTOs for authentication endpoints (mounted under /api/user).

RegisterRequest        — POST /register
VerifyOtpRequest       — POST /otpverification
LoginRequest           — POST /login
ForgotPasswordRequest  — POST /forgotPassword
ResetPasswordRequest   — POST /resetPassword/{token}

Field names follow the frontend's camelCase payloads via aliases.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)


class RegisterRequest(BaseModel):
    """Request body for POST /register."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=3)
    email: EmailStr
    password: str = Field(min_length=8)
    phone: str = Field(min_length=10)
    verification_method: Literal["email", "phone"] = Field(
        alias="verificationMethod"
    )


class VerifyOtpRequest(BaseModel):
    """Request body for POST /otpverification.

    ``otp`` is the 5-digit code; at least one of email/phone identifies the
    account.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    otp: str = Field(pattern=r"^\d{5}$")

    @model_validator(mode="after")
    def _require_contact(self) -> "VerifyOtpRequest":
        if not self.email and not self.phone:
            raise ValueError("email or phone is required")
        return self


class LoginRequest(BaseModel):
    """Request body for POST /login.

    Both fields are optional here; missing credentials are rejected by the
    login flow itself with the usual invalid-credential error. The email is
    normalised like the registration email so lookups match the stored value.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[EmailStr] = None
    password: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def _blank_email_is_missing(cls, value):
        return value or None


class ForgotPasswordRequest(BaseModel):
    """Request body for POST /forgotPassword."""

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request body for POST /resetPassword/{token}."""

    model_config = ConfigDict(populate_by_name=True)

    password: str = Field(min_length=8)
    confirm_password: str = Field(min_length=8, alias="confirmPassword")
