"""
AuthService: account verification and authentication flows.

State per account: unregistered → unverified → verified, with a
reset-pending sub-state reachable only from verified. Each public method is
one guarded transition over the AccountRepository; failures raise the typed
errors from errors.py and routes turn them into responses.

Collaborators (repository, code issuer, email provider, session service,
Google client) are injected so tests can substitute fakes.
"""

from __future__ import annotations

from typing import Optional

from config import VerificationSettings
from errors import (
    ConflictError,
    DispatchError,
    ExpiredError,
    InvalidCredentialError,
    InvalidOrExpiredTokenError,
    MismatchError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from infrastructure.email.protocol import EmailProvider
from infrastructure.oauth_clients import GoogleOAuthClient
from repositories.account_repository import AccountRepository
from schemas.models.account import AccountDoc, PasswordReset, VerificationAttempt
from services.session_service import SessionService
from services.verification_service import VerificationCodeIssuer
from shared.crypto import hash_password, hash_token, verify_password
from shared.datetime_utils import expires_in, utc_now
from shared.generators import generate_reset_token
from shared.logging import get_logger

log = get_logger(__name__)

MAX_ATTEMPTS_MESSAGE = (
    "You have exceeded the maximum number of attempts (3). "
    "Please try again after an hour."
)


class AuthService:
    def __init__(
        self,
        accounts: AccountRepository,
        code_issuer: VerificationCodeIssuer,
        email_provider: EmailProvider,
        sessions: SessionService,
        google: GoogleOAuthClient,
        settings: VerificationSettings,
        frontend_url: str,
    ) -> None:
        self._accounts = accounts
        self._codes = code_issuer
        self._email = email_provider
        self._sessions = sessions
        self._google = google
        self._settings = settings
        self._frontend_url = frontend_url.rstrip("/")

    # ── Registration & OTP ───────────────────────────────────────────────────

    async def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        phone: Optional[str],
        method: str,
    ) -> str:
        """Record a verification attempt and dispatch its code.

        Returns the issuer's success message. The attempt stays recorded even
        when dispatch fails.
        """
        if await self._accounts.find_by_contact(
            email=email, phone=phone, verified=True
        ):
            raise ConflictError("User already exists")

        account = await self._accounts.find_by_contact(
            email=email, phone=phone, verified=False
        )

        now = utc_now()
        restart = False
        if account is not None and account.attempts_exhausted(
            self._settings.max_verification_attempts
        ):
            if not account.lockout_elapsed(
                self._settings.attempt_lockout_seconds, now=now
            ):
                log.warning(
                    "registration_rate_limited",
                    account_id=str(account.id),
                    attempts=len(account.verification_attempts),
                )
                raise RateLimitError(MAX_ATTEMPTS_MESSAGE)
            restart = True

        code = self._codes.generate_code()
        attempt = VerificationAttempt.issue(
            code, self._settings.otp_ttl_seconds, now=now
        )

        if account is None:
            account = await self._accounts.create(
                AccountDoc(
                    name=name,
                    email=email,
                    phone=phone,
                    password_hash=hash_password(password),
                    verified=False,
                    verification_attempts=[attempt],
                )
            )
            log.info("account_registered", account_id=str(account.id), method=method)
        else:
            account = await self._accounts.push_verification_attempt(
                account,
                attempt,
                limit=self._settings.max_verification_attempts,
                restart=restart,
            )
            log.info(
                "verification_attempt_added",
                account_id=str(account.id),
                attempts=len(account.verification_attempts),
                restarted=restart,
            )

        return await self._codes.issue(
            method,
            code,
            name=account.name,
            email=account.email,
            phone=account.phone,
        )

    async def verify_otp(
        self, *, email: Optional[str], phone: Optional[str], otp: str
    ) -> tuple[AccountDoc, str]:
        """Check *otp* against the newest issued code and verify the account.

        Returns the verified account and a fresh session token.
        """
        if await self._accounts.find_by_contact(
            email=email, phone=phone, verified=True
        ):
            raise ConflictError("User already verified")

        account = await self._accounts.find_by_contact(
            email=email, phone=phone, verified=False
        )
        if account is None:
            raise NotFoundError("User not found")
        if not account.verification_attempts:
            raise NotFoundError("Verification code not found")

        if len(account.verification_attempts) > 1:
            account = await self._accounts.collapse_verification_attempts(account)

        attempt = account.latest_attempt
        if not attempt.matches(int(otp)):
            log.info(
                "otp_verification_failed",
                account_id=str(account.id),
                reason="mismatch",
            )
            raise InvalidCredentialError("Invalid OTP")
        if attempt.is_expired():
            log.info(
                "otp_verification_failed",
                account_id=str(account.id),
                reason="expired",
            )
            raise ExpiredError("OTP Expired.")

        account = await self._accounts.mark_verified(account)
        log.info("account_verified", account_id=str(account.id))
        return account, self._sessions.issue(account.id, account.email)

    # ── Login ────────────────────────────────────────────────────────────────

    async def login(
        self, *, email: Optional[str], password: Optional[str]
    ) -> tuple[AccountDoc, str]:
        if not email:
            raise InvalidCredentialError("Invalid Credential email!")
        if not password:
            raise InvalidCredentialError("Invalid Credential password!")

        account = await self._accounts.find_verified_by_email(email)
        if account is None or not account.password_hash:
            raise InvalidCredentialError("Invalid email or password.")

        if not verify_password(password, account.password_hash):
            log.info("login_failed", account_id=str(account.id))
            raise InvalidCredentialError("Invalid Credential not matched!")

        log.info("login_succeeded", account_id=str(account.id), method="password")
        return account, self._sessions.issue(account.id, account.email)

    # ── Password reset ───────────────────────────────────────────────────────

    async def forgot_password(self, *, email: str) -> str:
        """Store a reset token hash and email the raw token as a link.

        If the email cannot be sent the stored reset is cleared again.
        """
        account = await self._accounts.find_verified_by_email(email)
        if account is None:
            raise NotFoundError("User not found.")

        raw_token, token_hash = generate_reset_token()
        now = utc_now()
        await self._accounts.set_password_reset(
            account.id,
            PasswordReset(
                token_hash=token_hash,
                expires_at=expires_in(self._settings.reset_token_ttl_seconds, now=now),
                created_at=now,
            ),
        )

        reset_url = f"{self._frontend_url}/resetPassword/{raw_token}"
        sent = await self._email.send_password_reset_email(
            account.email, account.name, reset_url
        )
        if not sent:
            await self._accounts.clear_password_reset(account.id)
            log.warning("password_reset_email_failed", account_id=str(account.id))
            raise DispatchError("Cannot send reset password token.")

        log.info("password_reset_requested", account_id=str(account.id))
        return f"Email sent to {account.email} successfully."

    async def reset_password(
        self, *, token: str, password: str, confirm_password: str
    ) -> None:
        account = await self._accounts.find_by_reset_token_hash(hash_token(token))
        if (
            account is None
            or account.password_reset is None
            or account.password_reset.is_expired()
        ):
            raise InvalidOrExpiredTokenError(
                "Reset password token is invalid or has been expired."
            )

        if password != confirm_password:
            raise MismatchError("Password & confirm password do not match.")

        await self._accounts.update_password(account.id, hash_password(password))
        log.info("password_reset_completed", account_id=str(account.id))

    # ── Google ───────────────────────────────────────────────────────────────

    async def _fetch_google_profile(self, code: str) -> dict:
        profile = await self._google.fetch_profile(code)
        if not profile.get("email"):
            raise ValidationError("Google account has no email address.", field="email")
        return profile

    async def google_login(self, *, code: str) -> tuple[AccountDoc, str]:
        profile = await self._fetch_google_profile(code)
        account = await self._accounts.find_verified_by_email(profile["email"])
        if account is None:
            raise NotFoundError("Email does not exist")

        log.info("login_succeeded", account_id=str(account.id), method="google")
        return account, self._sessions.issue(account.id, account.email)

    async def google_register(self, *, code: str) -> tuple[AccountDoc, str]:
        profile = await self._fetch_google_profile(code)
        if await self._accounts.find_by_email(profile["email"]):
            raise ConflictError("User already exists!")

        account = await self._accounts.create(
            AccountDoc(
                name=profile["name"] or profile["email"],
                email=profile["email"],
                verified=True,
            )
        )
        log.info("account_registered", account_id=str(account.id), method="google")
        return account, self._sessions.issue(account.id, account.email)
