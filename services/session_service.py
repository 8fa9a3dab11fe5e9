"""
SessionService: signed session tokens carried in the ``token`` cookie.

Tokens are JWTs (PyJWT) holding the account id and email, valid for
``session_ttl_seconds`` (one hour by default). RS256 is used when a key pair
is configured, HS256 with JWT_SECRET otherwise.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

import jwt
from fastapi import Response

from config import JWTSettings
from errors import ConfigurationError, UnauthorizedError
from repositories.account_repository import AccountRepository
from schemas.models.account import AccountDoc
from shared.datetime_utils import utc_now
from shared.logging import get_logger

log = get_logger(__name__)


class SessionService:
    def __init__(self, settings: JWTSettings, accounts: AccountRepository) -> None:
        self._settings = settings
        self._accounts = accounts

    # ── Keys ─────────────────────────────────────────────────────────────────

    @property
    def algorithm(self) -> str:
        return "RS256" if self._settings.use_rs256 else "HS256"

    def _keys(self) -> tuple[Any, Any]:
        if self._settings.use_rs256:
            # Support keys provided via env with literal \n sequences
            priv = self._settings.jwt_private_key.replace("\\n", "\n").encode("utf-8")
            pub = self._settings.jwt_public_key.replace("\\n", "\n").encode("utf-8")
            return priv, pub
        secret = self._settings.jwt_secret
        if not secret:
            raise ConfigurationError(
                "JWT_SECRET must be set when RS256 keys are not provided"
            )
        return secret, secret

    # ── Tokens ───────────────────────────────────────────────────────────────

    def issue(self, account_id: Any, email: str) -> str:
        """Mint a session token for *account_id*."""
        private_key, _ = self._keys()
        now = utc_now()
        claims = {
            "iss": self._settings.jwt_issuer,
            "aud": self._settings.jwt_audience,
            "sub": str(account_id),
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int(
                (now + timedelta(seconds=self._settings.session_ttl_seconds)).timestamp()
            ),
        }
        return jwt.encode(claims, private_key, algorithm=self.algorithm)

    def validate(self, token: Optional[str]) -> str:
        """Return the account id carried by *token*.

        Raises:
            UnauthorizedError: token missing, expired, or not signed by us.
        """
        if not token:
            raise UnauthorizedError("Token is not present")
        _, public_key = self._keys()
        try:
            claims = jwt.decode(
                token,
                public_key,
                algorithms=[self.algorithm],
                audience=self._settings.jwt_audience,
                issuer=self._settings.jwt_issuer,
            )
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Token has expired")
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Invalid token")

        account_id = claims.get("sub")
        if not account_id:
            raise UnauthorizedError("Invalid token")
        return account_id

    async def authenticate(self, token: Optional[str]) -> AccountDoc:
        """Validate *token* and load the account it refers to."""
        account_id = self.validate(token)
        account = await self._accounts.find_by_id(account_id)
        if account is None:
            log.warning("session_account_missing", account_id=account_id)
            raise UnauthorizedError("User doesn't exist")
        return account

    # ── Cookies ──────────────────────────────────────────────────────────────

    @property
    def cookie_name(self) -> str:
        return self._settings.cookie_name

    def _cookie_options(self) -> dict:
        secure = self._settings.cookie_secure
        # browsers reject SameSite=None on non-secure cookies
        return {
            "httponly": True,
            "secure": secure,
            "samesite": "none" if secure else "lax",
            "path": "/",
        }

    def set_cookie(self, response: Response, token: str) -> Response:
        response.set_cookie(
            self._settings.cookie_name,
            value=token,
            max_age=self._settings.session_ttl_seconds,
            **self._cookie_options(),
        )
        return response

    def clear_cookie(self, response: Response) -> Response:
        response.set_cookie(
            self._settings.cookie_name,
            value="",
            expires=0,
            **self._cookie_options(),
        )
        return response
