"""Unit tests for SessionService (JWT issue/validate and cookie handling)."""

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import Response

from config import JWTSettings
from errors import ConfigurationError, UnauthorizedError
from services.session_service import SessionService

TEST_JWT_SECRET = "test-secret-that-is-long-enough-for-hs256"


def _rsa_pair() -> tuple[str, str]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return private_pem, public_pem


# ── Tokens ────────────────────────────────────────────────────────────────────


class TestTokens:
    def test_issue_and_validate_hs256(self, sessions):
        token = sessions.issue("507f1f77bcf86cd799439011", "alice@example.com")
        assert sessions.algorithm == "HS256"
        assert sessions.validate(token) == "507f1f77bcf86cd799439011"

    def test_claims(self, sessions, jwt_settings):
        token = sessions.issue("507f1f77bcf86cd799439011", "alice@example.com")
        claims = jwt.decode(
            token, jwt_settings.jwt_secret, algorithms=["HS256"], audience="todo-app.api"
        )
        assert claims["sub"] == "507f1f77bcf86cd799439011"
        assert claims["email"] == "alice@example.com"
        assert claims["iss"] == "todo-app"
        assert claims["exp"] - claims["iat"] == 3600

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, sessions, token):
        with pytest.raises(UnauthorizedError, match="Token is not present"):
            sessions.validate(token)

    def test_garbage_token(self, sessions):
        with pytest.raises(UnauthorizedError, match="Invalid token"):
            sessions.validate("not.a.jwt")

    def test_expired_token(self, account_repo):
        expired = SessionService(
            JWTSettings(jwt_secret=TEST_JWT_SECRET, session_ttl_seconds=-60),
            account_repo,
        )
        token = expired.issue("507f1f77bcf86cd799439011", "alice@example.com")
        with pytest.raises(UnauthorizedError, match="Token has expired"):
            expired.validate(token)

    def test_token_signed_with_other_secret(self, sessions, account_repo):
        other = SessionService(
            JWTSettings(jwt_secret="a-different-secret-of-sufficient-length"),
            account_repo,
        )
        token = other.issue("507f1f77bcf86cd799439011", "alice@example.com")
        with pytest.raises(UnauthorizedError, match="Invalid token"):
            sessions.validate(token)

    def test_wrong_audience(self, sessions, account_repo):
        other = SessionService(
            JWTSettings(jwt_secret=TEST_JWT_SECRET, jwt_audience="someone-else"),
            account_repo,
        )
        token = other.issue("507f1f77bcf86cd799439011", "alice@example.com")
        with pytest.raises(UnauthorizedError, match="Invalid token"):
            sessions.validate(token)

    def test_no_secret_configured(self, account_repo):
        service = SessionService(
            JWTSettings(jwt_secret="", jwt_key="", jwt_private_key="", jwt_public_key=""),
            account_repo,
        )
        with pytest.raises(ConfigurationError):
            service.issue("507f1f77bcf86cd799439011", "alice@example.com")

    def test_rs256_with_escaped_newlines(self, account_repo):
        private_pem, public_pem = _rsa_pair()
        service = SessionService(
            JWTSettings(
                jwt_private_key=private_pem.replace("\n", "\\n"),
                jwt_public_key=public_pem.replace("\n", "\\n"),
            ),
            account_repo,
        )
        assert service.algorithm == "RS256"
        token = service.issue("507f1f77bcf86cd799439011", "alice@example.com")
        assert jwt.get_unverified_header(token)["alg"] == "RS256"
        assert service.validate(token) == "507f1f77bcf86cd799439011"


# ── authenticate ──────────────────────────────────────────────────────────────


class TestAuthenticate:
    async def test_returns_account(self, sessions, make_verified_account):
        account = await make_verified_account()
        token = sessions.issue(account.id, account.email)
        found = await sessions.authenticate(token)
        assert found.id == account.id

    async def test_account_deleted(self, sessions, make_verified_account, mock_db):
        account = await make_verified_account()
        token = sessions.issue(account.id, account.email)
        await mock_db["accounts"].delete_one({"_id": account.id})
        with pytest.raises(UnauthorizedError, match="User doesn't exist"):
            await sessions.authenticate(token)


# ── Cookies ───────────────────────────────────────────────────────────────────


class TestCookies:
    def test_set_cookie_secure(self, account_repo):
        service = SessionService(
            JWTSettings(jwt_secret=TEST_JWT_SECRET, cookie_secure=True), account_repo
        )
        response = service.set_cookie(Response(), "abc")
        header = response.headers["set-cookie"]
        assert header.startswith("token=abc")
        assert "HttpOnly" in header
        assert "Secure" in header
        assert "samesite=none" in header.lower()
        assert "Max-Age=3600" in header

    def test_set_cookie_insecure_uses_lax(self, sessions):
        header = sessions.set_cookie(Response(), "abc").headers["set-cookie"]
        assert "samesite=lax" in header.lower()
        assert "Secure" not in header

    def test_clear_cookie(self, sessions):
        header = sessions.clear_cookie(Response()).headers["set-cookie"]
        assert header.startswith("token=")
        assert "token=abc" not in header
        assert "expires=" in header.lower()
        assert "Max-Age" not in header

    def test_cookie_name_configurable(self, account_repo):
        service = SessionService(
            JWTSettings(jwt_secret=TEST_JWT_SECRET, cookie_name="session"), account_repo
        )
        assert service.cookie_name == "session"
        assert service.set_cookie(Response(), "abc").headers["set-cookie"].startswith(
            "session=abc"
        )
