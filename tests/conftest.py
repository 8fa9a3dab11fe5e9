"""
Shared fixtures.

The account store runs on mongomock-motor, so repository and service tests
exercise real queries without a MongoDB server. External providers (email,
voice, Google) are AsyncMock fakes.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from mongomock_motor import AsyncMongoMockClient

from config import JWTSettings, VerificationSettings
from repositories.account_repository import ACCOUNTS_COLLECTION, AccountRepository
from schemas.models.account import AccountDoc
from services.auth_service import AuthService
from services.session_service import SessionService
from services.verification_service import VerificationCodeIssuer
from shared.crypto import hash_password

TEST_JWT_SECRET = "test-secret-that-is-long-enough-for-hs256"
FRONTEND_URL = "http://localhost:5173"


@pytest.fixture
def mock_db():
    return AsyncMongoMockClient()["todo-app"]


@pytest.fixture
async def account_repo(mock_db):
    repo = AccountRepository(mock_db[ACCOUNTS_COLLECTION])
    await repo.ensure_indexes()
    return repo


@pytest.fixture
def jwt_settings():
    return JWTSettings(jwt_secret=TEST_JWT_SECRET, cookie_secure=False)


@pytest.fixture
def sessions(jwt_settings, account_repo):
    return SessionService(jwt_settings, account_repo)


@pytest.fixture
def email_provider():
    provider = MagicMock()
    provider.send_verification_email = AsyncMock(return_value=True)
    provider.send_password_reset_email = AsyncMock(return_value=True)
    return provider


@pytest.fixture
def voice_provider():
    provider = MagicMock()
    provider.configured = True
    provider.call_with_code = AsyncMock(return_value=True)
    return provider


@pytest.fixture
def google_client():
    client = MagicMock()
    client.fetch_profile = AsyncMock(
        return_value={
            "provider_user_id": "g-123",
            "email": "gina@example.com",
            "email_verified": True,
            "name": "Gina",
            "picture": "",
        }
    )
    return client


@pytest.fixture
def code_issuer(email_provider, voice_provider):
    return VerificationCodeIssuer(email_provider, voice_provider)


@pytest.fixture
def make_auth_service(account_repo, code_issuer, email_provider, sessions, google_client):
    """Factory so individual tests can override VerificationSettings fields."""

    def _make(**overrides) -> AuthService:
        return AuthService(
            accounts=account_repo,
            code_issuer=code_issuer,
            email_provider=email_provider,
            sessions=sessions,
            google=google_client,
            settings=VerificationSettings(**overrides),
            frontend_url=FRONTEND_URL,
        )

    return _make


@pytest.fixture
def auth_service(make_auth_service):
    return make_auth_service()


@pytest.fixture
def make_verified_account(account_repo):
    async def _make(
        email: str = "bob@example.com",
        password: str = "password123",
        name: str = "Bob",
        phone: str = "+15550000001",
    ) -> AccountDoc:
        return await account_repo.create(
            AccountDoc(
                name=name,
                email=email,
                phone=phone,
                password_hash=hash_password(password),
                verified=True,
            )
        )

    return _make
