"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.resend import ResendEmailProvider
from infrastructure.http_client import HttpClient
from infrastructure.oauth_clients import GoogleOAuthClient
from infrastructure.voice.twilio import TwilioVoiceProvider
from repositories.account_repository import ACCOUNTS_COLLECTION, AccountRepository
from routes.auth_routes import router as auth_router
from routes.health_routes import router as health_router
from services.auth_service import AuthService
from services.session_service import SessionService
from services.verification_service import VerificationCodeIssuer
from shared.logging import get_logger, setup_logging


def build_auth_services(app: FastAPI, settings: AppSettings, db) -> list[HttpClient]:
    """Construct the auth collaborators and attach them to app.state.

    Returns the HTTP clients the caller must close on shutdown.
    """
    email_http = HttpClient(timeout=10.0)
    voice_http = HttpClient(timeout=10.0)

    accounts = AccountRepository(db[ACCOUNTS_COLLECTION])
    sessions = SessionService(settings.jwt, accounts)
    email_provider = ResendEmailProvider(settings.email, email_http)
    issuer = VerificationCodeIssuer(
        email_provider, TwilioVoiceProvider(settings.telephony, voice_http)
    )

    app.state.accounts = accounts
    app.state.session_service = sessions
    app.state.auth_service = AuthService(
        accounts=accounts,
        code_issuer=issuer,
        email_provider=email_provider,
        sessions=sessions,
        google=GoogleOAuthClient(settings.oauth),
        settings=settings.verification,
        frontend_url=settings.frontend_url,
    )
    return [email_http, voice_http]


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    setup_logging(
        settings.logging,
        env=settings.env,
        sentry_enabled=bool(settings.sentry.sentry_dsn),
    )
    log = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        app.state.mongo_client = mongo_client
        app.state.db = mongo_client[settings.db.db_name]
        app.state.settings = settings

        http_clients = build_auth_services(app, settings, app.state.db)
        await app.state.accounts.ensure_indexes()
        log.info("app_started", db_name=settings.db.db_name, env=settings.env)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        for client in http_clients:
            await client.aclose()
        await mongo_client.close()
        log.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Cookies are sent cross-origin from the SPA, so credentials must be allowed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)

    return app
