"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

Legacy variable names from the previous deployment are still honoured:
DB_CONNECT_STRING for MONGODB_URI and JWT_KEY for JWT_SECRET (resolved in
the individual sub-configs).
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", populate_by_name=True
    )

    mongodb_uri: str = Field(
        validation_alias=AliasChoices("MONGODB_URI", "DB_CONNECT_STRING")
    )
    db_name: str = "todo-app"


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_issuer: str = "todo-app"
    jwt_audience: str = "todo-app.api"
    session_ttl_seconds: int = 3600
    cookie_name: str = "token"
    cookie_secure: bool = True

    # RS256 keys (preferred)
    jwt_private_key: str = ""
    jwt_public_key: str = ""

    # HS256 fallback (used when RS256 keys are absent)
    jwt_secret: str = ""
    jwt_key: str = ""  # legacy name for jwt_secret

    @model_validator(mode="after")
    def _resolve_legacy_secret(self) -> "JWTSettings":
        if not self.jwt_secret and self.jwt_key:
            self.jwt_secret = self.jwt_key
        return self

    @property
    def use_rs256(self) -> bool:
        return bool(self.jwt_private_key and self.jwt_public_key)


class VerificationSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    otp_ttl_seconds: int = 600
    # Registration is refused once this many attempts are stored
    max_verification_attempts: int = 4
    attempt_lockout_seconds: int = 3600
    reset_token_ttl_seconds: int = 900


class OAuthProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    google_client_id: str = ""
    google_client_secret: str = ""
    # The frontend uses the auth-code popup flow, whose redirect URI is "postmessage"
    google_redirect_uri: str = "postmessage"

    @property
    def google_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    resend_api: str = ""
    resend_from: str = "Todo <noreply@divyanshu-verma.me>"


class TelephonySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    twilio_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.twilio_sid and self.twilio_auth_token)


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "todo-app"
    frontend_url: str = "http://localhost:5173"

    cors_origins: list[str] = ["http://localhost:5173"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    jwt: Optional[JWTSettings] = None
    verification: Optional[VerificationSettings] = None
    oauth: Optional[OAuthProviderSettings] = None
    email: Optional[EmailSettings] = None
    telephony: Optional[TelephonySettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.verification is None:
            self.verification = VerificationSettings()
        if self.oauth is None:
            self.oauth = OAuthProviderSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.telephony is None:
            self.telephony = TelephonySettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self
