"""Google OAuth client for the auth-code sign-in flow.

The frontend obtains a one-time authorization code from Google's popup and
posts it to /googleLogin or /googleRegister. GoogleOAuthClient exchanges the
code for tokens with Authlib's httpx integration and reads the profile from
the userinfo endpoint.
"""

from __future__ import annotations

from typing import Any, Callable, Dict

from authlib.integrations.httpx_client import AsyncOAuth2Client

from config import OAuthProviderSettings
from errors import ConfigurationError
from shared.logging import get_logger

log = get_logger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v1/userinfo?alt=json"


def extract_user_info_from_google(userinfo: Dict[str, Any]) -> Dict[str, Any]:
    # v1 userinfo uses "id"/"verified_email"; the OIDC shape uses "sub"/"email_verified"
    return {
        "provider_user_id": str(userinfo.get("id") or userinfo.get("sub") or ""),
        "email": (userinfo.get("email") or "").lower().strip(),
        "email_verified": bool(
            userinfo.get("verified_email", userinfo.get("email_verified", False))
        ),
        "name": userinfo.get("name", ""),
        "picture": userinfo.get("picture", ""),
    }


class GoogleOAuthClient:
    def __init__(
        self,
        settings: OAuthProviderSettings,
        client_factory: Callable[..., AsyncOAuth2Client] = AsyncOAuth2Client,
        timeout: float = 10.0,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return self._settings.google_configured

    async def fetch_profile(self, code: str) -> Dict[str, Any]:
        """Exchange *code* for tokens and return the normalised Google profile.

        Raises:
            ConfigurationError: client id/secret are not set.
            authlib / httpx errors: the exchange or userinfo call failed.
        """
        if not self.configured:
            log.error("oauth_not_configured", provider="google")
            raise ConfigurationError("Google OAuth is not configured")

        async with self._client_factory(
            client_id=self._settings.google_client_id,
            client_secret=self._settings.google_client_secret,
            redirect_uri=self._settings.google_redirect_uri,
            timeout=self._timeout,
        ) as client:
            await client.fetch_token(
                GOOGLE_TOKEN_URL, code=code, grant_type="authorization_code"
            )
            resp = await client.get(GOOGLE_USERINFO_URL)
            resp.raise_for_status()
            profile = extract_user_info_from_google(resp.json())

        log.info("oauth_profile_fetched", provider="google", email=profile["email"])
        return profile
