"""Resend implementation of EmailProvider.

Sends through the Resend HTTP API with an injected HttpClient; HTML bodies
are rendered from the Jinja2 templates under templates/emails.
"""

import os
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_RESEND_API_URL = "https://api.resend.com/emails"
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


class ResendEmailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        app_name: str = "Your Todo App",
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._app_name = app_name
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    async def _send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> bool:
        if not self._settings.resend_api:
            log.error("email_send_failed", reason="api_key_not_configured")
            return False

        payload: dict = {
            "from": self._settings.resend_from,
            "to": [to_email],
            "subject": subject,
            "html": html_body,
        }
        if text_body:
            payload["text"] = text_body

        headers = {
            "Authorization": f"Bearer {self._settings.resend_api}",
            "Content-Type": "application/json",
        }

        try:
            response = await self._http.post(
                _RESEND_API_URL, json=payload, headers=headers
            )
            if response.status_code in (200, 201, 202):
                log.info("email_sent_success", to_email=to_email, subject=subject)
                return True
            log.error(
                "email_sent_failed",
                to_email=to_email,
                subject=subject,
                status_code=response.status_code,
                response=response.text[:200],
            )
            return False
        except Exception as e:
            log.error(
                "email_send_error",
                to_email=to_email,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def send_verification_email(
        self, email: str, user_name: Optional[str], code: int
    ) -> bool:
        subject = "Your Verification Code"
        template = self._jinja.get_template("verification.html")
        html_body = template.render(
            verification_code=code, user_name=user_name, app_name=self._app_name
        )
        text_body = (
            f"Verify Your Email - {self._app_name}\n\n"
            f"Hello{f' {user_name}' if user_name else ''},\n\n"
            f"Your verification code is: {code}\n\n"
            f"This code expires in 10 minutes."
        )
        return await self._send(email, subject, html_body, text_body)

    async def send_password_reset_email(
        self, email: str, user_name: Optional[str], reset_url: str
    ) -> bool:
        subject = f"{self._app_name} - Reset Password"
        template = self._jinja.get_template("password_reset.html")
        html_body = template.render(
            reset_url=reset_url, user_name=user_name, app_name=self._app_name
        )
        text_body = (
            f"Your reset password link is:\n\n{reset_url}\n\n"
            f"The link expires in 15 minutes. If you have not requested this "
            f"email then please ignore it."
        )
        return await self._send(email, subject, html_body, text_body)
