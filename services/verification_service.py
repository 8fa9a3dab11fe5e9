"""
VerificationCodeIssuer: delivers one-time codes by email or voice call.

The issuer only dispatches: it never touches the account. A failed send is
reported by raising, and the caller decides what (if anything) to undo.
"""

from __future__ import annotations

from typing import Optional

from errors import ConfigurationError, DispatchError, ValidationError
from infrastructure.email.protocol import EmailProvider
from infrastructure.voice.protocol import VoiceProvider
from shared.generators import generate_verification_code
from shared.logging import get_logger

log = get_logger(__name__)


class VerificationCodeIssuer:
    def __init__(
        self, email_provider: EmailProvider, voice_provider: VoiceProvider
    ) -> None:
        self._email = email_provider
        self._voice = voice_provider

    @staticmethod
    def generate_code() -> int:
        return generate_verification_code()

    async def issue(
        self,
        method: str,
        code: int,
        *,
        name: str,
        email: str,
        phone: Optional[str],
    ) -> str:
        """Send *code* through *method* and return the user-facing message.

        Raises:
            ValidationError: unknown method.
            ConfigurationError: voice delivery requested without telephony credentials.
            DispatchError: the provider did not accept the message.
        """
        if method == "email":
            sent = await self._email.send_verification_email(email, name, code)
            success_message = f"Verification email successfully sent to {name}"
        elif method == "phone":
            if not self._voice.configured:
                raise ConfigurationError(
                    "TWILIO_SID and TWILIO_AUTH_TOKEN are required for phone verification"
                )
            if not phone:
                raise ValidationError("Phone number is required.", field="phone")
            sent = await self._voice.call_with_code(phone, code)
            success_message = "OTP sent."
        else:
            raise ValidationError(
                "Invalid verification method.", field="verificationMethod"
            )

        if not sent:
            log.warning("verification_code_dispatch_failed", method=method, email=email)
            raise DispatchError("Verification code failed to send.")

        log.info("verification_code_dispatched", method=method, email=email)
        return success_message
