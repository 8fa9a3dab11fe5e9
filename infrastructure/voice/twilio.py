"""Twilio implementation of VoiceProvider.

Places a call through the Twilio REST API (Calls resource) with inline TwiML
that reads the verification code digit by digit, twice.
"""

from xml.sax.saxutils import escape

from config import TelephonySettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_TWILIO_CALLS_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Calls.json"


def spoken_code(code: int) -> str:
    """Space-separate the digits so the speech engine reads them one by one."""
    return " ".join(str(code))


def build_twiml(code: int) -> str:
    sentence = escape(f"Your verification code is {spoken_code(code)}.")
    return f"<Response><Say>{sentence} {sentence}</Say></Response>"


class TwilioVoiceProvider:
    def __init__(self, settings: TelephonySettings, http_client: HttpClient) -> None:
        self._settings = settings
        self._http = http_client

    @property
    def configured(self) -> bool:
        return self._settings.configured

    async def call_with_code(self, phone: str, code: int) -> bool:
        if not self.configured:
            log.error("voice_call_failed", reason="credentials_not_configured")
            return False

        url = _TWILIO_CALLS_URL.format(sid=self._settings.twilio_sid)
        data = {
            "To": phone,
            "From": self._settings.twilio_phone_number,
            "Twiml": build_twiml(code),
        }

        try:
            response = await self._http.post(
                url,
                data=data,
                auth=(self._settings.twilio_sid, self._settings.twilio_auth_token),
            )
            if response.status_code in (200, 201):
                log.info("voice_call_placed", to_phone=phone)
                return True
            log.error(
                "voice_call_failed",
                to_phone=phone,
                status_code=response.status_code,
                response=response.text[:200],
            )
            return False
        except Exception as e:
            log.error(
                "voice_call_error",
                to_phone=phone,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
