"""Unit tests for VerificationCodeIssuer."""

import pytest

from errors import ConfigurationError, DispatchError, ValidationError


class TestIssueByEmail:
    async def test_sends_email(self, code_issuer, email_provider):
        message = await code_issuer.issue(
            "email", 12345, name="Alice", email="alice@example.com", phone=None
        )
        assert message == "Verification email successfully sent to Alice"
        email_provider.send_verification_email.assert_awaited_once_with(
            "alice@example.com", "Alice", 12345
        )

    async def test_failed_send_raises(self, code_issuer, email_provider):
        email_provider.send_verification_email.return_value = False
        with pytest.raises(DispatchError, match="Verification code failed to send."):
            await code_issuer.issue(
                "email", 12345, name="Alice", email="alice@example.com", phone=None
            )


class TestIssueByPhone:
    async def test_places_call(self, code_issuer, voice_provider):
        message = await code_issuer.issue(
            "phone", 12345, name="Alice", email="alice@example.com", phone="+15551234567"
        )
        assert message == "OTP sent."
        voice_provider.call_with_code.assert_awaited_once_with("+15551234567", 12345)

    async def test_unconfigured_telephony(self, code_issuer, voice_provider):
        voice_provider.configured = False
        with pytest.raises(ConfigurationError):
            await code_issuer.issue(
                "phone", 12345, name="Alice", email="a@example.com", phone="+15551234567"
            )
        voice_provider.call_with_code.assert_not_called()

    async def test_missing_phone(self, code_issuer):
        with pytest.raises(ValidationError):
            await code_issuer.issue(
                "phone", 12345, name="Alice", email="a@example.com", phone=None
            )

    async def test_failed_call_raises(self, code_issuer, voice_provider):
        voice_provider.call_with_code.return_value = False
        with pytest.raises(DispatchError):
            await code_issuer.issue(
                "phone", 12345, name="Alice", email="a@example.com", phone="+15551234567"
            )


class TestUnknownMethod:
    async def test_rejected(self, code_issuer, email_provider, voice_provider):
        with pytest.raises(ValidationError, match="Invalid verification method."):
            await code_issuer.issue(
                "sms", 12345, name="Alice", email="a@example.com", phone="+15551234567"
            )
        email_provider.send_verification_email.assert_not_called()
        voice_provider.call_with_code.assert_not_called()

    def test_generate_code_is_five_digits(self, code_issuer):
        assert 10000 <= code_issuer.generate_code() <= 99999
