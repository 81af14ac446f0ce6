from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from typing import Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from otp_service.config import Settings
from otp_service.errors import DeliveryFailedError
from otp_service.models.otp import OtpPurpose
from otp_service.services.phone import mask_phone

LOGGER = logging.getLogger(__name__)

TWILIO_MESSAGES_ENDPOINT = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


class SmsSender(Protocol):
    def send(self, phone_number: str, message: str) -> None:
        ...


@dataclass
class LogSmsSender:
    sender_name: str = "OTPService"

    def send(self, phone_number: str, message: str) -> None:
        LOGGER.info(
            "SMS (log only) from=%s to=%s message=%s",
            self.sender_name,
            mask_phone(phone_number),
            _mask_digits(message),
        )


@dataclass
class TwilioSmsSender:
    account_sid: str
    auth_token: str
    from_number: str
    timeout: float = 10.0

    def send(self, phone_number: str, message: str) -> None:
        if not self.account_sid or not self.auth_token or not self.from_number:
            raise DeliveryFailedError("Twilio is not configured")

        endpoint = TWILIO_MESSAGES_ENDPOINT.format(sid=self.account_sid)
        payload = urlencode(
            {"To": phone_number, "From": self.from_number, "Body": message}
        ).encode("utf-8")
        token = base64.b64encode(
            f"{self.account_sid}:{self.auth_token}".encode("utf-8")
        ).decode("ascii")
        request = Request(
            endpoint,
            data=payload,
            headers={
                "Authorization": f"Basic {token}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            method="POST",
        )
        try:
            with urlopen(request, timeout=self.timeout) as response:
                response.read()
        except HTTPError as exc:
            error_body = exc.read().decode("utf-8", errors="replace")
            LOGGER.error(
                "Twilio API error to=%s status=%s response=%s",
                mask_phone(phone_number),
                exc.code,
                error_body,
            )
            raise DeliveryFailedError("Failed to send OTP SMS") from exc
        except URLError as exc:
            raise DeliveryFailedError("Failed to reach Twilio API") from exc


def build_sms_sender(settings: Settings) -> SmsSender:
    provider = settings.sms_provider
    if provider == "twilio":
        return TwilioSmsSender(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            from_number=settings.twilio_phone_number,
        )
    if provider != "log":
        LOGGER.warning("Unknown SMS provider %r, falling back to log sender", provider)
    return LogSmsSender(sender_name=settings.sms_sender_name)


def build_message(code: str, purpose: OtpPurpose | str, validity_minutes: int) -> str:
    purpose = OtpPurpose(purpose)
    if purpose is OtpPurpose.login:
        label = "login code"
    elif purpose is OtpPurpose.reset:
        label = "password reset code"
    else:
        label = "verification code"
    return (
        f"Your {label} is: {code}."
        f" Valid for {validity_minutes} minutes."
        " Do not share this code."
    )


def _mask_digits(message: str) -> str:
    return re.sub(r"\d{4,}", lambda match: "*" * len(match.group(0)), message or "")
