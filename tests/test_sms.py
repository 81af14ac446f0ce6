import logging

import pytest

from otp_service.config import Settings
from otp_service.errors import DeliveryFailedError
from otp_service.services.sms import (
    LogSmsSender,
    TwilioSmsSender,
    build_message,
    build_sms_sender,
)


@pytest.mark.parametrize(
    "purpose, label",
    [
        ("verification", "verification code"),
        ("login", "login code"),
        ("reset", "password reset code"),
    ],
)
def test_build_message(purpose, label):
    assert build_message("482913", purpose, 5) == (
        f"Your {label} is: 482913. Valid for 5 minutes. Do not share this code."
    )


def test_log_sender_masks_code_and_phone(caplog):
    sender = LogSmsSender(sender_name="Acme")

    with caplog.at_level(logging.INFO, logger="otp_service.services.sms"):
        sender.send("+994501234567", build_message("482913", "login", 5))

    assert "482913" not in caplog.text
    assert "+994501234567" not in caplog.text
    assert "Acme" in caplog.text


def test_unconfigured_twilio_sender_fails():
    sender = TwilioSmsSender(account_sid="", auth_token="", from_number="")

    with pytest.raises(DeliveryFailedError):
        sender.send("+994501234567", "hello")


def test_build_sms_sender_selects_provider():
    twilio = build_sms_sender(
        Settings(
            sms_provider="twilio",
            twilio_account_sid="AC123",
            twilio_auth_token="secret",
            twilio_phone_number="+15550000000",
        )
    )
    assert isinstance(twilio, TwilioSmsSender)
    assert twilio.from_number == "+15550000000"

    assert isinstance(build_sms_sender(Settings(sms_provider="log")), LogSmsSender)


def test_build_sms_sender_falls_back_for_unknown_provider(caplog):
    with caplog.at_level(logging.WARNING, logger="otp_service.services.sms"):
        sender = build_sms_sender(Settings(sms_provider="carrier-pigeon"))

    assert isinstance(sender, LogSmsSender)
    assert "carrier-pigeon" in caplog.text
