import logging

from otp_service.errors import DeliveryFailedError, VerificationFailure
from otp_service.models.otp import OtpPurpose
from otp_service.schemas.otp import (
    ResendOtpResponse,
    SendOtpResponse,
    VerifyOtpResponse,
)
from otp_service.services.otp import OtpService
from otp_service.services.phone import mask_phone
from otp_service.services.sms import SmsSender, build_message

LOGGER = logging.getLogger(__name__)

DEFAULT_PURPOSE = OtpPurpose.verification


class OtpUseCase:
    """Turns send/verify/resend requests into lifecycle calls and user-facing replies.

    The phone number is expected to be validated and normalized already.
    Delivery happens only after the record is persisted; a delivery failure is
    reported to the caller even though the code now exists in the store.
    """

    def __init__(
        self,
        service: OtpService,
        sms_sender: SmsSender,
        *,
        debug: bool = False,
    ) -> None:
        self._service = service
        self._sms_sender = sms_sender
        self._debug = debug

    @property
    def expires_in_seconds(self) -> int:
        return self._service.validity_minutes * 60

    def send(self, phone_number: str, purpose: str | None = None) -> SendOtpResponse:
        purpose = OtpPurpose(purpose or DEFAULT_PURPOSE)
        LOGGER.info(
            "Generating OTP phone=%s purpose=%s", mask_phone(phone_number), purpose.value
        )
        entry = self._service.generate(phone_number, purpose)
        self._deliver(phone_number, entry.code, purpose)
        LOGGER.info("OTP sent otp_id=%s phone=%s", entry.id, mask_phone(phone_number))
        return SendOtpResponse(
            success=True,
            message="OTP sent successfully",
            expires_in_seconds=self.expires_in_seconds,
            id=entry.id,
            otp=entry.code if self._debug else None,
        )

    def verify(
        self, phone_number: str, code: str, purpose: str | None = None
    ) -> VerifyOtpResponse:
        purpose = OtpPurpose(purpose or DEFAULT_PURPOSE)
        LOGGER.info(
            "Verifying OTP phone=%s purpose=%s", mask_phone(phone_number), purpose.value
        )
        try:
            entry = self._service.verify(phone_number, code, purpose)
        except VerificationFailure as exc:
            LOGGER.warning(
                "OTP verification failed phone=%s reason=%s",
                mask_phone(phone_number),
                exc.code,
            )
            return VerifyOtpResponse(success=False, message=exc.message)

        LOGGER.info(
            "OTP verified phone=%s purpose=%s", mask_phone(phone_number), purpose.value
        )
        return VerifyOtpResponse(
            success=True,
            message="OTP verified successfully",
            verified_at=entry.verified_at,
        )

    def resend(self, phone_number: str, purpose: str | None = None) -> ResendOtpResponse:
        purpose = OtpPurpose(purpose or DEFAULT_PURPOSE)
        LOGGER.info(
            "Resending OTP phone=%s purpose=%s", mask_phone(phone_number), purpose.value
        )
        entry = self._service.resend(phone_number, purpose)
        self._deliver(phone_number, entry.code, purpose)
        LOGGER.info("OTP resent otp_id=%s phone=%s", entry.id, mask_phone(phone_number))
        return ResendOtpResponse(
            success=True,
            message="OTP resent successfully",
            expires_in_seconds=self.expires_in_seconds,
            otp=entry.code if self._debug else None,
        )

    def _deliver(self, phone_number: str, code: str, purpose: OtpPurpose) -> None:
        message = build_message(code, purpose, self._service.validity_minutes)
        try:
            self._sms_sender.send(phone_number, message)
        except DeliveryFailedError:
            LOGGER.error("Failed to send SMS phone=%s", mask_phone(phone_number))
            raise
