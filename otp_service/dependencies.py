from functools import lru_cache

from fastapi import Depends

from otp_service.config import settings
from otp_service.services.codes import CodeGenerator
from otp_service.services.otp import OtpService
from otp_service.services.phone import PhoneValidator
from otp_service.services.repository import OtpRepository
from otp_service.services.sms import SmsSender, build_sms_sender
from otp_service.services.usecases import OtpUseCase


@lru_cache()
def get_phone_validator() -> PhoneValidator:
    return PhoneValidator(
        country_code=settings.phone_country_code,
        mobile_prefixes=settings.phone_mobile_prefixes,
    )


@lru_cache()
def get_repository() -> OtpRepository:
    return OtpRepository(timeout=settings.db_statement_timeout_seconds)


@lru_cache()
def get_otp_service() -> OtpService:
    return OtpService(
        get_repository(),
        CodeGenerator(settings.otp_code_length),
        get_phone_validator(),
        validity_minutes=settings.otp_validity_minutes,
        rate_limit_minutes=settings.otp_rate_limit_minutes,
        max_per_period=settings.otp_max_per_period,
        max_attempts=settings.otp_max_attempts,
    )


@lru_cache()
def get_sms_sender() -> SmsSender:
    return build_sms_sender(settings)


def get_use_case(
    service: OtpService = Depends(get_otp_service),
    sms_sender: SmsSender = Depends(get_sms_sender),
) -> OtpUseCase:
    return OtpUseCase(service, sms_sender, debug=settings.otp_debug)
