from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from otp_service.config import settings
from otp_service.dependencies import get_phone_validator, get_use_case
from otp_service.errors import InvalidOtpCodeError
from otp_service.schemas.otp import (
    ErrorResponse,
    ResendOtpRequest,
    ResendOtpResponse,
    SendOtpRequest,
    SendOtpResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from otp_service.services.phone import PhoneValidator
from otp_service.services.usecases import OtpUseCase

router = APIRouter(prefix="/otp", tags=["otp"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _normalized_phone(validator: PhoneValidator, phone_number: str) -> str:
    validator.validate(phone_number)
    return validator.normalize(phone_number)


@router.post(
    "/send",
    response_model=SendOtpResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
def send_otp(
    payload: SendOtpRequest,
    use_case: OtpUseCase = Depends(get_use_case),
    validator: PhoneValidator = Depends(get_phone_validator),
) -> SendOtpResponse:
    phone_number = _normalized_phone(validator, payload.phone_number)
    return use_case.send(phone_number, payload.purpose)


@router.post(
    "/verify",
    response_model=VerifyOtpResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
def verify_otp(
    payload: VerifyOtpRequest,
    use_case: OtpUseCase = Depends(get_use_case),
    validator: PhoneValidator = Depends(get_phone_validator),
):
    phone_number = _normalized_phone(validator, payload.phone_number)
    code = payload.code.strip()
    if len(code) != settings.otp_code_length or not (code.isascii() and code.isdigit()):
        raise InvalidOtpCodeError(
            f"OTP code must be {settings.otp_code_length} digits"
        )
    response = use_case.verify(phone_number, code, payload.purpose)
    if not response.success:
        return JSONResponse(
            status_code=400, content=response.model_dump(exclude_none=True)
        )
    return response


@router.post(
    "/resend",
    response_model=ResendOtpResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
def resend_otp(
    payload: ResendOtpRequest,
    use_case: OtpUseCase = Depends(get_use_case),
    validator: PhoneValidator = Depends(get_phone_validator),
) -> ResendOtpResponse:
    phone_number = _normalized_phone(validator, payload.phone_number)
    return use_case.resend(phone_number, payload.purpose)
