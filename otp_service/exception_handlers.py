"""
Exception handlers mapping service errors onto the JSON error envelope.

Register these on a FastAPI app instance via `register_exception_handlers(app)`.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from otp_service.errors import (
    InvalidOtpCodeError,
    InvalidPhoneNumberError,
    OtpError,
    OtpNotFoundError,
    RateLimitExceededError,
    VerificationFailure,
)

LOGGER = logging.getLogger(__name__)


def error_body(error: str, code: str) -> dict:
    return {"success": False, "error": error, "code": code}


def _status_for(exc: OtpError) -> int:
    if isinstance(exc, RateLimitExceededError):
        return status.HTTP_429_TOO_MANY_REQUESTS
    if isinstance(exc, OtpNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (InvalidPhoneNumberError, InvalidOtpCodeError, VerificationFailure)):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def otp_error_handler(request: Request, exc: OtpError) -> JSONResponse:
    status_code = _status_for(exc)
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        LOGGER.error(
            "Request to %s failed code=%s: %s", request.url.path, exc.code, exc
        )
        return JSONResponse(
            status_code=status_code,
            content=error_body("Internal server error", "INTERNAL_ERROR"),
        )
    headers = None
    if isinstance(exc, RateLimitExceededError) and exc.retry_after:
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.message, exc.code),
        headers=headers,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = {tuple(error.get("loc", ()))[-1:] for error in exc.errors()}
    if fields == {("code",)}:
        content = error_body("OTP code is required", "INVALID_CODE")
    else:
        content = error_body("Invalid request format", "INVALID_REQUEST")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        content = error_body("Route not found", "ROUTE_NOT_FOUND")
    else:
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        content = error_body(detail, "REQUEST_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", "INTERNAL_ERROR"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OtpError, otp_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
