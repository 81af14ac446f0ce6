class OtpError(Exception):
    """Base class for every failure raised by the OTP service."""

    code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidPhoneNumberError(OtpError):
    code = "INVALID_PHONE"
    default_message = "Invalid phone number format"


class RateLimitExceededError(OtpError):
    code = "RATE_LIMIT"
    default_message = "Rate limit exceeded. Please wait before requesting a new OTP."

    def __init__(self, message: str | None = None, retry_after: int | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class DeliveryFailedError(OtpError):
    code = "DELIVERY_FAILED"
    default_message = "Failed to deliver OTP"


class StoreUnavailableError(OtpError):
    code = "INTERNAL_ERROR"
    default_message = "OTP store is unavailable"


class VerificationFailure(OtpError):
    """An expected verification outcome, reported to the caller as success=false."""

    code = "VERIFICATION_FAILED"
    default_message = "Verification failed. Please try again."


class InvalidOtpCodeError(VerificationFailure):
    code = "INVALID_CODE"
    default_message = "Invalid OTP code. Please try again."


class OtpExpiredError(VerificationFailure):
    code = "OTP_EXPIRED"
    default_message = "OTP has expired. Please request a new one."


class OtpAlreadyUsedError(VerificationFailure):
    code = "OTP_ALREADY_USED"
    default_message = "OTP has already been used. Please request a new one."


class MaxAttemptsReachedError(VerificationFailure):
    code = "MAX_ATTEMPTS"
    default_message = "Maximum verification attempts reached. Please request a new OTP."


class OtpNotFoundError(VerificationFailure):
    code = "NOT_FOUND"
    default_message = "OTP not found. Please request a new one."
