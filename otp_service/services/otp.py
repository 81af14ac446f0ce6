import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable

from otp_service.errors import (
    MaxAttemptsReachedError,
    InvalidOtpCodeError,
    OtpAlreadyUsedError,
    OtpExpiredError,
    OtpNotFoundError,
    RateLimitExceededError,
    VerificationFailure,
)
from otp_service.models.otp import OtpEntry, OtpPurpose
from otp_service.services.codes import CodeGenerator
from otp_service.services.phone import PhoneValidator, mask_phone
from otp_service.services.repository import OtpRepository

LOGGER = logging.getLogger(__name__)

RESEND_COOLDOWN_MINUTES = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OtpService:
    """Lifecycle of one-time passcodes bound to a (phone, purpose) pair.

    A record starts active and ends verified, expired or exhausted. Issuing a
    new code for a pair exhausts every still-active record of that pair, so at
    most one code is usable at a time. All state lives in the repository;
    concurrent calls for the same pair are not serialized.
    """

    def __init__(
        self,
        repository: OtpRepository,
        generator: CodeGenerator,
        validator: PhoneValidator,
        *,
        validity_minutes: int = 5,
        rate_limit_minutes: int = 10,
        max_per_period: int = 3,
        max_attempts: int = 3,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repository = repository
        self._generator = generator
        self._validator = validator
        self._validity_minutes = validity_minutes
        self._rate_limit_minutes = rate_limit_minutes
        self._max_per_period = max_per_period
        self._max_attempts = max_attempts
        self._clock = clock

    @property
    def validity_minutes(self) -> int:
        return self._validity_minutes

    def generate(
        self,
        phone_number: str,
        purpose: OtpPurpose | str,
        *,
        timeout: float | None = None,
    ) -> OtpEntry:
        self._validator.validate(phone_number)
        purpose = OtpPurpose(purpose)
        now = self._clock()

        recent = self._repository.count_recent(
            phone_number, self._rate_limit_minutes, now, timeout=timeout
        )
        if recent >= self._max_per_period:
            LOGGER.warning(
                "OTP rate limit hit phone=%s recent=%s window_minutes=%s",
                mask_phone(phone_number),
                recent,
                self._rate_limit_minutes,
            )
            raise RateLimitExceededError(retry_after=self._rate_limit_minutes * 60)

        invalidated = self._repository.invalidate_active(
            phone_number, purpose, now, timeout=timeout
        )
        if invalidated:
            LOGGER.info(
                "Invalidated %s active OTP(s) phone=%s purpose=%s",
                invalidated,
                mask_phone(phone_number),
                purpose.value,
            )

        entry = OtpEntry(
            phone_number=phone_number,
            code=self._generator.generate(),
            purpose=purpose,
            is_verified=False,
            attempts=0,
            max_attempts=self._max_attempts,
            expires_at=now + timedelta(minutes=self._validity_minutes),
            created_at=now,
            updated_at=now,
            verified_at=None,
        )
        return self._repository.create(entry, timeout=timeout)

    def verify(
        self,
        phone_number: str,
        code: str,
        purpose: OtpPurpose | str,
        *,
        timeout: float | None = None,
    ) -> OtpEntry:
        purpose = OtpPurpose(purpose)
        entry = self._repository.find_latest(phone_number, purpose, timeout=timeout)
        now = self._clock()
        try:
            self._check_and_consume(entry, code, now)
        except VerificationFailure:
            self._repository.update(entry, timeout=timeout)
            raise
        return self._repository.update(entry, timeout=timeout)

    def resend(
        self,
        phone_number: str,
        purpose: OtpPurpose | str,
        *,
        timeout: float | None = None,
    ) -> OtpEntry:
        purpose = OtpPurpose(purpose)
        try:
            existing = self._repository.find_latest(
                phone_number, purpose, timeout=timeout
            )
        except OtpNotFoundError:
            existing = None

        now = self._clock()
        if existing is not None and not existing.is_expired(now):
            recent = self._repository.count_recent(
                phone_number, RESEND_COOLDOWN_MINUTES, now, timeout=timeout
            )
            if recent > 0:
                raise RateLimitExceededError(
                    "Please wait before requesting another OTP.",
                    retry_after=RESEND_COOLDOWN_MINUTES * 60,
                )
        return self.generate(phone_number, purpose, timeout=timeout)

    def sweep_expired(self, *, timeout: float | None = None) -> int:
        return self._repository.delete_expired(self._clock(), timeout=timeout)

    def _check_and_consume(self, entry: OtpEntry, code: str, now: datetime) -> None:
        # Exhausted or expired codes never burn an extra attempt.
        if entry.is_verified:
            raise OtpAlreadyUsedError()
        if entry.is_expired(now):
            raise OtpExpiredError()
        if not entry.can_attempt():
            raise MaxAttemptsReachedError()

        entry.attempts += 1
        if not secrets.compare_digest(entry.code.encode(), (code or "").encode()):
            raise InvalidOtpCodeError()

        entry.is_verified = True
        entry.verified_at = now
