import logging
from datetime import datetime, timedelta, timezone
from functools import wraps

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from otp_service.database import session_scope
from otp_service.errors import OtpNotFoundError, StoreUnavailableError
from otp_service.models.otp import OtpEntry, OtpPurpose

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _store_call(method):
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            LOGGER.error("OTP store call %s failed: %s", method.__name__, exc)
            raise StoreUnavailableError() from exc

    return wrapper


class OtpRepository:
    """System of record for OTP entries.

    Every method opens its own short transaction bounded by ``timeout``
    seconds (falls back to the repository default). Driver errors surface as
    ``StoreUnavailableError``; lookups that match nothing raise
    ``OtpNotFoundError``.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout

    def _scope(self, timeout: float | None):
        return session_scope(timeout=timeout if timeout is not None else self._timeout)

    @_store_call
    def create(self, entry: OtpEntry, *, timeout: float | None = None) -> OtpEntry:
        with self._scope(timeout) as session:
            session.add(entry)
            session.flush()
        return entry

    @_store_call
    def find_latest(
        self,
        phone_number: str,
        purpose: OtpPurpose,
        *,
        timeout: float | None = None,
    ) -> OtpEntry:
        with self._scope(timeout) as session:
            entry = session.execute(
                select(OtpEntry)
                .where(
                    OtpEntry.phone_number == phone_number,
                    OtpEntry.purpose == purpose,
                )
                .order_by(OtpEntry.created_at.desc())
                .limit(1)
            ).scalar_one_or_none()
        if entry is None:
            raise OtpNotFoundError()
        return entry

    @_store_call
    def find_by_id(self, otp_id: str, *, timeout: float | None = None) -> OtpEntry:
        with self._scope(timeout) as session:
            entry = session.get(OtpEntry, otp_id)
        if entry is None:
            raise OtpNotFoundError()
        return entry

    @_store_call
    def update(self, entry: OtpEntry, *, timeout: float | None = None) -> OtpEntry:
        updated_at = _utcnow()
        with self._scope(timeout) as session:
            result = session.execute(
                update(OtpEntry)
                .where(OtpEntry.id == entry.id)
                .values(
                    attempts=entry.attempts,
                    is_verified=entry.is_verified,
                    verified_at=entry.verified_at,
                    updated_at=updated_at,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise OtpNotFoundError()
        entry.updated_at = updated_at
        return entry

    @_store_call
    def delete(self, otp_id: str, *, timeout: float | None = None) -> None:
        with self._scope(timeout) as session:
            result = session.execute(delete(OtpEntry).where(OtpEntry.id == otp_id))
            if result.rowcount == 0:
                raise OtpNotFoundError()

    @_store_call
    def delete_expired(
        self, now: datetime | None = None, *, timeout: float | None = None
    ) -> int:
        now = now or _utcnow()
        with self._scope(timeout) as session:
            result = session.execute(delete(OtpEntry).where(OtpEntry.expires_at < now))
            return result.rowcount

    @_store_call
    def find_active_by_phone(
        self,
        phone_number: str,
        now: datetime | None = None,
        *,
        timeout: float | None = None,
    ) -> list[OtpEntry]:
        now = now or _utcnow()
        with self._scope(timeout) as session:
            result = session.execute(
                select(OtpEntry)
                .where(
                    OtpEntry.phone_number == phone_number,
                    OtpEntry.expires_at >= now,
                    OtpEntry.is_verified.is_(False),
                    OtpEntry.attempts < OtpEntry.max_attempts,
                )
                .order_by(OtpEntry.created_at.desc())
            )
            return list(result.scalars().all())

    @_store_call
    def invalidate_active(
        self,
        phone_number: str,
        purpose: OtpPurpose,
        now: datetime | None = None,
        *,
        timeout: float | None = None,
    ) -> int:
        now = now or _utcnow()
        with self._scope(timeout) as session:
            result = session.execute(
                update(OtpEntry)
                .where(
                    OtpEntry.phone_number == phone_number,
                    OtpEntry.purpose == purpose,
                    OtpEntry.expires_at >= now,
                    OtpEntry.is_verified.is_(False),
                    OtpEntry.attempts < OtpEntry.max_attempts,
                )
                .values(attempts=OtpEntry.max_attempts, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount

    @_store_call
    def count_recent(
        self,
        phone_number: str,
        minutes: int,
        now: datetime | None = None,
        *,
        timeout: float | None = None,
    ) -> int:
        now = now or _utcnow()
        cutoff = now - timedelta(minutes=minutes)
        with self._scope(timeout) as session:
            return session.execute(
                select(func.count())
                .select_from(OtpEntry)
                .where(
                    OtpEntry.phone_number == phone_number,
                    OtpEntry.created_at > cutoff,
                )
            ).scalar_one()
