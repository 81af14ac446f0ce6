import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Enum, Index, Integer, String
from sqlalchemy.types import TypeDecorator

from otp_service.database import Base


class OtpPurpose(str, enum.Enum):
    verification = "verification"
    login = "login"
    reset = "reset"


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes, including on backends that drop tzinfo."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def _new_id() -> str:
    return str(uuid.uuid4())


class OtpEntry(Base):
    __tablename__ = "otps"

    id = Column(String(36), primary_key=True, default=_new_id)
    phone_number = Column(String(20), nullable=False)
    code = Column(String(10), nullable=False)
    purpose = Column(
        Enum(
            OtpPurpose,
            native_enum=False,
            length=50,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
        default=OtpPurpose.verification,
    )
    is_verified = Column(Boolean, nullable=False, default=False)
    attempts = Column(Integer, nullable=False, default=0)
    max_attempts = Column(Integer, nullable=False, default=3)
    expires_at = Column(UTCDateTime, nullable=False)
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)
    verified_at = Column(UTCDateTime, nullable=True)

    __table_args__ = (
        Index("idx_otps_phone_purpose", "phone_number", "purpose"),
        Index("idx_otps_phone_expires", "phone_number", "expires_at"),
        Index("idx_otps_created_at", "created_at"),
        Index("idx_otps_verified", "is_verified", "expires_at"),
    )

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def can_attempt(self) -> bool:
        return self.attempts < self.max_attempts

    def is_valid(self, now: datetime) -> bool:
        return not self.is_expired(now) and not self.is_verified and self.can_attempt()

    def to_dict(self, not_included_columns=None):
        if not_included_columns is None:
            not_included_columns = []

        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
            if column.name not in not_included_columns
        }
