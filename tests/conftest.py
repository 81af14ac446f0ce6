"""
Pytest configuration and fixtures for the OTP service tests.

The environment is pinned before any ``otp_service`` module is imported so
that settings and the engine pick up an isolated in-memory SQLite database.
"""
import os
from datetime import datetime, timedelta, timezone

import pytest

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_JWT_SECRET"] = "test-admin-secret"
os.environ["SMS_PROVIDER"] = "log"
os.environ["OTP_DEBUG"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from otp_service.database import Base, engine  # noqa: E402
from otp_service.dependencies import get_otp_service, get_repository, get_sms_sender  # noqa: E402
from otp_service.errors import DeliveryFailedError  # noqa: E402
from otp_service.main import app  # noqa: E402
from otp_service.models import otp as _otp_models  # noqa: E402,F401
from otp_service.services.codes import CodeGenerator  # noqa: E402
from otp_service.services.otp import OtpService  # noqa: E402
from otp_service.services.phone import PhoneValidator  # noqa: E402
from otp_service.services.repository import OtpRepository  # noqa: E402


class FakeClock:
    """Controllable clock; every reading moves time forward by ``tick``."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
        self.tick = timedelta(milliseconds=1)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.tick
        return current

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingSmsSender:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    def send(self, phone_number: str, message: str) -> None:
        if self.fail:
            raise DeliveryFailedError("Gateway unavailable")
        self.sent.append((phone_number, message))


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> OtpRepository:
    return OtpRepository()


@pytest.fixture
def service(repository, clock) -> OtpService:
    return OtpService(
        repository,
        CodeGenerator(6),
        PhoneValidator(),
        validity_minutes=5,
        rate_limit_minutes=10,
        max_per_period=3,
        max_attempts=3,
        clock=clock,
    )


@pytest.fixture
def sms_sender() -> RecordingSmsSender:
    return RecordingSmsSender()


@pytest.fixture
def client(service, repository, sms_sender):
    app.dependency_overrides[get_otp_service] = lambda: service
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_sms_sender] = lambda: sms_sender
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
