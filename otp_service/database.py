from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from otp_service.config import settings


def _build_database_url() -> str:
    raw_url = settings.database_url
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return raw_url


def _build_engine(url: str):
    if url.startswith("sqlite"):
        # A single shared connection keeps in-memory databases alive across sessions.
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url or "sqlite://", pool_pre_ping=True)


DATABASE_URL = _build_database_url()
engine = _build_engine(DATABASE_URL)
SessionLocal = sessionmaker(
    bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
)
Base = declarative_base()


def init_db() -> None:
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not configured")
    from otp_service.models import otp as _otp  # noqa: F401

    Base.metadata.create_all(bind=engine)


def ping_db() -> bool:
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception:
        return False
    return True


def _apply_statement_timeout(session, timeout: float) -> None:
    if session.get_bind().dialect.name != "postgresql":
        return
    milliseconds = max(1, int(timeout * 1000))
    session.execute(text(f"SET LOCAL statement_timeout = {milliseconds}"))


@contextmanager
def session_scope(timeout: float | None = None):
    session = SessionLocal()
    try:
        if timeout:
            _apply_statement_timeout(session, timeout)
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
