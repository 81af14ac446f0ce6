from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from otp_service.config import settings


class TokenError(ValueError):
    pass


@dataclass(frozen=True)
class AdminTokenData:
    subject: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_admin_token(subject: str, expires_minutes: int = 60) -> str:
    if not settings.admin_jwt_secret:
        raise TokenError("Admin JWT secret is not configured")
    now = _utcnow()
    expires_at = now + timedelta(minutes=expires_minutes)
    payload = {
        "sub": subject,
        "type": "admin",
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(
        payload, settings.admin_jwt_secret, algorithm=settings.admin_jwt_algorithm
    )


def decode_admin_token(token: str) -> AdminTokenData:
    if not token:
        raise TokenError("Token is missing")
    if not settings.admin_jwt_secret:
        raise TokenError("Admin JWT secret is not configured")
    try:
        payload = jwt.decode(
            token,
            settings.admin_jwt_secret,
            algorithms=[settings.admin_jwt_algorithm],
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError("Invalid token") from exc
    if payload.get("type") != "admin":
        raise TokenError("Invalid token type")
    subject = payload.get("sub")
    if not subject:
        raise TokenError("Token subject is missing")
    return AdminTokenData(subject=str(subject))
