import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv(override=True)


def _env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw_value = os.getenv(name, default)
    return tuple(part.strip() for part in raw_value.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    server_host: str = os.getenv("SERVER_HOST", "0.0.0.0")
    server_port: int = int(os.getenv("SERVER_PORT", "8080"))
    database_url: str = os.getenv("DATABASE_URL", "")
    db_statement_timeout_seconds: float = float(
        os.getenv("DB_STATEMENT_TIMEOUT_SECONDS", "5")
    )
    otp_code_length: int = int(os.getenv("OTP_CODE_LENGTH", "6"))
    otp_validity_minutes: int = int(os.getenv("OTP_VALIDITY_MINUTES", "5"))
    otp_rate_limit_minutes: int = int(os.getenv("OTP_RATE_LIMIT_MINUTES", "10"))
    otp_max_per_period: int = int(os.getenv("OTP_MAX_PER_PERIOD", "3"))
    otp_max_attempts: int = int(os.getenv("OTP_MAX_ATTEMPTS", "3"))
    otp_cleanup_interval_seconds: int = int(
        os.getenv("OTP_CLEANUP_INTERVAL_SECONDS", "3600")
    )
    otp_debug: bool = _env_bool("OTP_DEBUG", False)
    phone_country_code: str = os.getenv("PHONE_COUNTRY_CODE", "994").lstrip("+")
    phone_mobile_prefixes: tuple[str, ...] = field(
        default_factory=lambda: _env_list(
            "PHONE_MOBILE_PREFIXES", "50,51,55,70,77,99"
        )
    )
    sms_provider: str = os.getenv("SMS_PROVIDER", "log").strip().lower()
    sms_sender_name: str = os.getenv("SMS_SENDER_NAME", "OTPService")
    twilio_account_sid: str = os.getenv("TWILIO_ACCOUNT_SID", "")
    twilio_auth_token: str = os.getenv("TWILIO_AUTH_TOKEN", "")
    twilio_phone_number: str = os.getenv(
        "TWILIO_PHONE_NUMBER", os.getenv("PHONE_NUMBER", "")
    )
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_format: str = os.getenv("LOG_FORMAT", "text").strip().lower()
    admin_jwt_secret: str = os.getenv("ADMIN_JWT_SECRET", "")
    admin_jwt_algorithm: str = os.getenv("ADMIN_JWT_ALGORITHM", "HS256")
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _env_list("CORS_ORIGINS", "*")
    )

    @property
    def otp_validity_seconds(self) -> int:
        return self.otp_validity_minutes * 60


settings = Settings()
