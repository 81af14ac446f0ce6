import json
import logging
import sys
from datetime import datetime, timezone

_RESERVED_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _resolve_level(level) -> int | None:
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else None


def configure_logging(level: str = "INFO", fmt: str = "text") -> logging.Logger:
    logger = logging.getLogger("otp_service")
    resolved = _resolve_level(level)
    logger.setLevel(resolved if resolved is not None else logging.INFO)

    # Prevent duplicate logs on reload
    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    logger.addHandler(handler)
    logger.propagate = False
    if resolved is None:
        logger.warning("Unknown log level %r, using INFO", level)
    return logger
