from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from otp_service.database import ping_db
from otp_service.schemas.otp import HealthResponse

SERVICE_NAME = "SMS OTP Service"
SERVICE_VERSION = "1.0.0"

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health():
    database_ok = ping_db()
    response = HealthResponse(
        status="healthy" if database_ok else "unhealthy",
        timestamp=datetime.now(timezone.utc),
        services={
            "database": "healthy" if database_ok else "unhealthy",
            "sms": "healthy",
        },
        version=SERVICE_VERSION,
    )
    if not database_ok:
        return JSONResponse(status_code=503, content=response.model_dump(mode="json"))
    return response


@router.get("/ready")
def ready():
    if not ping_db():
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "error": "database unavailable"},
        )
    return {"status": "ready"}
