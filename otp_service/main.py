import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from otp_service.config import settings
from otp_service.database import init_db
from otp_service.dependencies import get_otp_service
from otp_service.exception_handlers import register_exception_handlers
from otp_service.logging_config import configure_logging
from otp_service.routers import admin, health, otp
from otp_service.routers.health import SERVICE_NAME, SERVICE_VERSION
from otp_service.services.sweeper import ExpiredOtpSweeper

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level, settings.log_format)
    LOGGER.info("Starting %s...", SERVICE_NAME)
    init_db()
    sweeper = ExpiredOtpSweeper(
        get_otp_service(), interval_seconds=settings.otp_cleanup_interval_seconds
    )
    await sweeper.start()
    try:
        yield
    finally:
        await sweeper.stop()
        LOGGER.info("%s stopped", SERVICE_NAME)


app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
)

register_exception_handlers(app)

app.include_router(health.router)
app.include_router(otp.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")


@app.get("/")
def root():
    return {"service": SERVICE_NAME, "version": SERVICE_VERSION, "status": "running"}


def run() -> None:
    uvicorn.run(
        "otp_service.main:app",
        host=settings.server_host,
        port=settings.server_port,
    )


if __name__ == "__main__":
    run()
