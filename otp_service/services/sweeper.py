import asyncio
import logging
from typing import Optional

from otp_service.services.otp import OtpService

LOGGER = logging.getLogger(__name__)


class ExpiredOtpSweeper:
    """Periodically deletes OTP records whose expiry has passed."""

    def __init__(self, service: OtpService, interval_seconds: float = 3600) -> None:
        self.service = service
        self.interval_seconds = interval_seconds
        self.running = False
        self.task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        if self.running:
            LOGGER.warning("Expired OTP sweeper is already running")
            return
        self.running = True
        self.task = asyncio.create_task(self._run())
        LOGGER.info("Expired OTP sweeper started interval=%ss", self.interval_seconds)

    async def stop(self) -> None:
        if not self.running:
            return
        self.running = False
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
        LOGGER.info("Expired OTP sweeper stopped")

    async def run_once(self) -> int:
        deleted = await asyncio.to_thread(self.service.sweep_expired)
        LOGGER.debug("Expired OTPs cleaned up deleted=%s", deleted)
        return deleted

    async def _run(self) -> None:
        while self.running:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                LOGGER.exception("Failed to clean up expired OTPs")
