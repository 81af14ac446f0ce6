import asyncio

from otp_service.models.otp import OtpPurpose
from otp_service.services.sweeper import ExpiredOtpSweeper

PHONE = "+994501234567"


def test_run_once_deletes_expired(service, clock):
    service.generate(PHONE, OtpPurpose.verification)
    clock.advance(minutes=6)

    sweeper = ExpiredOtpSweeper(service, interval_seconds=60)

    assert asyncio.run(sweeper.run_once()) == 1
    assert asyncio.run(sweeper.run_once()) == 0


def test_background_loop_sweeps_and_stops(service, repository, clock, monkeypatch):
    service.generate(PHONE, OtpPurpose.login)
    clock.advance(minutes=6)
    results = []
    original = service.sweep_expired

    def recording_sweep(*args, **kwargs):
        results.append(original(*args, **kwargs))
        return results[-1]

    monkeypatch.setattr(service, "sweep_expired", recording_sweep)
    sweeper = ExpiredOtpSweeper(service, interval_seconds=0.05)

    async def scenario():
        await sweeper.start()
        for _ in range(100):
            await asyncio.sleep(0.01)
            if results:
                break
        await sweeper.stop()

    asyncio.run(scenario())

    assert sweeper.running is False
    assert results[0] == 1
    assert repository.count_recent(PHONE, 60, clock.now) == 0


def test_loop_survives_failed_sweep(service, monkeypatch):
    calls = []

    def flaky_sweep(*args, **kwargs):
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("database went away")
        return 0

    monkeypatch.setattr(service, "sweep_expired", flaky_sweep)
    sweeper = ExpiredOtpSweeper(service, interval_seconds=0.01)

    async def scenario():
        await sweeper.start()
        for _ in range(100):
            await asyncio.sleep(0.01)
            if len(calls) >= 2:
                break
        await sweeper.stop()

    asyncio.run(scenario())

    assert len(calls) >= 2


def test_start_twice_keeps_single_task(service):
    sweeper = ExpiredOtpSweeper(service, interval_seconds=3600)

    async def scenario():
        await sweeper.start()
        task = sweeper.task
        await sweeper.start()
        assert sweeper.task is task
        await sweeper.stop()

    asyncio.run(scenario())
    assert sweeper.task.cancelled()
