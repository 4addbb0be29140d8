# tests/core/test_scheduler.py

import asyncio

import pytest

from memwatch.core.exceptions import ConfigError
from memwatch.core.scheduler import Scheduler


@pytest.fixture
def fast_sleep(monkeypatch):
    """Makes the scheduler's sleeps yield once instead of waiting."""
    real_sleep = asyncio.sleep
    delays = []

    async def _sleep(seconds):
        delays.append(seconds)
        await real_sleep(0)

    monkeypatch.setattr("memwatch.core.scheduler.asyncio.sleep", _sleep)
    return real_sleep, delays


async def test_first_run_is_immediate():
    scheduler = Scheduler()
    runs = []

    async def memory_check():
        runs.append("run")

    scheduler.add_job(memory_check, interval_seconds=3600)
    await asyncio.sleep(0)

    assert runs == ["run"]
    assert scheduler.run_counts == {"memory_check": 1}
    task = scheduler.tasks[0]
    assert not task.done()

    await scheduler.stop()
    assert task.done()
    assert scheduler.tasks == []


async def test_interval_string_is_parsed():
    scheduler = Scheduler()

    async def memory_check():
        pass

    scheduler.add_job_from_string(memory_check, "5m")

    assert len(scheduler.tasks) == 1
    await scheduler.stop()


async def test_invalid_intervals_are_rejected():
    scheduler = Scheduler()

    async def memory_check():
        pass

    with pytest.raises(ValueError):
        scheduler.add_job(memory_check, interval_seconds=0)
    with pytest.raises(ConfigError):
        scheduler.add_job_from_string(memory_check, "every minute")
    assert scheduler.tasks == []


async def test_failing_run_does_not_stop_the_job(fast_sleep):
    real_sleep, _ = fast_sleep
    scheduler = Scheduler()
    calls = []

    async def flaky_check():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")

    scheduler.add_job(flaky_check, interval_seconds=1)
    try:
        for _ in range(10):
            await real_sleep(0)
    finally:
        await scheduler.stop()

    assert len(calls) >= 2
    assert scheduler.run_counts["flaky_check"] == len(calls)


async def test_sleep_never_exceeds_interval(fast_sleep):
    real_sleep, delays = fast_sleep
    scheduler = Scheduler()

    async def memory_check():
        pass

    scheduler.add_job(memory_check, interval_seconds=30)
    try:
        for _ in range(3):
            await real_sleep(0)
    finally:
        await scheduler.stop()

    assert delays
    assert all(0 <= d <= 30 for d in delays)


async def test_stop_without_jobs_is_a_no_op():
    scheduler = Scheduler()
    await scheduler.stop()
    assert scheduler.tasks == []
