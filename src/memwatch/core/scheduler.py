# src/memwatch/core/scheduler.py
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List

from .config import parse_interval_seconds

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[None]]


class Scheduler:
    """
    Runs async jobs on a fixed interval inside the current event loop.

    Each job runs once right away. After that, runs start `interval_seconds`
    apart, measured from the start of the previous run, so a slow cycle does
    not push later ones back. A run that overruns the interval is followed
    immediately by the next one.
    """

    def __init__(self):
        self.tasks: List[asyncio.Task] = []
        self.run_counts: Dict[str, int] = {}

    async def _job_loop(self, job: Job, interval_seconds: float):
        name = getattr(job, "__name__", repr(job))
        loop = asyncio.get_running_loop()
        try:
            while True:
                started = loop.time()
                try:
                    await job()
                except Exception as e:
                    logger.error(f"Scheduled job '{name}' failed: {e}", exc_info=True)
                self.run_counts[name] = self.run_counts.get(name, 0) + 1

                elapsed = loop.time() - started
                if elapsed > interval_seconds:
                    logger.warning(f"Job '{name}' took {elapsed:.1f}s, longer than its {interval_seconds}s interval.")
                await asyncio.sleep(max(interval_seconds - elapsed, 0))
        except asyncio.CancelledError:
            logger.debug(f"Job '{name}' cancelled after {self.run_counts.get(name, 0)} run(s).")
            raise

    def add_job(self, job: Job, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError(f"Interval must be positive, got {interval_seconds}")

        self.tasks.append(asyncio.create_task(self._job_loop(job, interval_seconds)))
        logger.info(f"Scheduled '{getattr(job, '__name__', job)}' every {interval_seconds} second(s).")

    def add_job_from_string(self, job: Job, interval: str):
        """Like `add_job`, with an interval such as '30s', '5m' or '1h'. Raises ConfigError when unparsable."""
        self.add_job(job, parse_interval_seconds(interval))

    async def stop(self):
        """Cancels every job and waits for them to finish."""
        if not self.tasks:
            return
        logger.info(f"Stopping {len(self.tasks)} scheduled job(s)...")
        for task in self.tasks:
            task.cancel()
        await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks.clear()
