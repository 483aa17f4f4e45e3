"""Cron-style scheduler for gas tracker query cycles.

Runs one cycle immediately, then fires at second 0 of every minute whose
minute-of-hour is divisible by the interval (cron `*/N * * * *`). Each tick
starts the cycle as a task so a slow cycle never delays the clock; a tick
that arrives while the previous cycle is still running is skipped.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

from gas_tracker.logging import get_logger

logger = get_logger(__name__)


def next_run_at(now: datetime, interval_minutes: int) -> datetime:
    """Return the next `*/interval_minutes` cron fire time strictly after now.

    Intervals of 60 or more only match minute 0, i.e. fire hourly, as cron
    does.
    """
    if interval_minutes < 1:
        raise ValueError("interval_minutes must be >= 1")

    candidate = now.replace(second=0, microsecond=0) + timedelta(minutes=1)
    while candidate.minute % interval_minutes != 0:
        candidate += timedelta(minutes=1)
    return candidate


class Scheduler:
    """Runs an async job now and then on a fixed minute schedule.

    Args:
        job: The query cycle to run.
        interval_minutes: Cron minute step (`*/N`).
        now: Returns the current local time (injectable for tests).
    """

    def __init__(
        self,
        job: Callable[[], Awaitable[object]],
        interval_minutes: int = 1,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        if interval_minutes < 1:
            raise ValueError("interval_minutes must be >= 1")
        self._job = job
        self._interval = interval_minutes
        self._now = now
        self._cycle_lock = asyncio.Lock()
        self._stop_event = asyncio.Event()
        self._tasks: set[asyncio.Task] = set()  # type: ignore[type-arg]
        self._skipped = 0

    @property
    def interval_minutes(self) -> int:
        return self._interval

    @property
    def skipped_ticks(self) -> int:
        return self._skipped

    @property
    def running(self) -> bool:
        return not self._stop_event.is_set()

    def trigger(self) -> asyncio.Task | None:  # type: ignore[type-arg]
        """Start a cycle now unless one is already in progress."""
        if self._cycle_lock.locked():
            self._skipped += 1
            logger.warning("cycle_skipped_previous_still_running")
            return None
        task = asyncio.create_task(self._guarded_cycle())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guarded_cycle(self) -> None:
        async with self._cycle_lock:
            try:
                await self._job()
            except asyncio.CancelledError:
                raise
            except Exception:
                # A cycle failure must never stop the schedule.
                logger.error("query_cycle_crashed", exc_info=True)

    async def run(self) -> None:
        """Run until stop() is called."""
        logger.info("scheduler_started", interval_minutes=self._interval)
        self.trigger()

        try:
            while not self._stop_event.is_set():
                fire_at = next_run_at(self._now(), self._interval)
                delay = max(0.0, (fire_at - self._now()).total_seconds())
                logger.debug("next_cycle_scheduled", at=fire_at.isoformat(), delay=delay)
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    self.trigger()
        finally:
            await self._cancel_inflight()
            logger.info("scheduler_stopped")

    def stop(self) -> None:
        """Ask run() to return; in-flight cycles are cancelled."""
        self._stop_event.set()

    async def _cancel_inflight(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
