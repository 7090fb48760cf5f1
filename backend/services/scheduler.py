"""Periodic full cache flush, aligned to wall-clock boundaries.

With the default 4-hour interval the flush fires at 00:00, 04:00, 08:00 ...
local time, the same instants as the cron expression ``0 */4 * * *``.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable

from services.cache import TTLCache

logger = logging.getLogger(__name__)


def seconds_until_next_flush(now: datetime, interval_hours: int) -> float:
    """Seconds from ``now`` to the next hour that is a multiple of ``interval_hours``."""
    if interval_hours <= 0:
        raise ValueError(f"interval_hours must be positive, got {interval_hours}")
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elapsed = (now - midnight).total_seconds()
    period = interval_hours * 3600
    # Boundaries restart at midnight, so a non-divisor of 24 gets a short last slot.
    next_boundary = min((elapsed // period + 1) * period, 24 * 3600)
    return next_boundary - elapsed


class CacheFlusher:
    def __init__(
        self,
        cache: TTLCache,
        interval_hours: int = 4,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if interval_hours <= 0:
            raise ValueError(f"interval_hours must be positive, got {interval_hours}")
        self.cache = cache
        self.interval_hours = interval_hours
        self._sleep = sleep
        self._clock = clock
        self._task: asyncio.Task | None = None

    def flush(self) -> int:
        dropped = self.cache.flush_all()
        logger.info("Flushed cache (%d entries)", dropped)
        return dropped

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _next_boundary(self, after: datetime) -> datetime:
        return after + timedelta(seconds=seconds_until_next_flush(after, self.interval_hours))

    async def run(self) -> None:
        now = self._clock()
        boundary = self._next_boundary(now)
        while True:
            await self._sleep(max((boundary - now).total_seconds(), 0.0))
            self.flush()
            now = self._clock()
            # Step from the boundary just served so an early wake-up cannot flush twice.
            boundary = self._next_boundary(boundary)
            if boundary <= now:
                # Wall clock jumped past the next slot; resync instead of catching up.
                boundary = self._next_boundary(now)

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self.run())
            self._task.add_done_callback(_log_crash)
            logger.info("Cache flush scheduled every %d hours", self.interval_hours)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None


def _log_crash(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error("Cache flusher stopped: %s", task.exception(), exc_info=task.exception())
