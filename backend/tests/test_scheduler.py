"""
Unit tests for the periodic cache flush.
"""

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from services.scheduler import CacheFlusher, seconds_until_next_flush


@pytest.mark.parametrize(
    "now, interval, expected",
    [
        (datetime(2025, 3, 1, 0, 0, 0), 4, 4 * 3600),
        (datetime(2025, 3, 1, 3, 30, 0), 4, 1800),
        (datetime(2025, 3, 1, 4, 0, 0), 4, 4 * 3600),
        (datetime(2025, 3, 1, 23, 59, 30), 4, 30),
        (datetime(2025, 3, 1, 21, 0, 0), 5, 3 * 3600),
        (datetime(2025, 3, 1, 12, 15, 0), 1, 45 * 60),
    ],
)
def test_seconds_until_next_flush(now, interval, expected):
    assert seconds_until_next_flush(now, interval) == expected


def test_seconds_until_next_flush_rejects_bad_interval():
    with pytest.raises(ValueError):
        seconds_until_next_flush(datetime(2025, 3, 1), 0)


@pytest.mark.asyncio
async def test_run_flushes_once_per_boundary(cache):
    sleep = AsyncMock(side_effect=[None, asyncio.CancelledError()])
    flusher = CacheFlusher(cache, interval_hours=4, sleep=sleep, clock=lambda: datetime(2025, 3, 1, 3, 0))
    cache.set("a", 1, ttl_seconds=3600)
    cache.set("b", 2, ttl_seconds=3600)

    with pytest.raises(asyncio.CancelledError):
        await flusher.run()

    assert len(cache) == 0
    assert sleep.await_args_list[0].args[0] == 3600


@pytest.mark.asyncio
async def test_start_and_stop(cache):
    flusher = CacheFlusher(cache, interval_hours=4)

    flusher.start()
    assert flusher.running
    await flusher.stop()

    assert not flusher.running
    await flusher.stop()


def test_flush_returns_dropped_count(cache):
    cache.set("a", 1)
    assert CacheFlusher(cache).flush() == 1


@pytest.mark.parametrize("interval", [0, -4])
def test_rejects_non_positive_interval(cache, interval):
    with pytest.raises(ValueError):
        CacheFlusher(cache, interval_hours=interval)


@pytest.mark.asyncio
async def test_early_wake_does_not_flush_twice(cache):
    sleep = AsyncMock(side_effect=[None, None, asyncio.CancelledError()])
    clock = MagicMock(
        side_effect=[
            datetime(2025, 3, 1, 3, 0, 0),
            # asyncio sleeps on the monotonic clock and may wake just short of the boundary
            datetime(2025, 3, 1, 3, 59, 59, 500000),
            datetime(2025, 3, 1, 8, 0, 0),
        ]
    )
    flusher = CacheFlusher(cache, interval_hours=4, sleep=sleep, clock=clock)
    flusher.flush = MagicMock(return_value=0)

    with pytest.raises(asyncio.CancelledError):
        await flusher.run()

    assert [c.args[0] for c in sleep.await_args_list] == [3600, 4 * 3600 + 0.5, 4 * 3600]
    assert flusher.flush.call_count == 2


@pytest.mark.asyncio
async def test_wall_clock_jump_resyncs_to_next_boundary(cache):
    sleep = AsyncMock(side_effect=[None, asyncio.CancelledError()])
    clock = MagicMock(side_effect=[datetime(2025, 3, 1, 3, 0, 0), datetime(2025, 3, 1, 10, 30, 0)])
    flusher = CacheFlusher(cache, interval_hours=4, sleep=sleep, clock=clock)

    with pytest.raises(asyncio.CancelledError):
        await flusher.run()

    assert sleep.await_args_list[1].args[0] == 90 * 60


@pytest.mark.asyncio
async def test_crashed_flusher_is_logged_and_not_running(cache, caplog):
    flusher = CacheFlusher(cache, interval_hours=4, sleep=AsyncMock(side_effect=RuntimeError("boom")))

    flusher.start()
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert not flusher.running
    assert "Cache flusher stopped: boom" in caplog.text
    with pytest.raises(RuntimeError):
        await flusher.stop()
    assert not flusher.running
