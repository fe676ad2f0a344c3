from __future__ import annotations

import asyncio

import pytest

from activator.common.scheduler import AdaptiveLoop


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        AdaptiveLoop(0, lambda: None)


def test_callback_selects_next_interval() -> None:
    intervals = [0.01, 0.02, None]

    async def scenario() -> AdaptiveLoop:
        calls = 0

        async def callback():
            nonlocal calls
            calls += 1
            return intervals[min(calls, len(intervals)) - 1]

        loop = AdaptiveLoop(0.01, callback, name="test")
        await loop.start()
        while loop.execution_count < 3:
            await asyncio.sleep(0.005)
        loop.stop()
        return loop

    loop = asyncio.run(scenario())

    # None keeps the last chosen interval
    assert loop.interval == pytest.approx(0.02)
    assert loop.running is False


def test_callback_errors_are_counted_not_fatal() -> None:
    async def scenario() -> AdaptiveLoop:
        async def callback():
            raise RuntimeError("boom")

        loop = AdaptiveLoop(0.01, callback, name="failing")
        await loop.start()
        while loop.error_count < 2:
            await asyncio.sleep(0.005)
        loop.stop()
        return loop

    loop = asyncio.run(scenario())

    stats = loop.get_stats()
    assert stats["error_count"] >= 2
    assert stats["execution_count"] == 0
    assert stats["interval_s"] == pytest.approx(0.01)


def test_start_twice_keeps_one_task() -> None:
    async def scenario() -> int:
        count = 0

        async def callback():
            nonlocal count
            count += 1
            return None

        loop = AdaptiveLoop(0.01, callback)
        await loop.start()
        await loop.start()
        await asyncio.sleep(0.055)
        loop.stop()
        return count

    count = asyncio.run(scenario())
    assert 1 <= count <= 6
