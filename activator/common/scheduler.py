"""
Adaptive Interval Scheduler

Provides AdaptiveLoop, a timer whose period is chosen by its own callback.
Each run returns the delay until the next run, so the firing cadence can
follow the control error instead of a fixed poll rate.

Usage:
    async def my_callback() -> float | None:
        # Do work...
        return 0.25  # next run in 250ms (None keeps the current period)

    loop = AdaptiveLoop(1.0, my_callback, name="control")
    await loop.start()

    # Later:
    loop.stop()
    print(loop.get_stats())
"""

import asyncio
import time
from typing import Awaitable, Callable

from .logging_setup import get_service_logger

logger = get_service_logger("scheduler")


class AdaptiveLoop:
    """
    Timer loop with a callback-selected period.

    The next run is scheduled relative to when the previous run was due,
    not when its callback finished, so slow callbacks do not stretch the
    cadence. A run that falls behind by more than one period is realigned
    to "now" instead of firing a burst of catch-up runs.

    Attributes:
        interval: Current delay between runs in seconds
        callback: Async function returning the next delay (or None)
    """

    def __init__(
        self,
        interval_seconds: float,
        callback: Callable[[], Awaitable[float | None]],
        name: str = "unnamed",
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.interval = interval_seconds
        self.callback = callback
        self.name = name

        self._next_run: float = 0
        self._running = False
        self._task: asyncio.Task | None = None

        # Observability metrics
        self._execution_count: int = 0
        self._error_count: int = 0
        self._realigned_count: int = 0
        self._last_execution_time: float = 0

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the loop in a background task."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run())

    def stop(self) -> None:
        """Stop the loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        self._next_run = time.monotonic() + self.interval

        while self._running:
            sleep_duration = self._next_run - time.monotonic()
            if sleep_duration > 0:
                try:
                    await asyncio.sleep(sleep_duration)
                except asyncio.CancelledError:
                    break

            if not self._running:
                break

            try:
                start = time.monotonic()
                next_interval = await self.callback()
                self._last_execution_time = time.monotonic() - start
                self._execution_count += 1
            except asyncio.CancelledError:
                break
            except Exception as e:
                next_interval = None
                self._error_count += 1
                logger.error(f"Scheduled callback '{self.name}' error: {e}")

            if next_interval is not None:
                if next_interval > 0:
                    self.interval = next_interval
                else:
                    logger.warning(
                        f"Scheduler '{self.name}' ignored non-positive interval {next_interval}"
                    )

            self._next_run += self.interval
            now = time.monotonic()
            if self._next_run <= now:
                self._realigned_count += 1
                logger.warning(
                    f"Scheduler '{self.name}' fell behind "
                    f"(execution took {self._last_execution_time:.3f}s), realigning"
                )
                self._next_run = now + self.interval

    @property
    def execution_count(self) -> int:
        """Total number of successful executions."""
        return self._execution_count

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def last_execution_time(self) -> float:
        """Duration of last callback execution in seconds."""
        return self._last_execution_time

    def get_stats(self) -> dict:
        """Get scheduler statistics for observability."""
        return {
            "name": self.name,
            "interval_s": round(self.interval, 4),
            "execution_count": self._execution_count,
            "error_count": self._error_count,
            "realigned_count": self._realigned_count,
            "last_execution_s": round(self._last_execution_time, 3),
        }
