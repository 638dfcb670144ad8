"""
Polling Controller

Owns the single timer that re-fetches the pipeline list while any pipeline is
busy. The predicate and the tick callback are injected, and so is the sleep
function, so tests can drive the loop without real time passing.
"""

import asyncio
import contextlib
from typing import Awaitable
from typing import Callable
from typing import Optional

from loguru import logger

POLLING_INTERVAL_WHEN_LOCKED_MS = 3000

Predicate = Callable[[], bool]
TickCallback = Callable[[], Awaitable[None]]
SleepFunction = Callable[[float], Awaitable[None]]


class PollingController:
    """
    Repeating timer: sleep, tick, re-check the predicate, repeat.

    start() and stop() are the only mutators. Starting while the timer is already
    running (including while a tick is in flight) never schedules a second loop.
    A failing tick is logged and the loop keeps going on the next interval.
    """

    def __init__(self, interval_ms: int = POLLING_INTERVAL_WHEN_LOCKED_MS, sleep: SleepFunction = asyncio.sleep):
        if interval_ms <= 0:
            raise ValueError(f"Polling interval must be positive, got {interval_ms}")
        self.interval_ms = interval_ms
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._predicate: Optional[Predicate] = None
        self._on_tick: Optional[TickCallback] = None
        self.tick_count = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, predicate: Predicate, on_tick: TickCallback) -> bool:
        """
        Start polling if the predicate holds.

        Must be called from within a running event loop. Callbacks are replaced
        even when the timer is already running.

        Returns:
            True if the timer is running after the call
        """
        self._predicate = predicate
        self._on_tick = on_tick

        if self.running:
            return True
        if not predicate():
            return False

        self._task = asyncio.get_running_loop().create_task(self._run(), name="pipeline-poller")
        logger.debug("Polling started", interval_ms=self.interval_ms)
        return True

    def stop(self) -> None:
        """Cancel the timer immediately. Safe to call when not running."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            logger.debug("Polling stopped")

    async def aclose(self) -> None:
        """Stop and wait for the loop to unwind (component teardown)."""
        task = self._task
        self.stop()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def wait(self) -> None:
        """Wait until the loop ends on its own (predicate went false) or is stopped."""
        task = self._task
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _run(self) -> None:
        try:
            while True:
                await self._sleep(self.interval_ms / 1000)
                self.tick_count += 1
                try:
                    await self._on_tick()
                except Exception as e:
                    logger.warning("Poll tick failed, retrying on next interval", tick=self.tick_count, error=str(e))
                    continue

                if not self._predicate():
                    logger.debug("Polling finished: nothing left to watch", ticks=self.tick_count)
                    break
        finally:
            if self._task is asyncio.current_task():
                self._task = None
