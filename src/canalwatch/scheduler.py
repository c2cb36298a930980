"""
Fixed-rate scheduling of refresh cycles.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from .config import REFRESH_INTERVAL

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Runs a refresh cycle immediately and then once per interval.

    Ticks are anchored to the start time, not to cycle completion. A tick that
    fires while the previous cycle is still running is skipped rather than
    starting a second, overlapping cycle. A cycle that raises is logged and
    does not stop the schedule.

    Example:
        >>> scheduler = RefreshScheduler(controller.refresh, interval=30.0)
        >>> await scheduler.start()  # runs until stop() is called
    """

    def __init__(
        self,
        cycle: Callable[[], Awaitable[Any]],
        interval: float = REFRESH_INTERVAL,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.cycle = cycle
        self.interval = interval

        self.tick_count = 0
        self.cycles_started = 0
        self.cycles_failed = 0
        self.skipped_ticks = 0

        self._current: Optional["asyncio.Task[Any]"] = None
        self._stopped: Optional[asyncio.Event] = None

    @property
    def in_flight(self) -> bool:
        return self._current is not None and not self._current.done()

    @property
    def running(self) -> bool:
        return self._stopped is not None and not self._stopped.is_set()

    async def start(self) -> None:
        """Run the schedule until :meth:`stop` is called."""
        if self.running:
            raise RuntimeError("Scheduler is already running")

        loop = asyncio.get_running_loop()
        self._stopped = asyncio.Event()
        logger.info(f"Starting refresh schedule every {self.interval}s")

        self._launch()
        next_tick = loop.time() + self.interval

        try:
            while not self._stopped.is_set():
                try:
                    await asyncio.wait_for(
                        self._stopped.wait(), timeout=max(0.0, next_tick - loop.time())
                    )
                except asyncio.TimeoutError:
                    pass

                if self._stopped.is_set():
                    break

                next_tick += self.interval
                self.tick_count += 1

                if self.in_flight:
                    self.skipped_ticks += 1
                    logger.warning(
                        f"Skipping tick {self.tick_count}: previous cycle still running"
                    )
                    continue

                self._launch()
        finally:
            await self._cancel_current()
            logger.info("Refresh schedule stopped")

    def stop(self) -> None:
        """Stop ticking; an in-flight cycle is cancelled."""
        if self._stopped is not None:
            self._stopped.set()

    def _launch(self) -> None:
        self.cycles_started += 1
        self._current = asyncio.create_task(self._run_cycle(self.cycles_started))

    async def _run_cycle(self, number: int) -> None:
        try:
            await self.cycle()
        except Exception:
            self.cycles_failed += 1
            logger.exception(f"Refresh cycle {number} failed")

    async def _cancel_current(self) -> None:
        if self._current is None or self._current.done():
            return
        self._current.cancel()
        try:
            await self._current
        except asyncio.CancelledError:
            pass
