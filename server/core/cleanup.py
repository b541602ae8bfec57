"""Periodic sweep task for in-process state.

One asyncio task per owner, started in the application lifespan and stopped
on shutdown. Owners (cache, rate limiter registry) hand in a synchronous
callback that returns how many items it removed.
"""
import asyncio
from typing import Callable, Optional

from core.logging import get_logger

logger = get_logger(__name__)


class PeriodicSweeper:
    """Background task invoking ``callback`` every ``interval`` seconds.

    The first run happens one interval after ``start()``. A failing callback
    is logged and the loop keeps going.
    """

    def __init__(self, name: str, callback: Callable[[], int], interval: float):
        self.name = name
        self.callback = callback
        self.interval = interval
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the sweep background task."""
        if self._running:
            logger.warning("Sweeper already running", sweeper=self.name)
            return
        self._running = True
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info("Sweeper started", sweeper=self.name, interval=self.interval)

    async def stop(self) -> None:
        """Stop the sweep task gracefully."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Sweeper stopped", sweeper=self.name)

    async def _sweep_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.interval)
            try:
                self.run_once()
            except Exception as e:
                logger.error("Sweep failed", sweeper=self.name, error=str(e))

    def run_once(self) -> int:
        """Run the callback once and return how many items it removed."""
        removed = self.callback()
        if removed:
            logger.info("Sweep completed", sweeper=self.name, removed=removed)
        return removed
