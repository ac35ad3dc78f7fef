"""
Tick driver - samples the active context on a fixed cadence.

The loop runs accumulator.tick every TICK_INTERVAL_SECONDS with the last
reported context. Reporting a new context ticks immediately as well. A failing
tick is logged and the loop keeps going; sync and leaderboard errors never
reach it.
"""

import asyncio

from growseed.config import settings
from growseed.infrastructure.observability.logging import get_logger
from growseed.models.domain.growth_domain import GrowthState
from growseed.services.growth_accumulator import GrowthAccumulator

logger = get_logger(__name__)


class TickDriver:
    """Periodic driver for a GrowthAccumulator."""

    def __init__(self, accumulator: GrowthAccumulator, interval_seconds: float | None = None):
        self.accumulator = accumulator
        self.interval_seconds = interval_seconds or settings.TICK_INTERVAL_SECONDS
        self.active_identifier: str | None = None
        self.ticks = 0
        self.failures = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> GrowthState | None:
        """Apply one tick; returns None if it failed."""
        try:
            state = await self.accumulator.tick(self.active_identifier)
            self.ticks += 1
            return state
        except Exception as e:
            self.failures += 1
            logger.error("Growth tick failed", error=str(e), error_type=type(e).__name__)
            return None

    async def context_changed(self, active_identifier: str | None) -> GrowthState | None:
        """Switch to a new active context and tick right away."""
        self.active_identifier = active_identifier
        return await self.run_once()

    async def run_forever(self) -> None:
        logger.info("Starting growth tick loop", interval_seconds=self.interval_seconds)
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self.run_forever())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Growth tick loop stopped", ticks=self.ticks, failures=self.failures)
