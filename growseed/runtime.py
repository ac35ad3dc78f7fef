"""
Wiring for one tracker process: a single state store shared by the
accumulator, the tick driver and the sync clients.
"""

import time
from dataclasses import dataclass, field

from growseed.infrastructure.observability.logging import get_logger
from growseed.jobs.tick_job import TickDriver
from growseed.services.backend_client import BackendClient
from growseed.services.event_store_client import EventStoreClient
from growseed.services.growth_accumulator import GrowthAccumulator
from growseed.services.notifications import GrowthNotifier
from growseed.services.state_store import StateStore, create_state_store
from growseed.services.sync_orchestrator import SyncOrchestrator

logger = get_logger(__name__)


@dataclass
class TrackerRuntime:
    store: StateStore
    notifier: GrowthNotifier
    accumulator: GrowthAccumulator
    driver: TickDriver
    orchestrator: SyncOrchestrator
    event_store: EventStoreClient
    started: list[str] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        store: StateStore | None = None,
        backend: BackendClient | None = None,
        clock=time.time,
    ) -> "TrackerRuntime":
        store = store or create_state_store()
        backend = backend or BackendClient()
        notifier = GrowthNotifier()
        accumulator = GrowthAccumulator(store, notifier, clock=clock)
        return cls(
            store=store,
            notifier=notifier,
            accumulator=accumulator,
            driver=TickDriver(accumulator),
            orchestrator=SyncOrchestrator(store, backend, clock=clock),
            event_store=EventStoreClient(backend),
        )

    async def start(self, run_tick_loop: bool = True) -> None:
        await self.store.initialize()
        self.started.append("state_store")

        await self.accumulator.initialize()

        if run_tick_loop:
            self.driver.start()
            self.started.append("tick_loop")

        logger.info("Tracker runtime started", services=self.started)

    async def stop(self) -> None:
        errors = []

        if "tick_loop" in self.started:
            await self.driver.stop()

        # orchestrator and event store share one BackendClient
        try:
            await self.orchestrator.close()
        except Exception as e:
            logger.error("Error closing backend client", error=str(e))
            errors.append(f"backend: {e}")

        if "state_store" in self.started:
            try:
                await self.store.close()
            except Exception as e:
                logger.error("Error closing state store", error=str(e))
                errors.append(f"state_store: {e}")

        self.started.clear()
        if errors:
            logger.warning("Some services had shutdown errors", errors=errors)
        else:
            logger.info("Tracker runtime stopped")
