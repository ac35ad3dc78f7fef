"""
Growth accumulator - sampled integrator for the productivity growth score.

Each tick applies the wall-clock delta since the last update in one step, so a
gap of several days is resolved by a single tick clamped to [0, 100] instead of
replaying per-second state.
"""

import time

from growseed.config import settings
from growseed.infrastructure.observability.logging import get_logger
from growseed.models.domain.growth_domain import (
    MAX_GROWTH,
    MIN_GROWTH,
    GrowthRates,
    GrowthState,
    GrowthUpdate,
    clamp_growth,
)
from growseed.services.notifications import GrowthNotifier
from growseed.services.state_store import (
    KEY_GROWTH_PERCENT,
    KEY_LAST_UPDATE_TIME,
    KEY_WHITELIST,
    StateStore,
    load_growth_state,
    load_whitelist,
    save_growth_state,
)
from growseed.services.whitelist_matcher import is_productive

logger = get_logger(__name__)


def tick(
    state: GrowthState, now: float, is_productive_now: bool, rates: GrowthRates
) -> GrowthState:
    """
    Advance growth state to `now`.

    Args:
        state: Current persisted state
        now: Current time, epoch seconds
        is_productive_now: Matcher verdict for the active context
        rates: Growth/decay rates in percent per second

    Returns:
        GrowthState: New state; last_update_time never moves backwards
    """
    delta = max(0.0, now - state.last_update_time)
    growth = clamp_growth(state.growth_percent)
    total = state.total_productive_time

    if is_productive_now:
        growth = min(MAX_GROWTH, growth + rates.growth_rate * delta)
        total = total + delta
    else:
        growth = max(MIN_GROWTH, growth - rates.degrade_rate * delta)

    return GrowthState(
        growth_percent=growth,
        last_update_time=max(now, state.last_update_time),
        total_productive_time=total,
    )


class GrowthAccumulator:
    """
    Owns the read-tick-write cycle against the state store.

    Never raises into the caller's loop for bad persisted data; corrupt fields
    are defaulted by the store accessors.
    """

    def __init__(
        self,
        store: StateStore,
        notifier: GrowthNotifier | None = None,
        rates: GrowthRates | None = None,
        clock=time.time,
    ):
        self.store = store
        self.notifier = notifier or GrowthNotifier()
        self.rates = rates or GrowthRates(**settings.get_growth_rates())
        self._clock = clock

    def now(self) -> float:
        return self._clock()

    async def initialize(self) -> None:
        """Seed first-run defaults without overwriting existing state."""
        existing = await self.store.get_many(
            [KEY_WHITELIST, KEY_GROWTH_PERCENT, KEY_LAST_UPDATE_TIME]
        )
        defaults = {
            KEY_WHITELIST: [],
            KEY_GROWTH_PERCENT: 0.0,
            KEY_LAST_UPDATE_TIME: self._clock(),
        }
        missing = {k: v for k, v in defaults.items() if k not in existing}
        if missing:
            await self.store.set_many(missing)
            logger.info("Seeded growth state defaults", keys=sorted(missing))

    async def tick(self, active_identifier: str | None, now: float | None = None) -> GrowthState:
        """Sample the active context once and persist the new state."""
        now = self._clock() if now is None else now

        whitelist = await load_whitelist(self.store)
        current = await load_growth_state(self.store, now)
        productive = is_productive(active_identifier, whitelist)

        new_state = tick(current, now, productive, self.rates)
        await save_growth_state(self.store, new_state)

        await self.notifier.publish(
            GrowthUpdate(growth_percent=new_state.growth_percent, is_whitelisted=productive)
        )

        logger.debug(
            "Growth tick applied",
            productive=productive,
            delta_seconds=round(max(0.0, now - current.last_update_time), 3),
            growth_percent=round(new_state.growth_percent, 3),
        )
        return new_state

    async def snapshot(self) -> GrowthState:
        """Read current state without advancing it."""
        return await load_growth_state(self.store, self._clock())
