"""
Domain models for growth tracking.

Plain dataclasses shared by the accumulator, the state store and the sync
orchestrator. They carry no I/O.
"""

import math
from dataclasses import dataclass

MIN_GROWTH = 0.0
MAX_GROWTH = 100.0


def clamp_growth(value: float) -> float:
    """Clamp a growth value into [0, 100]."""
    return max(MIN_GROWTH, min(MAX_GROWTH, value))


def round_percent(value: float) -> int:
    """Round half up for display, so 42.5 shows as 43."""
    return math.floor(value + 0.5)


@dataclass(slots=True, frozen=True)
class GrowthRates:
    """Percent-per-second rates; growth and decay are independent."""

    growth_rate: float = 0.05
    degrade_rate: float = 0.025


@dataclass(slots=True, frozen=True)
class GrowthState:
    """Persisted growth state. Timestamps are epoch seconds."""

    growth_percent: float
    last_update_time: float
    total_productive_time: float = 0.0

    @classmethod
    def initial(cls, now: float) -> "GrowthState":
        return cls(growth_percent=0.0, last_update_time=now, total_productive_time=0.0)


@dataclass(slots=True, frozen=True)
class GrowthUpdate:
    """Notification delivered to the presentation layer after each tick."""

    growth_percent: float
    is_whitelisted: bool

    def to_message(self) -> dict:
        return {
            "type": "UPDATE_GROWTH",
            "growthPercent": self.growth_percent,
            "isWhitelisted": self.is_whitelisted,
        }
