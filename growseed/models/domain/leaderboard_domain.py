"""
Domain models for leaderboard aggregation.
"""

from dataclasses import dataclass
from enum import Enum


class SortKey(str, Enum):
    """Which metric the leaderboard is ordered by."""

    CURRENT = "current"
    MAX = "max"
    TIME = "time"


@dataclass(slots=True, frozen=True)
class LeaderboardRecord:
    """Raw score record as submitted to the event store."""

    participant_name: str
    score: float
    rank: int | None = None


@dataclass(slots=True, frozen=True)
class LeaderboardEntry:
    """One ranked row after deduplication."""

    rank: int
    participant_name: str
    score: float


@dataclass(slots=True, frozen=True)
class RenderedLeaderboardRow:
    """Server-ranked row projected onto the selected metric."""

    rank: int
    display_name: str
    score: float
    score_text: str
