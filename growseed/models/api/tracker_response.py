# growseed/models/api/tracker_response.py
from typing import Literal

from pydantic import BaseModel, Field


class GrowthResponse(BaseModel):
    """Response for GET /tracker/growth and POST /tracker/context"""

    growth_percent: float = Field(..., ge=0, le=100)
    total_productive_time: float = Field(..., ge=0)
    last_update_time: float
    is_whitelisted: bool | None = None
    active_context: str | None = None


class WhitelistResponse(BaseModel):
    whitelist: list[str]
    changed: bool = False


class SessionStatusResponse(BaseModel):
    """Response for GET /session/status"""

    state: Literal["anonymous", "authenticated"]
    email: str | None = None


class StatusResponse(BaseModel):
    """Inline status text for sync actions."""

    ok: bool
    status: str


class RemoteLeaderboardRowResponse(BaseModel):
    rank: int
    display_name: str
    score: float
    score_text: str


class RemoteLeaderboardResponse(BaseModel):
    sort_by: Literal["current", "max", "time"]
    leaderboard: list[RemoteLeaderboardRowResponse]


class EventLeaderboardRowResponse(BaseModel):
    rank: int
    participant_name: str
    score: float
    score_text: str


class EventLeaderboardResponse(BaseModel):
    leaderboard: list[EventLeaderboardRowResponse]


class SuggestionsResponse(BaseModel):
    suggestions: str
