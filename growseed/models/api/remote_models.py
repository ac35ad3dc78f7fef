# growseed/models/api/remote_models.py
"""
Wire models for the remote productivity backend and event store.
Field names follow the backend's camelCase JSON.
"""

from pydantic import BaseModel, ConfigDict, Field


class AuthenticateResponse(BaseModel):
    """Response for POST /authenticate"""

    model_config = ConfigDict(extra="allow")

    token: str = Field(..., min_length=1)


class RemoteProductivityRecord(BaseModel):
    """Server-side mirror of one user's local state."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    whitelist: list[str] | None = None
    growth_percent: float | None = Field(None, alias="growthPercent")
    total_productive_time: float | None = Field(None, alias="totalProductiveTime")
    suggestions: str | None = None
    # Epoch milliseconds, only present when the server tracks it
    last_update_time: float | None = Field(None, alias="lastUpdateTime")


class RemoteLeaderboardRow(BaseModel):
    """Pre-ranked row from GET /api/productivity/leaderboard"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    rank: int
    display_name: str = Field("Anonymous", alias="displayName")
    growth_percent: float = Field(0.0, alias="growthPercent")
    max_growth_achieved: float = Field(0.0, alias="maxGrowthAchieved")
    total_productive_time: float = Field(0.0, alias="totalProductiveTime")


class RemoteLeaderboard(BaseModel):
    model_config = ConfigDict(extra="allow")

    leaderboard: list[RemoteLeaderboardRow] = Field(default_factory=list)


class ScorePayload(BaseModel):
    """Payload of a BUD_E_LEADERBOARD event."""

    name: str
    score: int
