# growseed/models/api/tracker_request.py
from pydantic import BaseModel, Field


class ActiveContextRequest(BaseModel):
    """Request for POST /tracker/context"""

    url: str | None = Field(None, description="Active tab URL or bare host")


class WhitelistEntryRequest(BaseModel):
    """Request for POST/DELETE /tracker/whitelist"""

    entry: str = Field(..., description="Host fragment, scheme and trailing slash are stripped")


class LoginRequest(BaseModel):
    """Request for POST /session/login"""

    email: str = ""
    password: str = ""
    sync_after_login: bool = Field(True, description="Pull the backend record after login")


class StatsPushRequest(BaseModel):
    """Request for POST /sync/stats"""

    productive_time_seconds: float | None = Field(
        None, ge=0, description="Defaults to the locally tracked total"
    )
    increment_session: bool = False


class SettingsPushRequest(BaseModel):
    """Request for POST /sync/settings"""

    display_name: str = Field(..., min_length=1)
    public_leaderboard: bool = True


class DisplayNameRequest(BaseModel):
    """Request for PUT /leaderboard/name"""

    user_name: str = Field(..., min_length=1)


class SuggestionsRequest(BaseModel):
    """Request for POST /suggestions"""

    api_key: str = ""
