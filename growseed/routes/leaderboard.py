"""
Leaderboard routes.

GET /leaderboard reads the backend's pre-ranked board. The /leaderboard/events
endpoints use the generic event store, where ranking happens locally.
"""

from fastapi import APIRouter, Depends, Query

from growseed.models.api.tracker_request import DisplayNameRequest
from growseed.models.api.tracker_response import (
    EventLeaderboardResponse,
    RemoteLeaderboardResponse,
    StatusResponse,
)
from growseed.models.domain.leaderboard_domain import SortKey
from growseed.routes.deps import get_runtime
from growseed.runtime import TrackerRuntime
from growseed.services.leaderboard_service import entries_to_dicts
from growseed.services.state_store import KEY_USER_NAME

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("", response_model=RemoteLeaderboardResponse)
async def get_leaderboard(
    sort_by: SortKey = Query(SortKey.CURRENT),
    limit: int = Query(10, ge=1, le=100),
    runtime: TrackerRuntime = Depends(get_runtime),
):
    rows = await runtime.orchestrator.fetch_leaderboard(sort_by, limit)
    return RemoteLeaderboardResponse(
        sort_by=sort_by.value,
        leaderboard=[
            {
                "rank": row.rank,
                "display_name": row.display_name,
                "score": row.score,
                "score_text": row.score_text,
            }
            for row in rows
        ],
    )


@router.get("/events", response_model=EventLeaderboardResponse)
async def get_event_leaderboard(runtime: TrackerRuntime = Depends(get_runtime)):
    entries = await runtime.event_store.fetch_leaderboard(SortKey.TIME)
    return EventLeaderboardResponse(leaderboard=entries_to_dicts(entries))


@router.post("/events/submit", response_model=StatusResponse)
async def submit_score(runtime: TrackerRuntime = Depends(get_runtime)):
    await runtime.event_store.submit_score(runtime.store, runtime.accumulator.now())
    return StatusResponse(ok=True, status="Score submitted successfully!")


@router.put("/name", response_model=StatusResponse)
async def set_user_name(body: DisplayNameRequest, runtime: TrackerRuntime = Depends(get_runtime)):
    await runtime.store.set_many({KEY_USER_NAME: body.user_name.strip()})
    return StatusResponse(ok=True, status="Name saved")
