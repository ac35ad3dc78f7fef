"""
Sync routes: pull/push and the partial field pushes.
"""

from datetime import datetime

from fastapi import APIRouter, Depends

from growseed.models.api.tracker_request import SettingsPushRequest, StatsPushRequest
from growseed.models.api.tracker_response import StatusResponse
from growseed.routes.deps import get_runtime
from growseed.runtime import TrackerRuntime

router = APIRouter(prefix="/sync", tags=["sync"])


def _stamp(action: str) -> str:
    return f"{action} at {datetime.now().strftime('%H:%M:%S')}"


@router.post("/pull", response_model=StatusResponse)
async def pull(runtime: TrackerRuntime = Depends(get_runtime)):
    await runtime.orchestrator.pull()
    return StatusResponse(ok=True, status=_stamp("Synced"))


@router.post("/push", response_model=StatusResponse)
async def push(runtime: TrackerRuntime = Depends(get_runtime)):
    await runtime.orchestrator.push()
    return StatusResponse(ok=True, status=_stamp("Pushed"))


@router.post("/whitelist", response_model=StatusResponse)
async def push_whitelist(runtime: TrackerRuntime = Depends(get_runtime)):
    await runtime.orchestrator.push_whitelist()
    return StatusResponse(ok=True, status=_stamp("Whitelist pushed"))


@router.post("/growth", response_model=StatusResponse)
async def push_growth(runtime: TrackerRuntime = Depends(get_runtime)):
    await runtime.orchestrator.push_growth()
    return StatusResponse(ok=True, status=_stamp("Growth pushed"))


@router.post("/stats", response_model=StatusResponse)
async def push_stats(body: StatsPushRequest, runtime: TrackerRuntime = Depends(get_runtime)):
    await runtime.orchestrator.push_stats(body.productive_time_seconds, body.increment_session)
    return StatusResponse(ok=True, status=_stamp("Stats pushed"))


@router.post("/settings", response_model=StatusResponse)
async def push_settings(
    body: SettingsPushRequest, runtime: TrackerRuntime = Depends(get_runtime)
):
    await runtime.orchestrator.push_settings(body.display_name, body.public_leaderboard)
    return StatusResponse(ok=True, status="Settings saved")
