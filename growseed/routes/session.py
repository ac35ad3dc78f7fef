"""
Session routes: login, logout and status against the productivity backend.
"""

from fastapi import APIRouter, Depends

from growseed.models.api.tracker_request import LoginRequest
from growseed.models.api.tracker_response import SessionStatusResponse, StatusResponse
from growseed.routes.deps import get_runtime
from growseed.runtime import TrackerRuntime
from growseed.services.state_store import KEY_USER_EMAIL

router = APIRouter(prefix="/session", tags=["session"])


@router.get("/status", response_model=SessionStatusResponse)
async def session_status(runtime: TrackerRuntime = Depends(get_runtime)):
    state = await runtime.orchestrator.session_state()
    email = await runtime.store.get(KEY_USER_EMAIL)
    return SessionStatusResponse(state=state.value, email=email)


@router.post("/login", response_model=StatusResponse)
async def login(body: LoginRequest, runtime: TrackerRuntime = Depends(get_runtime)):
    if not body.sync_after_login:
        await runtime.orchestrator.login(body.email, body.password)
        return StatusResponse(ok=True, status="Login successful!")

    pull_error = await runtime.orchestrator.login_and_pull(body.email, body.password)
    if pull_error is not None:
        status = f"Login successful! Sync failed: {pull_error.message}"
        return StatusResponse(ok=True, status=status)
    return StatusResponse(ok=True, status="Login successful! Data synced.")


@router.post("/logout", response_model=StatusResponse)
async def logout(runtime: TrackerRuntime = Depends(get_runtime)):
    await runtime.orchestrator.logout()
    return StatusResponse(ok=True, status="Logged out")
