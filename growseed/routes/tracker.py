"""
Tracker API Routes
Active-context reporting, growth snapshot and whitelist management.
"""

from fastapi import APIRouter, Depends

from growseed.models.api.tracker_request import ActiveContextRequest, WhitelistEntryRequest
from growseed.models.api.tracker_response import GrowthResponse, WhitelistResponse
from growseed.routes.deps import get_runtime
from growseed.runtime import TrackerRuntime
from growseed.services.state_store import load_whitelist
from growseed.services.whitelist_matcher import is_productive
from growseed.services.whitelist_service import add_to_whitelist, remove_from_whitelist

router = APIRouter(prefix="/tracker", tags=["tracker"])


@router.post("/context", response_model=GrowthResponse)
async def report_active_context(
    body: ActiveContextRequest, runtime: TrackerRuntime = Depends(get_runtime)
):
    """Record a new active context (tab switch or page load) and tick immediately."""
    state = await runtime.driver.context_changed(body.url)
    if state is None:
        state = await runtime.accumulator.snapshot()

    whitelist = await load_whitelist(runtime.store)
    return GrowthResponse(
        growth_percent=state.growth_percent,
        total_productive_time=state.total_productive_time,
        last_update_time=state.last_update_time,
        is_whitelisted=is_productive(body.url, whitelist),
        active_context=body.url,
    )


@router.get("/growth", response_model=GrowthResponse)
async def get_growth(runtime: TrackerRuntime = Depends(get_runtime)):
    state = await runtime.accumulator.snapshot()
    last = runtime.notifier.last_update
    return GrowthResponse(
        growth_percent=state.growth_percent,
        total_productive_time=state.total_productive_time,
        last_update_time=state.last_update_time,
        is_whitelisted=last.is_whitelisted if last else None,
        active_context=runtime.driver.active_identifier,
    )


@router.get("/whitelist", response_model=WhitelistResponse)
async def get_whitelist(runtime: TrackerRuntime = Depends(get_runtime)):
    return WhitelistResponse(whitelist=await load_whitelist(runtime.store))


@router.post("/whitelist", response_model=WhitelistResponse)
async def add_whitelist_entry(
    body: WhitelistEntryRequest, runtime: TrackerRuntime = Depends(get_runtime)
):
    whitelist, added = await add_to_whitelist(runtime.store, body.entry, runtime.orchestrator)
    return WhitelistResponse(whitelist=whitelist, changed=added)


@router.delete("/whitelist", response_model=WhitelistResponse)
async def remove_whitelist_entry(
    body: WhitelistEntryRequest, runtime: TrackerRuntime = Depends(get_runtime)
):
    whitelist, removed = await remove_from_whitelist(
        runtime.store, body.entry, runtime.orchestrator
    )
    return WhitelistResponse(whitelist=whitelist, changed=removed)
