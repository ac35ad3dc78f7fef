"""
Suggestions route. Uses the key from the request, else the stored key.
"""

from fastapi import APIRouter, Depends

from growseed.models.api.tracker_request import SuggestionsRequest
from growseed.models.api.tracker_response import SuggestionsResponse
from growseed.routes.deps import get_runtime
from growseed.runtime import TrackerRuntime
from growseed.services.state_store import KEY_GEMINI_API_KEY, load_whitelist
from growseed.services.suggestion_service import get_suggestions

router = APIRouter(prefix="/suggestions", tags=["suggestions"])


@router.post("", response_model=SuggestionsResponse)
async def suggestions(body: SuggestionsRequest, runtime: TrackerRuntime = Depends(get_runtime)):
    api_key = body.api_key.strip()
    if api_key:
        await runtime.store.set_many({KEY_GEMINI_API_KEY: api_key})
    else:
        api_key = await runtime.store.get(KEY_GEMINI_API_KEY, "")

    state = await runtime.accumulator.snapshot()
    whitelist = await load_whitelist(runtime.store)
    text = await get_suggestions(api_key, whitelist, state.growth_percent)
    return SuggestionsResponse(suggestions=text)
