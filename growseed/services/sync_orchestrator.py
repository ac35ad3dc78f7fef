"""
Sync orchestrator for the remote productivity backend.

Owns the session token lifecycle and drives push/pull between local state and
the backend. The session is ANONYMOUS while no token is stored and
AUTHENTICATED otherwise; a 401 on any authenticated call purges the token inside
that call. Push overwrites remote fields and pull overwrites local fields, no
merging. Two contexts pushing for the same user race and the last response wins.
"""

import time
from enum import Enum
from typing import Any

from pydantic import ValidationError

from growseed.config import settings
from growseed.infrastructure.observability.logging import get_logger
from growseed.models.api.remote_models import AuthenticateResponse, RemoteProductivityRecord
from growseed.models.domain.growth_domain import GrowthState, clamp_growth
from growseed.models.domain.leaderboard_domain import RenderedLeaderboardRow, SortKey
from growseed.services.backend_client import BackendClient
from growseed.services.errors import (
    AuthFailure,
    FormatFailure,
    GrowseedError,
    ValidationFailure,
)
from growseed.services.leaderboard_service import render_remote
from growseed.services.state_store import (
    KEY_GROWTH_PERCENT,
    KEY_JWT_TOKEN,
    KEY_LAST_UPDATE_TIME,
    KEY_TOKEN_ACQUIRED_AT,
    KEY_TOTAL_PRODUCTIVE_TIME,
    KEY_USER_EMAIL,
    KEY_WHITELIST,
    StateStore,
    get_token,
    load_growth_state,
    load_whitelist,
)

logger = get_logger(__name__)

NOT_AUTHENTICATED_MESSAGE = "Not authenticated. Please login first."
SESSION_EXPIRED_MESSAGE = "Authentication expired. Please login again."
MAX_LEADERBOARD_LIMIT = 100


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class SyncOrchestrator:
    """
    Authenticated push/pull against the productivity backend.

    Every operation reads the token from the store at call time, so a logout
    or a 401 seen by one flow is visible to the next call of any other flow.
    """

    def __init__(self, store: StateStore, client: BackendClient | None = None, clock=time.time):
        self.store = store
        self.client = client or BackendClient()
        self._clock = clock

    async def close(self) -> None:
        await self.client.close()

    # =================================================================
    # SESSION LIFECYCLE
    # =================================================================

    async def session_state(self) -> SessionState:
        token = await get_token(self.store)
        return SessionState.AUTHENTICATED if token else SessionState.ANONYMOUS

    async def is_authenticated(self) -> bool:
        return await self.session_state() is SessionState.AUTHENTICATED

    async def login(self, email: str, password: str) -> dict:
        """
        Exchange credentials for a token.

        Raises:
            ValidationFailure: Missing email or password (no request is sent)
            AuthFailure: Backend rejected the credentials
            FormatFailure: 2xx response without a token
        """
        email = (email or "").strip()
        if not email or not password:
            raise ValidationFailure("Please enter email and password")

        response = await self.client.send(
            "POST",
            "/authenticate",
            "authenticate",
            headers=self.client.headers(),
            json={"email": email, "password": password},
        )

        if not response.is_success:
            message = self.client.error_message(response, "Authentication failed", "message")
            logger.warning("Login rejected", status_code=response.status_code)
            raise AuthFailure(message, status_code=response.status_code)

        data = self.client.parse_json(response, "authenticate")
        try:
            auth = AuthenticateResponse.model_validate(data)
        except ValidationError as e:
            raise FormatFailure("Authentication response did not include a token") from e

        await self.store.set_many(
            {
                KEY_JWT_TOKEN: auth.token,
                KEY_TOKEN_ACQUIRED_AT: self._clock(),
                KEY_USER_EMAIL: email,
            }
        )
        logger.info("Login successful", backend_host=settings.backend_host())
        return data

    async def login_and_pull(self, email: str, password: str) -> GrowseedError | None:
        """
        Log in, then replace local state with the backend record.

        Login failures raise as in login(). A failed pull does not undo the
        login and is returned instead, except that a 401 still purges the token.
        """
        await self.login(email, password)
        try:
            await self.pull()
        except GrowseedError as e:
            logger.warning("Pull after login failed", error=e.message)
            return e
        return None

    async def logout(self) -> None:
        """Drop the session locally; never touches the network."""
        await self.store.remove([KEY_JWT_TOKEN, KEY_TOKEN_ACQUIRED_AT, KEY_USER_EMAIL])
        logger.info("Logged out")

    async def _purge_session(self, operation: str) -> None:
        await self.store.remove([KEY_JWT_TOKEN, KEY_TOKEN_ACQUIRED_AT])
        logger.warning("Session expired, token purged", operation=operation)

    async def _authenticated_call(
        self, method: str, path: str, operation: str, label: str, **kwargs
    ) -> Any:
        """
        Send a bearer-authenticated request and decode the JSON reply.

        Raises:
            AuthFailure: No token stored, or the backend answered 401
            TransportFailure: Unreachable or other non-2xx
            FormatFailure: Body is not JSON
        """
        token = await get_token(self.store)
        if not token:
            raise AuthFailure(NOT_AUTHENTICATED_MESSAGE)

        response = await self.client.send(
            method, path, operation, headers=self.client.headers(token), **kwargs
        )

        if response.status_code == 401:
            await self._purge_session(operation)
            raise AuthFailure(SESSION_EXPIRED_MESSAGE, status_code=401)

        self.client.raise_for_failure(response, operation, label)
        return self.client.parse_json(response, operation)

    # =================================================================
    # PULL
    # =================================================================

    async def pull(self) -> RemoteProductivityRecord:
        """Replace local whitelist and growth with the backend's copy."""
        data = await self._authenticated_call(
            "GET", "/api/productivity/data", "pull", "Failed to get productivity data"
        )
        if not isinstance(data, dict):
            raise FormatFailure("Unexpected productivity data format")
        try:
            record = RemoteProductivityRecord.model_validate(data)
        except ValidationError as e:
            raise FormatFailure(f"Unexpected productivity data format: {e}") from e

        await self.apply_remote_record(record)
        return record

    async def apply_remote_record(self, record: RemoteProductivityRecord) -> GrowthState:
        """Overwrite local state wholesale from a pulled record."""
        local = await load_growth_state(self.store, self._clock())

        last_update = local.last_update_time
        if record.last_update_time is not None:
            last_update = max(last_update, record.last_update_time / 1000.0)

        total = local.total_productive_time
        if record.total_productive_time is not None:
            total = max(0.0, record.total_productive_time)

        new_state = GrowthState(
            growth_percent=clamp_growth(record.growth_percent or 0.0),
            last_update_time=last_update,
            total_productive_time=total,
        )
        await self.store.set_many(
            {
                KEY_WHITELIST: list(record.whitelist or []),
                KEY_GROWTH_PERCENT: new_state.growth_percent,
                KEY_LAST_UPDATE_TIME: new_state.last_update_time,
                KEY_TOTAL_PRODUCTIVE_TIME: new_state.total_productive_time,
            }
        )
        logger.info(
            "Pulled productivity data",
            whitelist_size=len(record.whitelist or []),
            growth_percent=new_state.growth_percent,
        )
        return new_state

    # =================================================================
    # PUSH
    # =================================================================

    async def push(self, suggestions: str | None = None) -> Any:
        """Overwrite the remote record with local whitelist and growth."""
        whitelist = await load_whitelist(self.store)
        state = await load_growth_state(self.store, self._clock())

        body: dict[str, Any] = {
            "whitelist": whitelist,
            "growthPercent": state.growth_percent,
        }
        if suggestions:
            body["suggestions"] = suggestions

        return await self._authenticated_call(
            "PUT",
            "/api/productivity/data",
            "push",
            "Failed to update productivity data",
            json=body,
        )

    async def push_whitelist(self, whitelist: list[str] | None = None) -> Any:
        if whitelist is None:
            whitelist = await load_whitelist(self.store)
        return await self._authenticated_call(
            "PUT",
            "/api/productivity/whitelist",
            "push_whitelist",
            "Failed to update whitelist",
            json={"whitelist": list(whitelist)},
        )

    async def push_growth(self, growth_percent: float | None = None) -> Any:
        if growth_percent is None:
            growth_percent = (await load_growth_state(self.store, self._clock())).growth_percent
        return await self._authenticated_call(
            "PUT",
            "/api/productivity/growth",
            "push_growth",
            "Failed to update growth",
            json={"growthPercent": clamp_growth(growth_percent)},
        )

    async def push_stats(
        self, productive_time_seconds: float | None = None, increment_session: bool = False
    ) -> Any:
        """Report productive time, defaulting to the locally tracked total."""
        if productive_time_seconds is None:
            state = await load_growth_state(self.store, self._clock())
            productive_time_seconds = state.total_productive_time
        return await self._authenticated_call(
            "PUT",
            "/api/productivity/stats",
            "push_stats",
            "Failed to update stats",
            json={
                "productiveTimeSeconds": int(max(0.0, productive_time_seconds)),
                "incrementSession": bool(increment_session),
            },
        )

    async def push_settings(self, display_name: str, public_leaderboard: bool) -> Any:
        if not display_name or not display_name.strip():
            raise ValidationFailure("Display name is required")
        return await self._authenticated_call(
            "PUT",
            "/api/productivity/settings",
            "push_settings",
            "Failed to update settings",
            json={"displayName": display_name.strip(), "publicLeaderboard": public_leaderboard},
        )

    # =================================================================
    # LEADERBOARD
    # =================================================================

    async def fetch_leaderboard(
        self, sort_key: SortKey = SortKey.CURRENT, limit: int | None = None
    ) -> list[RenderedLeaderboardRow]:
        """Fetch the server-ranked leaderboard and project it onto sort_key."""
        key = SortKey(sort_key)
        limit = settings.LEADERBOARD_DEFAULT_LIMIT if limit is None else limit
        limit = max(1, min(MAX_LEADERBOARD_LIMIT, int(limit)))

        data = await self._authenticated_call(
            "GET",
            "/api/productivity/leaderboard",
            "fetch_leaderboard",
            "Failed to get leaderboard",
            params={"sortBy": key.value, "limit": limit},
        )
        return render_remote(data, key)
