import json

import httpx
import pytest

from growseed.models.domain.leaderboard_domain import SortKey
from growseed.services.errors import (
    AuthFailure,
    FormatFailure,
    TransportFailure,
    ValidationFailure,
)
from growseed.services.state_store import (
    KEY_GROWTH_PERCENT,
    KEY_JWT_TOKEN,
    KEY_LAST_UPDATE_TIME,
    KEY_TOTAL_PRODUCTIVE_TIME,
    KEY_USER_EMAIL,
    KEY_WHITELIST,
)
from growseed.services.sync_orchestrator import SessionState

BACKEND_URL = "http://backend.test"


async def _login(store):
    await store.set_many({KEY_JWT_TOKEN: "jwt-123", KEY_USER_EMAIL: "me@example.com"})


@pytest.mark.asyncio
async def test_login_stores_token(httpx_mock, orchestrator, store):
    httpx_mock.add_response(
        method="POST",
        url=f"{BACKEND_URL}/authenticate",
        json={"token": "jwt-abc", "id": 7},
    )

    data = await orchestrator.login(" me@example.com ", "pw")
    await orchestrator.close()

    assert data["token"] == "jwt-abc"
    assert await store.get(KEY_JWT_TOKEN) == "jwt-abc"
    assert await store.get(KEY_USER_EMAIL) == "me@example.com"
    assert await orchestrator.session_state() is SessionState.AUTHENTICATED

    request = httpx_mock.get_request()
    assert json.loads(request.content) == {"email": "me@example.com", "password": "pw"}


@pytest.mark.asyncio
async def test_login_and_pull_runs_in_order(httpx_mock, orchestrator, store):
    httpx_mock.add_response(
        method="POST", url=f"{BACKEND_URL}/authenticate", json={"token": "jwt-abc"}
    )
    httpx_mock.add_response(
        method="GET",
        url=f"{BACKEND_URL}/api/productivity/data",
        json={"whitelist": ["docs.python.org"], "growthPercent": 33.0},
    )

    error = await orchestrator.login_and_pull("me@example.com", "pw")
    await orchestrator.close()

    assert error is None
    first, second = httpx_mock.get_requests()
    assert (first.method, first.url.path) == ("POST", "/authenticate")
    assert (second.method, second.url.path) == ("GET", "/api/productivity/data")
    assert second.headers["Authorization"] == "Bearer jwt-abc"
    assert await store.get(KEY_WHITELIST) == ["docs.python.org"]
    assert await store.get(KEY_GROWTH_PERCENT) == 33.0


@pytest.mark.asyncio
async def test_login_and_pull_returns_pull_failure(httpx_mock, orchestrator):
    httpx_mock.add_response(
        method="POST", url=f"{BACKEND_URL}/authenticate", json={"token": "jwt-abc"}
    )
    httpx_mock.add_response(
        method="GET", url=f"{BACKEND_URL}/api/productivity/data", text="<html>oops</html>"
    )

    error = await orchestrator.login_and_pull("me@example.com", "pw")
    await orchestrator.close()

    assert isinstance(error, FormatFailure)
    assert await orchestrator.session_state() is SessionState.AUTHENTICATED


@pytest.mark.asyncio
async def test_login_and_pull_skips_pull_when_login_rejected(httpx_mock, orchestrator):
    httpx_mock.add_response(
        method="POST",
        url=f"{BACKEND_URL}/authenticate",
        status_code=401,
        json={"message": "Invalid credentials"},
    )

    with pytest.raises(AuthFailure, match="Invalid credentials"):
        await orchestrator.login_and_pull("me@example.com", "bad")
    await orchestrator.close()

    assert len(httpx_mock.get_requests()) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("email, password", [("", "pw"), ("me@example.com", ""), ("   ", "x")])
async def test_login_requires_credentials(httpx_mock, orchestrator, email, password):
    with pytest.raises(ValidationFailure):
        await orchestrator.login(email, password)
    await orchestrator.close()

    assert httpx_mock.get_requests() == []


@pytest.mark.asyncio
async def test_login_failure_surfaces_server_message(httpx_mock, orchestrator, store):
    httpx_mock.add_response(
        method="POST",
        url=f"{BACKEND_URL}/authenticate",
        status_code=401,
        json={"message": "Invalid email or password"},
    )

    with pytest.raises(AuthFailure) as exc:
        await orchestrator.login("me@example.com", "wrong")
    await orchestrator.close()

    assert str(exc.value) == "Invalid email or password"
    assert await orchestrator.session_state() is SessionState.ANONYMOUS


@pytest.mark.asyncio
async def test_login_failure_falls_back_to_status_text(httpx_mock, orchestrator):
    httpx_mock.add_response(
        method="POST", url=f"{BACKEND_URL}/authenticate", status_code=500, text="oops"
    )

    with pytest.raises(AuthFailure) as exc:
        await orchestrator.login("me@example.com", "pw")
    await orchestrator.close()

    assert str(exc.value) == "Authentication failed: Internal Server Error"


@pytest.mark.asyncio
async def test_login_without_token_is_format_failure(httpx_mock, orchestrator, store):
    httpx_mock.add_response(method="POST", url=f"{BACKEND_URL}/authenticate", json={"ok": True})

    with pytest.raises(FormatFailure):
        await orchestrator.login("me@example.com", "pw")
    await orchestrator.close()

    assert await store.get(KEY_JWT_TOKEN) is None


@pytest.mark.asyncio
async def test_logout_clears_session_without_network(httpx_mock, orchestrator, store):
    await _login(store)

    await orchestrator.logout()
    await orchestrator.close()

    assert await store.get(KEY_JWT_TOKEN) is None
    assert await store.get(KEY_USER_EMAIL) is None
    assert httpx_mock.get_requests() == []


@pytest.mark.asyncio
async def test_calls_without_session_are_rejected(httpx_mock, orchestrator):
    for call in (orchestrator.pull, orchestrator.push, orchestrator.push_growth):
        with pytest.raises(AuthFailure) as exc:
            await call()
        assert "login" in str(exc.value).lower()
    await orchestrator.close()

    assert httpx_mock.get_requests() == []


@pytest.mark.asyncio
async def test_401_purges_token_and_next_call_is_auth_failure(httpx_mock, orchestrator, store):
    await _login(store)
    httpx_mock.add_response(
        method="GET", url=f"{BACKEND_URL}/api/productivity/data", status_code=401
    )

    with pytest.raises(AuthFailure) as exc:
        await orchestrator.pull()
    assert "expired" in str(exc.value).lower()
    assert await store.get(KEY_JWT_TOKEN) is None

    # No re-login: rejected locally as AuthFailure, not TransportFailure
    with pytest.raises(AuthFailure):
        await orchestrator.push_whitelist()
    await orchestrator.close()

    assert len(httpx_mock.get_requests()) == 1


@pytest.mark.asyncio
async def test_pull_overwrites_local_state(httpx_mock, orchestrator, store, clock):
    await _login(store)
    await store.set_many(
        {
            KEY_WHITELIST: ["local.com"],
            KEY_GROWTH_PERCENT: 80.0,
            KEY_LAST_UPDATE_TIME: clock.now,
            KEY_TOTAL_PRODUCTIVE_TIME: 500.0,
        }
    )
    httpx_mock.add_response(
        method="GET",
        url=f"{BACKEND_URL}/api/productivity/data",
        json={"whitelist": ["remote.com", "docs.rs"], "growthPercent": 12.5},
    )

    record = await orchestrator.pull()
    await orchestrator.close()

    assert record.whitelist == ["remote.com", "docs.rs"]
    assert await store.get(KEY_WHITELIST) == ["remote.com", "docs.rs"]
    assert await store.get(KEY_GROWTH_PERCENT) == 12.5
    # Not provided by the remote: left alone
    assert await store.get(KEY_TOTAL_PRODUCTIVE_TIME) == 500.0
    assert await store.get(KEY_LAST_UPDATE_TIME) == clock.now

    request = httpx_mock.get_request()
    assert request.headers["Authorization"] == "Bearer jwt-123"


@pytest.mark.asyncio
async def test_pull_never_rewinds_last_update_time(httpx_mock, orchestrator, store, clock):
    await _login(store)
    await store.set_many({KEY_LAST_UPDATE_TIME: clock.now})
    older_ms = (clock.now - 3600) * 1000
    newer_ms = (clock.now + 10) * 1000
    httpx_mock.add_response(
        method="GET",
        url=f"{BACKEND_URL}/api/productivity/data",
        json={"whitelist": [], "growthPercent": 150, "lastUpdateTime": older_ms},
    )
    httpx_mock.add_response(
        method="GET",
        url=f"{BACKEND_URL}/api/productivity/data",
        json={
            "whitelist": [],
            "growthPercent": 5,
            "lastUpdateTime": newer_ms,
            "totalProductiveTime": 42,
        },
    )

    await orchestrator.pull()
    assert await store.get(KEY_LAST_UPDATE_TIME) == clock.now
    assert await store.get(KEY_GROWTH_PERCENT) == 100.0

    await orchestrator.pull()
    await orchestrator.close()
    assert await store.get(KEY_LAST_UPDATE_TIME) == pytest.approx(clock.now + 10)
    assert await store.get(KEY_TOTAL_PRODUCTIVE_TIME) == 42


@pytest.mark.asyncio
async def test_pull_bad_shape_is_format_failure(httpx_mock, orchestrator, store):
    await _login(store)
    httpx_mock.add_response(
        method="GET", url=f"{BACKEND_URL}/api/productivity/data", json=["not", "a", "record"]
    )

    with pytest.raises(FormatFailure):
        await orchestrator.pull()
    await orchestrator.close()


@pytest.mark.asyncio
async def test_pull_non_json_is_format_failure(httpx_mock, orchestrator, store):
    await _login(store)
    httpx_mock.add_response(
        method="GET", url=f"{BACKEND_URL}/api/productivity/data", text="<html>"
    )

    with pytest.raises(FormatFailure):
        await orchestrator.pull()
    await orchestrator.close()


@pytest.mark.asyncio
async def test_push_sends_full_record(httpx_mock, orchestrator, store, clock):
    await _login(store)
    await store.set_many(
        {KEY_WHITELIST: ["a.com"], KEY_GROWTH_PERCENT: 33.0, KEY_LAST_UPDATE_TIME: clock.now}
    )
    httpx_mock.add_response(
        method="PUT", url=f"{BACKEND_URL}/api/productivity/data", json={"ok": True}
    )

    await orchestrator.push(suggestions="Take breaks")
    await orchestrator.close()

    body = json.loads(httpx_mock.get_request().content)
    assert body == {"whitelist": ["a.com"], "growthPercent": 33.0, "suggestions": "Take breaks"}


@pytest.mark.asyncio
async def test_partial_pushes_hit_their_endpoints(httpx_mock, orchestrator, store, clock):
    await _login(store)
    await store.set_many(
        {
            KEY_WHITELIST: ["a.com"],
            KEY_GROWTH_PERCENT: 10.0,
            KEY_LAST_UPDATE_TIME: clock.now,
            KEY_TOTAL_PRODUCTIVE_TIME: 125.7,
        }
    )
    for path in ("whitelist", "growth", "stats", "settings"):
        httpx_mock.add_response(
            method="PUT", url=f"{BACKEND_URL}/api/productivity/{path}", json={"ok": True}
        )

    await orchestrator.push_whitelist()
    await orchestrator.push_growth()
    await orchestrator.push_stats(increment_session=True)
    await orchestrator.push_settings("Ada", True)
    await orchestrator.close()

    bodies = [json.loads(r.content) for r in httpx_mock.get_requests()]
    assert bodies == [
        {"whitelist": ["a.com"]},
        {"growthPercent": 10.0},
        {"productiveTimeSeconds": 125, "incrementSession": True},
        {"displayName": "Ada", "publicLeaderboard": True},
    ]


@pytest.mark.asyncio
async def test_push_settings_requires_display_name(httpx_mock, orchestrator, store):
    await _login(store)

    with pytest.raises(ValidationFailure):
        await orchestrator.push_settings("  ", True)
    await orchestrator.close()


@pytest.mark.asyncio
async def test_server_error_message_is_surfaced(httpx_mock, orchestrator, store):
    await _login(store)
    httpx_mock.add_response(
        method="PUT",
        url=f"{BACKEND_URL}/api/productivity/growth",
        status_code=400,
        json={"error": "growthPercent must be between 0 and 100"},
    )

    with pytest.raises(TransportFailure) as exc:
        await orchestrator.push_growth(10)
    await orchestrator.close()

    assert str(exc.value) == "growthPercent must be between 0 and 100"
    assert exc.value.status_code == 400
    # Only 401 ends the session
    assert await store.get(KEY_JWT_TOKEN) == "jwt-123"


@pytest.mark.asyncio
async def test_error_without_body_uses_status_text(httpx_mock, orchestrator, store):
    await _login(store)
    httpx_mock.add_response(
        method="PUT", url=f"{BACKEND_URL}/api/productivity/whitelist", status_code=503
    )

    with pytest.raises(TransportFailure) as exc:
        await orchestrator.push_whitelist(["x.com"])
    await orchestrator.close()

    assert str(exc.value) == "Failed to update whitelist: Service Unavailable"


@pytest.mark.asyncio
async def test_network_error_is_transport_failure_without_retry(httpx_mock, orchestrator, store):
    await _login(store)
    httpx_mock.add_exception(httpx.ConnectError("connection refused"))

    with pytest.raises(TransportFailure):
        await orchestrator.pull()
    await orchestrator.close()

    assert len(httpx_mock.get_requests()) == 1
    assert await store.get(KEY_JWT_TOKEN) == "jwt-123"


@pytest.mark.asyncio
async def test_fetch_leaderboard_passes_sort_and_clamped_limit(httpx_mock, orchestrator, store):
    await _login(store)
    httpx_mock.add_response(
        method="GET",
        url=f"{BACKEND_URL}/api/productivity/leaderboard?sortBy=time&limit=100",
        json={
            "leaderboard": [
                {"rank": 1, "displayName": "Ada", "totalProductiveTime": 7260},
            ]
        },
    )

    rows = await orchestrator.fetch_leaderboard(SortKey.TIME, limit=500)
    await orchestrator.close()

    assert [(r.rank, r.display_name, r.score_text) for r in rows] == [(1, "Ada", "2h 1m")]


@pytest.mark.asyncio
async def test_fetch_leaderboard_401_ends_session(httpx_mock, orchestrator, store):
    await _login(store)
    httpx_mock.add_response(
        method="GET",
        url=f"{BACKEND_URL}/api/productivity/leaderboard?sortBy=current&limit=10",
        status_code=401,
    )

    with pytest.raises(AuthFailure):
        await orchestrator.fetch_leaderboard()
    await orchestrator.close()

    assert await orchestrator.session_state() is SessionState.ANONYMOUS
