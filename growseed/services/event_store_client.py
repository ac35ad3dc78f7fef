"""
Generic event store client used for score submission.

Scores are stored as opaque events under a topic; the topic may also hold
unrelated payloads, so fetched events are filtered and deduplicated locally.
"""

import math

from growseed.config import settings
from growseed.infrastructure.observability.logging import get_logger
from growseed.models.api.remote_models import ScorePayload
from growseed.models.domain.leaderboard_domain import LeaderboardEntry, SortKey
from growseed.services.backend_client import BackendClient
from growseed.services.leaderboard_service import aggregate, extract_scores
from growseed.services.state_store import KEY_USER_NAME, StateStore, load_growth_state

logger = get_logger(__name__)

DEFAULT_USER_NAME = "User"


class EventStoreClient:
    """GET/POST /api/events/{topic}"""

    def __init__(self, client: BackendClient | None = None, topic: str | None = None):
        self.client = client or BackendClient()
        self.topic = topic or settings.LEADERBOARD_TOPIC

    @property
    def path(self) -> str:
        return f"/api/events/{self.topic}"

    async def close(self) -> None:
        await self.client.close()

    async def fetch_events(self) -> list:
        response = await self.client.send(
            "GET", self.path, "fetch_events", headers=self.client.headers()
        )
        self.client.raise_for_failure(response, "fetch_events", "Failed to fetch leaderboard")
        return self.client.parse_json(response, "fetch_events")

    async def post_event(self, payload: dict) -> dict:
        response = await self.client.send(
            "POST",
            self.path,
            "post_event",
            headers=self.client.headers(),
            json={"payload": payload},
        )
        self.client.raise_for_failure(response, "post_event", "Submission failed")
        return self.client.parse_json(response, "post_event")

    async def fetch_leaderboard(self, sort_key: SortKey = SortKey.TIME) -> list[LeaderboardEntry]:
        """Fetch, filter and rank score events, one row per name."""
        events = await self.fetch_events()
        records = extract_scores(events)
        entries = aggregate(records, sort_key)
        logger.info(
            "Event leaderboard loaded",
            topic=self.topic,
            events=len(events),
            entries=len(entries),
        )
        return entries

    async def submit_score(self, store: StateStore, now: float) -> ScorePayload:
        """Submit the stored user name with whole seconds of productive time."""
        name = await store.get(KEY_USER_NAME) or DEFAULT_USER_NAME
        state = await load_growth_state(store, now)
        payload = ScorePayload(name=name, score=math.floor(state.total_productive_time))

        await self.post_event(payload.model_dump())
        logger.info("Score submitted", topic=self.topic, score=payload.score)
        return payload
