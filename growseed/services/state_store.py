# growseed/services/state_store.py
"""
Persisted local state: whitelist, growth state, session token and profile fields.

Values are stored as JSON under flat keys, mirroring the browser storage layout
(whitelist, growthPercent, lastUpdateTime, totalProductiveTime, jwtToken,
userEmail, userName, geminiApiKey). Two backends share one async interface:
an in-process dict and Redis.
"""

import json
from abc import ABC, abstractmethod
from typing import Any

import redis.asyncio as redis

from growseed.config import settings
from growseed.infrastructure.observability.logging import get_logger
from growseed.models.domain.growth_domain import GrowthState, clamp_growth

logger = get_logger(__name__)

KEY_WHITELIST = "whitelist"
KEY_GROWTH_PERCENT = "growthPercent"
KEY_LAST_UPDATE_TIME = "lastUpdateTime"
KEY_TOTAL_PRODUCTIVE_TIME = "totalProductiveTime"
KEY_JWT_TOKEN = "jwtToken"
KEY_TOKEN_ACQUIRED_AT = "jwtTokenAcquiredAt"
KEY_USER_EMAIL = "userEmail"
KEY_USER_NAME = "userName"
KEY_GEMINI_API_KEY = "geminiApiKey"


class StateStore(ABC):
    """Async key/value store interface."""

    async def initialize(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def ping(self) -> bool:
        return True

    @abstractmethod
    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        ...

    @abstractmethod
    async def set_many(self, values: dict[str, Any]) -> None:
        ...

    @abstractmethod
    async def remove(self, keys: list[str]) -> None:
        ...

    async def get(self, key: str, default: Any = None) -> Any:
        values = await self.get_many([key])
        value = values.get(key)
        return default if value is None else value


class InMemoryStateStore(StateStore):
    """Process-local store; state is lost on restart."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        return {key: json.loads(self._data[key]) for key in keys if key in self._data}

    async def set_many(self, values: dict[str, Any]) -> None:
        for key, value in values.items():
            self._data[key] = json.dumps(value)

    async def remove(self, keys: list[str]) -> None:
        for key in keys:
            self._data.pop(key, None)


class RedisStateStore(StateStore):
    """Redis-backed store with a connection pool and key prefix."""

    def __init__(self, url: str | None = None, prefix: str | None = None):
        self.url = url or settings.REDIS_URL
        self.prefix = prefix if prefix is not None else settings.STATE_KEY_PREFIX
        self.client: redis.Redis | None = None
        self._initialized = False

    async def initialize(self) -> None:
        """Create the pool and verify the connection."""
        if self._initialized:
            return

        try:
            self.client = redis.Redis.from_url(
                self.url,
                max_connections=10,
                socket_connect_timeout=10,
                socket_timeout=10,
                health_check_interval=30,
                decode_responses=True,
            )
            await self.client.ping()
            self._initialized = True
            logger.info("Redis state store initialized", prefix=self.prefix)
        except Exception as e:
            logger.error("Failed to initialize Redis state store", error=str(e))
            self._initialized = False
            raise RuntimeError("Redis initialization failed") from e

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            logger.info("Redis state store closed")
        self.client = None
        self._initialized = False

    async def ping(self) -> bool:
        try:
            return bool(await self._require_client().ping())
        except Exception as e:
            logger.warning("Redis ping failed", error=str(e))
            return False

    def _require_client(self) -> redis.Redis:
        if self.client is None:
            raise RuntimeError("Redis state store not initialized")
        return self.client

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        if not keys:
            return {}
        raw_values = await self._require_client().mget([self._key(k) for k in keys])
        result = {}
        for key, raw in zip(keys, raw_values, strict=True):
            if raw is not None:
                result[key] = json.loads(raw)
        return result

    async def set_many(self, values: dict[str, Any]) -> None:
        if not values:
            return
        await self._require_client().mset(
            {self._key(k): json.dumps(v) for k, v in values.items()}
        )

    async def remove(self, keys: list[str]) -> None:
        if keys:
            await self._require_client().delete(*[self._key(k) for k in keys])


def create_state_store(backend: str | None = None) -> StateStore:
    """Build the configured store backend."""
    name = (backend or settings.STATE_BACKEND).strip().lower()
    if name == "redis":
        return RedisStateStore()
    if name == "memory":
        return InMemoryStateStore()
    raise ValueError(f"Unknown state backend '{name}'. Available: memory, redis")


# =================================================================
# TYPED ACCESSORS
# =================================================================


def _as_float(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


async def load_growth_state(store: StateStore, now: float) -> GrowthState:
    """Read growth state, defaulting missing or corrupt fields."""
    values = await store.get_many(
        [KEY_GROWTH_PERCENT, KEY_LAST_UPDATE_TIME, KEY_TOTAL_PRODUCTIVE_TIME]
    )
    return GrowthState(
        growth_percent=clamp_growth(_as_float(values.get(KEY_GROWTH_PERCENT), 0.0)),
        last_update_time=_as_float(values.get(KEY_LAST_UPDATE_TIME), now),
        total_productive_time=max(0.0, _as_float(values.get(KEY_TOTAL_PRODUCTIVE_TIME), 0.0)),
    )


async def save_growth_state(store: StateStore, state: GrowthState) -> None:
    await store.set_many(
        {
            KEY_GROWTH_PERCENT: state.growth_percent,
            KEY_LAST_UPDATE_TIME: state.last_update_time,
            KEY_TOTAL_PRODUCTIVE_TIME: state.total_productive_time,
        }
    )


async def load_whitelist(store: StateStore) -> list[str]:
    value = await store.get(KEY_WHITELIST, [])
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, str)]


async def save_whitelist(store: StateStore, whitelist: list[str]) -> None:
    await store.set_many({KEY_WHITELIST: list(whitelist)})


async def get_token(store: StateStore) -> str | None:
    token = await store.get(KEY_JWT_TOKEN)
    return token if isinstance(token, str) and token else None
