"""
Best-effort growth notifications for the presentation layer.

Subscribers are plain callables or coroutines taking a GrowthUpdate. Delivery
never fails the caller: having no subscriber is normal, and a subscriber that
raises is logged and skipped.
"""

import inspect
from collections.abc import Awaitable, Callable

from growseed.infrastructure.observability.logging import get_logger
from growseed.models.domain.growth_domain import GrowthUpdate

logger = get_logger(__name__)

Subscriber = Callable[[GrowthUpdate], Awaitable[None] | None]


class GrowthNotifier:
    """Fan-out channel for UPDATE_GROWTH messages."""

    def __init__(self):
        self._subscribers: list[Subscriber] = []
        self.last_update: GrowthUpdate | None = None

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber; returns a function that unsubscribes it."""
        self._subscribers.append(subscriber)

        def _unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return _unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def publish(self, update: GrowthUpdate) -> int:
        """Deliver to every subscriber. Returns how many accepted the update."""
        self.last_update = update
        delivered = 0

        for subscriber in list(self._subscribers):
            try:
                result = subscriber(update)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception as e:
                # Consumer not ready yet; drop this update for it
                logger.debug(
                    "Growth notification not delivered",
                    error=str(e),
                    error_type=type(e).__name__,
                )

        return delivered
