"""
In-process change feed.

Routers publish the full snapshot of a scope (e.g. every card entry of a
collection) after their transaction commits. Subscribers receive whole
snapshots, never diffs, so a slow subscriber only needs the newest one:
when its queue is full the oldest pending snapshot is dropped.

The feed lives in one process. Running several workers means each worker
only sees its own publishes.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 8


class Subscription:
    """A subscriber's view of one scope. Iterate to receive snapshots."""

    def __init__(self, scope: str, maxsize: int = DEFAULT_QUEUE_SIZE) -> None:
        self.scope = scope
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)

    def deliver(self, snapshot: Any) -> None:
        if self._queue.full():
            self._queue.get_nowait()
            logger.debug("Subscriber on %s fell behind, dropped a snapshot", self.scope)
        self._queue.put_nowait(snapshot)

    async def get(self) -> Any:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Any:
        return await self.get()


class ChangeFeed:
    """Publish/subscribe hub keyed by scope path ("users/u1/collections/c1/cards")."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self.queue_size = queue_size
        self._subscribers: dict[str, set[Subscription]] = {}

    @asynccontextmanager
    async def subscribe(self, scope: str) -> AsyncIterator[Subscription]:
        """
        Subscribe to a scope for the duration of the block.

        Usage:
            async with feed.subscribe(path) as subscription:
                async for snapshot in subscription:
                    ...
        """
        subscription = Subscription(scope, self.queue_size)
        self._subscribers.setdefault(scope, set()).add(subscription)
        try:
            yield subscription
        finally:
            subscribers = self._subscribers.get(scope)
            if subscribers is not None:
                subscribers.discard(subscription)
                if not subscribers:
                    del self._subscribers[scope]

    def publish(self, scope: str, snapshot: Any) -> int:
        """
        Deliver a snapshot to every current subscriber of a scope.

        Returns:
            Number of subscribers reached
        """
        subscribers = self._subscribers.get(scope, set())
        for subscription in subscribers:
            subscription.deliver(snapshot)
        return len(subscribers)

    def subscriber_count(self, scope: str) -> int:
        return len(self._subscribers.get(scope, ()))


# Default feed instance
_feed: ChangeFeed | None = None


def get_change_feed() -> ChangeFeed:
    """
    Get the default change feed.

    Returns:
        Singleton ChangeFeed instance
    """
    global _feed
    if _feed is None:
        _feed = ChangeFeed()
    return _feed
