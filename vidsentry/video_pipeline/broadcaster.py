import asyncio
from typing import Any, Dict, Optional, Set, Tuple
from loguru import logger

Message = Tuple[str, Dict[str, Any]]


class Subscription:
    """
    One connected live-update client.

    Messages are buffered in a bounded queue bound to the event loop that
    created the subscription. Iterate with ``async for`` to receive
    ``(event_name, payload)`` tuples.
    """

    def __init__(self, maxsize: int = 1000):
        self.queue: "asyncio.Queue[Message]" = asyncio.Queue(maxsize=maxsize)
        self.loop = asyncio.get_running_loop()
        self.dropped = 0

    def offer(self, message: Message):
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            # Slow client; it misses this update
            self.dropped += 1

    async def get(self) -> Message:
        return await self.queue.get()

    def __aiter__(self):
        return self

    async def __anext__(self) -> Message:
        return await self.queue.get()


class ProgressBroadcaster:
    """Fans published events out to every currently connected subscriber."""

    def __init__(self, queue_size: int = 1000):
        self.queue_size = queue_size
        self._subscribers: Set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        """Register a new subscriber. Must be called from inside a running event loop."""
        subscription = Subscription(maxsize=self.queue_size)
        self._subscribers.add(subscription)
        logger.info(f"Live-update client subscribed ({self.subscriber_count} connected)")
        return subscription

    def unsubscribe(self, subscription: Subscription):
        if subscription in self._subscribers:
            self._subscribers.discard(subscription)
            logger.info(f"Live-update client unsubscribed ({self.subscriber_count} connected)")

    def publish(self, event_name: str, payload: Dict[str, Any]):
        """Fire-and-forget delivery to all subscribers; never blocks the caller."""
        try:
            current_loop: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        message = (event_name, dict(payload))
        for subscription in list(self._subscribers):
            if subscription.loop is current_loop:
                subscription.offer(message)
            elif subscription.loop.is_closed():
                self.unsubscribe(subscription)
            else:
                subscription.loop.call_soon_threadsafe(subscription.offer, message)
