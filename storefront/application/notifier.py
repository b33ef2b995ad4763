"""Change feed and change notifier.

The change feed is a topic-keyed publish/subscribe primitive. The
notifier scopes it to one collection and fans a payload-less "changed"
event out to every current subscriber, including the writer's own view.
Subscribers must re-fetch; no diff is ever transmitted.
"""

import asyncio
import inspect
from collections import defaultdict
from collections.abc import AsyncIterator, Callable
from typing import Any

import structlog

from storefront.domain.events import CATEGORIES_TOPIC, PRODUCTS_TOPIC, ChangeEvent

logger = structlog.get_logger()

Listener = Callable[[ChangeEvent], Any]


class InMemoryChangeFeed:
    """In-process change feed.

    Delivers each published event to callback listeners and to queue
    subscribers of the event's topic. Queue subscribers receive at least
    one event per burst of changes: while an undelivered event is still
    waiting in a subscriber's queue, further events for it are coalesced.
    """

    def __init__(self) -> None:
        """Initialize change feed."""
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._queues: dict[str, set[asyncio.Queue[ChangeEvent]]] = defaultdict(set)

    def subscribe(self, topic: str, listener: Listener) -> Callable[[], None]:
        """Register a callback for a topic.

        Args:
            topic: Topic to listen on.
            listener: Called with each event; may be sync or async.

        Returns:
            Callable that removes the subscription.
        """
        self._listeners[topic].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[topic]:
                self._listeners[topic].remove(listener)

        return unsubscribe

    def open_queue(self, topic: str) -> asyncio.Queue[ChangeEvent]:
        """Open a queue subscription for a topic."""
        queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()
        self._queues[topic].add(queue)
        return queue

    def close_queue(self, topic: str, queue: asyncio.Queue[ChangeEvent]) -> None:
        """Close a queue subscription."""
        self._queues[topic].discard(queue)

    def subscriber_count(self, topic: str) -> int:
        """Number of listeners and queues subscribed to a topic."""
        return len(self._listeners[topic]) + len(self._queues[topic])

    async def publish(self, event: ChangeEvent) -> int:
        """Fan an event out to every subscriber of its topic.

        A failing listener is logged and does not stop delivery to the
        others.

        Args:
            event: Event to deliver.

        Returns:
            Number of subscribers the event was delivered to.
        """
        delivered = 0
        for listener in list(self._listeners[event.topic]):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception:
                logger.exception("Change listener failed", topic=event.topic)

        for queue in list(self._queues[event.topic]):
            if queue.empty():
                queue.put_nowait(event)
            delivered += 1

        logger.debug("Change published", topic=event.topic, delivered=delivered)
        return delivered


class ChangeNotifier:
    """Notifier for one logical collection.

    Example usage:
        notifier = get_product_notifier()
        unsubscribe = notifier.subscribe(lambda event: view.invalidate_products())
        await notifier.notify()
    """

    def __init__(self, topic: str, feed: InMemoryChangeFeed | None = None) -> None:
        """Initialize notifier.

        Args:
            topic: Collection the notifier signals about.
            feed: Change feed; defaults to the process-wide feed.
        """
        self.topic = topic
        self.feed = feed or get_change_feed()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        return self.feed.subscribe(self.topic, listener)

    async def notify(self) -> ChangeEvent:
        """Signal that the collection changed.

        Returns:
            The event that was published.
        """
        event = ChangeEvent(topic=self.topic)
        await self.feed.publish(event)
        return event

    async def stream(self) -> AsyncIterator[ChangeEvent]:
        """Yield change events until the consumer stops iterating."""
        queue = self.feed.open_queue(self.topic)
        try:
            while True:
                yield await queue.get()
        finally:
            self.feed.close_queue(self.topic, queue)


# Global instances
_feed: InMemoryChangeFeed | None = None
_notifiers: dict[str, ChangeNotifier] = {}


def get_change_feed() -> InMemoryChangeFeed:
    """Get change feed singleton."""
    global _feed
    if _feed is None:
        _feed = InMemoryChangeFeed()
    return _feed


def get_notifier(topic: str) -> ChangeNotifier:
    """Get the notifier for a topic, creating it on first use."""
    if topic not in _notifiers:
        _notifiers[topic] = ChangeNotifier(topic)
    return _notifiers[topic]


def get_product_notifier() -> ChangeNotifier:
    """Get the notifier for the product collection."""
    return get_notifier(PRODUCTS_TOPIC)


def get_category_notifier() -> ChangeNotifier:
    """Get the notifier for the category collection."""
    return get_notifier(CATEGORIES_TOPIC)


def reset_notifiers() -> None:
    """Drop the process-wide feed and notifiers."""
    global _feed
    _feed = None
    _notifiers.clear()
