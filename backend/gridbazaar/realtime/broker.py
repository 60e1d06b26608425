"""
Realtime Broker

Fan-out of table change events to subscribers over bounded asyncio queues.

A subscription names a table, an event type (INSERT, UPDATE, DELETE or *)
and an optional equality filter written as ``column=eq.value``. Events are
delivered to every matching subscription in publish order. When a
subscriber falls behind and its queue is full, the oldest pending event is
dropped and counted on the subscription.

All methods must be called from the event loop that owns the broker.
"""
import asyncio
import itertools
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Union

from loguru import logger

from gridbazaar.config import settings


EVENT_TYPES = ("INSERT", "UPDATE", "DELETE")
ANY_EVENT = "*"


@dataclass
class ChangeEvent:
    """A row change on a table."""
    table: str
    event_type: str
    new: dict = field(default_factory=dict)
    old: dict = field(default_factory=dict)
    committed_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def record(self) -> dict:
        """Row image used for filtering: new for INSERT/UPDATE, old for DELETE."""
        return self.old if self.event_type == "DELETE" else self.new

    def to_dict(self) -> dict:
        return {
            "table": self.table,
            "eventType": self.event_type,
            "new": self.new,
            "old": self.old,
            "commit_timestamp": self.committed_at.isoformat(),
        }


def parse_filter(expression: Optional[str]) -> Optional[tuple[str, str]]:
    """
    Parse a ``column=eq.value`` filter.

    Returns:
        (column, value) or None for an empty expression

    Raises:
        ValueError: for any other operator or a malformed expression
    """
    if not expression:
        return None
    column, sep, rest = expression.partition("=")
    operator, dot, value = rest.partition(".")
    if not sep or not dot or not column.strip():
        raise ValueError(f"Malformed filter: {expression!r}")
    if operator != "eq":
        raise ValueError(f"Unsupported filter operator: {operator!r}")
    return column.strip(), value


class Subscription:
    """A consumer's bounded view of one table's changes."""

    def __init__(
        self,
        subscription_id: int,
        table: str,
        event: str = "INSERT",
        filter: Optional[str] = None,
        maxsize: int = 100,
    ):
        event = event.upper()
        if event != ANY_EVENT and event not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event!r}")
        self.id = subscription_id
        self.table = table
        self.event = event
        self.filter = filter
        self._condition = parse_filter(filter)
        self.queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0
        self.closed = False

    def matches(self, change: ChangeEvent) -> bool:
        if change.table != self.table:
            return False
        if self.event != ANY_EVENT and change.event_type != self.event:
            return False
        if self._condition is None:
            return True
        column, value = self._condition
        actual = change.record.get(column)
        return actual is not None and str(actual) == value

    def offer(self, change: ChangeEvent) -> None:
        """Enqueue without blocking, evicting the oldest event when full."""
        if self.queue.full():
            self.queue.get_nowait()
            self.dropped += 1
            logger.warning(
                f"Realtime subscription {self.id} on {self.table} is full; "
                f"dropped oldest event ({self.dropped} total)"
            )
        self.queue.put_nowait(change)

    async def get(self) -> ChangeEvent:
        return await self.queue.get()

    def __repr__(self):
        return f"<Subscription {self.id} {self.event} {self.table} filter={self.filter!r}>"


class RealtimeBroker:
    """
    Publish/subscribe hub for change events.

    Created once by the application factory and stored on ``app.state``.

    Usage:
        broker = RealtimeBroker()
        sub = broker.subscribe("voltmarket_listings", event="INSERT")
        await broker.publish(ChangeEvent("voltmarket_listings", "INSERT", new={...}))
        event = await sub.get()
    """

    def __init__(self, queue_maxsize: Optional[int] = None):
        self.queue_maxsize = queue_maxsize or settings.REALTIME_QUEUE_MAXSIZE
        self._subscriptions: dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self.published = 0

    def subscribe(
        self,
        table: str,
        event: str = "INSERT",
        filter: Optional[str] = None,
    ) -> Subscription:
        subscription = Subscription(
            next(self._ids),
            table,
            event=event,
            filter=filter,
            maxsize=self.queue_maxsize,
        )
        self._subscriptions[subscription.id] = subscription
        logger.debug(f"Realtime subscribe: {subscription!r}")
        return subscription

    def unsubscribe(self, subscription: Union[Subscription, int]) -> bool:
        subscription_id = subscription if isinstance(subscription, int) else subscription.id
        removed = self._subscriptions.pop(subscription_id, None)
        if removed is None:
            return False
        removed.closed = True
        logger.debug(f"Realtime unsubscribe: {removed!r}")
        return True

    async def publish(self, change: ChangeEvent) -> int:
        """Deliver an event to all matching subscriptions; returns the number reached."""
        self.published += 1
        delivered = 0
        for subscription in list(self._subscriptions.values()):
            if subscription.matches(change):
                subscription.offer(change)
                delivered += 1
        return delivered

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    def get_stats(self) -> dict:
        return {
            "subscriptions": self.subscription_count,
            "published": self.published,
            "dropped": sum(s.dropped for s in self._subscriptions.values()),
        }


EventHandler = Callable[[ChangeEvent], Awaitable[Any]]


class RealtimeFeed:
    """
    Consumer that drains a subscription into a bounded in-memory history.

    ``events`` keeps the most recent ``history`` events; pass 0 to keep none.

    An optional async handler is awaited for each event. Handler errors are
    logged and the feed keeps running.
    """

    def __init__(
        self,
        broker: RealtimeBroker,
        table: str,
        event: str = "INSERT",
        filter: Optional[str] = None,
        handler: Optional[EventHandler] = None,
        history: Optional[int] = None,
    ):
        self.broker = broker
        self.subscription = broker.subscribe(table, event=event, filter=filter)
        self.handler = handler
        if history is None:
            history = settings.REALTIME_FEED_HISTORY
        self.events: deque[ChangeEvent] = deque(maxlen=history)

    async def run(self) -> None:
        """Consume until cancelled, then unsubscribe."""
        try:
            while True:
                change = await self.subscription.get()
                await self.handle(change)
        finally:
            self.broker.unsubscribe(self.subscription)

    async def handle(self, change: ChangeEvent) -> None:
        self.events.append(change)
        if self.handler is None:
            return
        try:
            await self.handler(change)
        except Exception as e:
            logger.error(f"Realtime handler failed for {change.table} {change.event_type}: {e}")

    async def drain(self) -> int:
        """Process whatever is queued right now without waiting; returns the count."""
        processed = 0
        while not self.subscription.queue.empty():
            await self.handle(self.subscription.queue.get_nowait())
            processed += 1
        return processed

    def close(self) -> None:
        self.broker.unsubscribe(self.subscription)
