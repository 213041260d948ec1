"""
Event broadcaster.

Fans timer events out to a changing set of observers:
- each observer owns a bounded asyncio.Queue,
- publishing is put_nowait(), so the controller never waits on an observer,
- a full queue means the observer is slow; its oldest queued event is dropped
  to make room, so the latest snapshot and terminal events always arrive.

No history is kept. A new observer asks the gateway for the current snapshot.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from focustimer.core.timer import TimerSnapshot

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    STATE_CHANGED = "state-changed"
    FINISHED = "finished"
    CLOSED = "closed"


@dataclass(frozen=True, slots=True)
class TimerEvent:
    kind: EventKind
    snapshot: TimerSnapshot | None = None


_ids = itertools.count(1)


class Subscription:
    """One observer's attachment to the broadcaster.

    Iterate with ``async for event in subscription``; iteration ends once the
    subscription is unsubscribed.
    """

    def __init__(self, queue_size: int) -> None:
        self.id: int = next(_ids)
        self.dropped: int = 0
        self._queue: asyncio.Queue[TimerEvent | None] = asyncio.Queue(maxsize=queue_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def offer(self, event: TimerEvent) -> bool:
        """Enqueue *event* without waiting.

        Returns False if an older queued event had to be evicted for it.
        """
        if self._closed:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            # Snapshots are full state, so the stale one is the one to lose.
            self._queue.get_nowait()
            self._queue.put_nowait(event)
            self.dropped += 1
            return False
        return True

    def get_nowait(self) -> TimerEvent | None:
        """Return the next queued event, or None if nothing is queued."""
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    async def next(self) -> TimerEvent | None:
        """Wait for the next event.  Returns None once the subscription is closed."""
        if self._closed and self._queue.empty():
            return None
        return await self._queue.get()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # Wake a pending next(); make room for the sentinel if the observer is behind.
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(None)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> TimerEvent:
        event = await self.next()
        if event is None:
            raise StopAsyncIteration
        return event


class EventBroadcaster:
    """Best-effort, non-blocking fan-out of timer events."""

    def __init__(self, queue_size: int = 16) -> None:
        self._queue_size = max(1, int(queue_size))
        self._subscribers: dict[int, Subscription] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        sub = Subscription(self._queue_size)
        self._subscribers[sub.id] = sub
        logger.debug("Observer %s attached (%d total)", sub.id, len(self._subscribers))
        return sub

    def unsubscribe(self, subscription: Subscription) -> None:
        if self._subscribers.pop(subscription.id, None) is None:
            return
        subscription.close()
        logger.debug("Observer %s detached (%d total)", subscription.id, len(self._subscribers))

    def publish(self, snapshot: TimerSnapshot) -> None:
        """Push a state-changed event carrying *snapshot* to every observer."""
        self._fan_out(TimerEvent(EventKind.STATE_CHANGED, snapshot))

    def publish_finished(self) -> None:
        """Push the terminal finished event."""
        self._fan_out(TimerEvent(EventKind.FINISHED))

    def end_session(self) -> None:
        """Tell every observer the session is gone; they stay attached for the next one."""
        self._fan_out(TimerEvent(EventKind.CLOSED))

    def _fan_out(self, event: TimerEvent) -> None:
        for sub in list(self._subscribers.values()):
            if not sub.offer(event):
                logger.debug(
                    "Observer %s is behind; dropped its oldest event for %s",
                    sub.id,
                    event.kind.value,
                )
