"""Outbound event port and the default log-backed implementation."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable

import structlog

from trivia_judge.models import SessionEvent
from trivia_judge.services.storage import EventRepository

logger = structlog.get_logger()


@runtime_checkable
class EventSink(Protocol):
    """Protocol for event emission.

    The engine calls ``emit`` after every state change; how events reach
    clients (sockets, polling, a message bus) is up to the implementation.
    """

    async def emit(
        self, session_id: str, event_type: str, payload: dict[str, Any]
    ) -> SessionEvent | None:
        """Record and publish one event.

        Args:
            session_id: Session the event belongs to.
            event_type: One of ``EventType``.
            payload: JSON-serializable event data.

        Returns:
            The stored event, if the sink keeps a log.
        """
        ...


class Subscription:
    """Live event feed for one session.

    Iterate with ``async for``; iteration ends after ``close()``. Events
    published while the buffer is full are dropped for this subscriber only.
    """

    _CLOSED = object()

    def __init__(self, log: EventLog, session_id: str, maxsize: int) -> None:
        self.session_id = session_id
        self._log = log
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)
        self.closed = False
        self.dropped = 0

    def _offer(self, event: SessionEvent) -> None:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "subscriber_queue_full",
                session_id=self.session_id,
                event_type=event.event_type,
                sequence=event.sequence,
            )

    async def get(self) -> SessionEvent:
        """Wait for the next event."""
        item = await self._queue.get()
        if item is self._CLOSED:
            self._queue.put_nowait(item)
            raise StopAsyncIteration
        return item

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._log._unsubscribe(self)
        # Wake up a pending reader even when the buffer is full.
        while self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(self._CLOSED)

    def __aiter__(self) -> AsyncIterator[SessionEvent]:
        return self

    async def __anext__(self) -> SessionEvent:
        return await self.get()

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        self.close()


class EventLog:
    """Append-only event log with fire-and-forget fan-out.

    Every event is persisted first, then offered to the live subscribers of
    its session. Subscribers that were not connected never see it and must
    reconcile through ``replay`` or a snapshot.
    """

    def __init__(self, repository: EventRepository, queue_size: int = 100) -> None:
        self._repository = repository
        self._queue_size = queue_size
        self._subscribers: dict[str, list[Subscription]] = defaultdict(list)

    async def emit(
        self, session_id: str, event_type: str, payload: dict[str, Any]
    ) -> SessionEvent:
        event = await self._repository.append(session_id, str(event_type), payload)
        logger.debug(
            "event_emitted",
            session_id=session_id,
            event_type=event.event_type,
            sequence=event.sequence,
        )
        for subscription in list(self._subscribers.get(session_id, ())):
            subscription._offer(event)
        return event

    def subscribe(self, session_id: str) -> Subscription:
        """Start receiving events of a session from now on."""
        subscription = Subscription(self, session_id, self._queue_size)
        self._subscribers[session_id].append(subscription)
        return subscription

    def subscriber_count(self, session_id: str) -> int:
        return len(self._subscribers.get(session_id, ()))

    async def replay(self, session_id: str, after: int | None = None) -> list[SessionEvent]:
        """Stored events of a session, optionally after a sequence number."""
        return await self._repository.events_for(session_id, after)

    def _unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscribers.get(subscription.session_id)
        if subscribers and subscription in subscribers:
            subscribers.remove(subscription)
            if not subscribers:
                del self._subscribers[subscription.session_id]
