"""
Event Broker

In-process publish/subscribe hub that pushes change notifications to live
client connections as Server-Sent Events.

Design Principles:
- One broker per process, created in the FastAPI lifespan and injected into
  handlers via ``get_event_broker`` (no module-level registry)
- Broadcast only: no replay, no acknowledgement, no retry
- Payloads are hints (student number, entity id, status); clients re-fetch
- A failing subscriber never blocks delivery to the others and never fails
  the publishing handler
- Subscribers are removed only by their own connection teardown

Concurrency:
- All access happens on the single asyncio event loop, so the subscriber map
  is not locked
- ``publish`` is synchronous and delivers in registration order
"""

import asyncio
import contextlib
import enum
import json
import logging
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from fastapi import Request

logger = logging.getLogger(__name__)

DEFAULT_HEARTBEAT_SECONDS = 25.0
DEFAULT_QUEUE_SIZE = 100


class EventType(str, enum.Enum):
    """Event names emitted on the live update channel."""

    REQUEST_CREATED = "request-created"
    REQUEST_UPDATED = "request-updated"
    STUDENT_CREATED = "student-created"
    STUDENT_UPDATED = "student-updated"
    PING = "ping"


def format_sse(event_type: str, payload: dict[str, Any] | None = None) -> str:
    """Render one SSE frame: ``event: <type>\\ndata: <json>\\n\\n``."""
    data = json.dumps(payload or {}, default=str)
    return f"event: {event_type}\ndata: {data}\n\n"


PING_FRAME = format_sse(EventType.PING.value)


@dataclass
class Subscriber:
    """A registered push target."""

    connection_id: str
    write: Callable[[str], None]
    close: Callable[[], None] | None = None


_CLOSED = object()


class EventBroker:
    """Fan-out of change events to every connected client."""

    def __init__(
        self,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_SECONDS,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ):
        self.heartbeat_interval = heartbeat_interval
        self.queue_size = queue_size
        self._subscribers: dict[str, Subscriber] = {}
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(
        self,
        connection_id: str,
        write: Callable[[str], None],
        close: Callable[[], None] | None = None,
    ) -> None:
        """
        Register a push target.

        Re-subscribing an existing id replaces its callbacks and keeps its
        position in the delivery order.
        """
        self._subscribers[connection_id] = Subscriber(connection_id, write, close)
        logger.debug(f"Subscriber {connection_id} registered ({self.subscriber_count} total)")

    def unsubscribe(self, connection_id: str) -> None:
        """Remove a push target. Unknown ids are ignored."""
        if self._subscribers.pop(connection_id, None) is not None:
            logger.debug(f"Subscriber {connection_id} removed ({self.subscriber_count} total)")

    def publish(self, event_type: EventType | str, payload: dict[str, Any] | None = None) -> int:
        """
        Send an event to every currently registered subscriber.

        Args:
            event_type: Event name from the catalog
            payload: Small hint dict; serialized as JSON

        Returns:
            Number of subscribers the frame was written to
        """
        name = event_type.value if isinstance(event_type, EventType) else event_type
        frame = format_sse(name, payload)
        delivered = 0

        # Snapshot so a write callback that unsubscribes cannot break iteration
        for subscriber in list(self._subscribers.values()):
            try:
                subscriber.write(frame)
                delivered += 1
            except Exception as e:
                logger.warning(
                    f"Failed to deliver '{name}' to subscriber {subscriber.connection_id}: {e}"
                )

        logger.debug(f"Published '{name}' to {delivered}/{self.subscriber_count} subscribers")
        return delivered

    def close(self) -> None:
        """Signal every subscriber to finish and drop them all."""
        self._closed = True
        subscribers = list(self._subscribers.values())
        self._subscribers.clear()

        for subscriber in subscribers:
            if subscriber.close is None:
                continue
            try:
                subscriber.close()
            except Exception as e:
                logger.warning(f"Error closing subscriber {subscriber.connection_id}: {e}")

        logger.info(f"Event broker closed ({len(subscribers)} subscribers drained)")

    async def stream(
        self,
        connection_id: str | None = None,
        is_disconnected: Callable[[], Awaitable[bool]] | None = None,
    ) -> AsyncIterator[str]:
        """
        Yield SSE frames for one live connection.

        Emits an initial ping, then published frames as they arrive and a ping
        every ``heartbeat_interval`` seconds regardless of traffic. The subscription is
        removed when the client disconnects, the generator is cancelled or the
        broker closes.

        Args:
            connection_id: Id for this connection (generated when omitted)
            is_disconnected: Optional coroutine reporting client disconnect,
                checked on every heartbeat
        """
        connection_id = connection_id or str(uuid.uuid4())
        queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=self.queue_size)

        def _signal_close() -> None:
            with contextlib.suppress(asyncio.QueueFull):
                queue.put_nowait(_CLOSED)

        if self._closed:
            return

        self.subscribe(connection_id, queue.put_nowait, _signal_close)

        loop = asyncio.get_running_loop()

        try:
            yield PING_FRAME
            next_ping = loop.time() + self.heartbeat_interval

            while True:
                timeout = max(0.0, next_ping - loop.time())
                try:
                    item = await asyncio.wait_for(queue.get(), timeout=timeout)
                except TimeoutError:
                    item = None

                if item is _CLOSED:
                    break
                if item is not None:
                    yield item

                # Heartbeat runs on its own clock, traffic does not postpone it
                if loop.time() >= next_ping:
                    if self._closed:
                        break
                    if is_disconnected is not None and await is_disconnected():
                        logger.debug(f"Client {connection_id} disconnected")
                        break
                    yield PING_FRAME
                    next_ping = loop.time() + self.heartbeat_interval
        finally:
            self.unsubscribe(connection_id)


def get_event_broker(request: Request) -> EventBroker:
    """
    FastAPI dependency returning the process-wide broker.

    The broker is created by the application lifespan and stored on
    ``app.state``.
    """
    return request.app.state.event_broker
