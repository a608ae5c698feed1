"""SSE Manager — in-process event broadcaster for editor renders and notices."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class _Subscriber:
    queue: asyncio.Queue[str | None]
    session_id: str | None = None


class SSEManager:
    """Manages SSE client connections and broadcasts editor events.

    Each connected client gets its own bounded asyncio.Queue. A client may
    follow a single editor session, in which case it only receives events
    for that session plus session-less notices.
    """

    def __init__(self, max_queue_size: int = 256) -> None:
        self._subscribers: list[_Subscriber] = []
        self._max_queue_size = max_queue_size

    async def subscribe(self, session_id: str | None = None) -> AsyncGenerator[str, None]:
        """Subscribe to SSE events. Yields formatted SSE strings.

        The generator automatically unsubscribes when the client disconnects.
        """
        subscriber = _Subscriber(asyncio.Queue(maxsize=self._max_queue_size), session_id)
        self._subscribers.append(subscriber)
        try:
            while True:
                event = await subscriber.queue.get()
                if event is None:
                    break
                yield event
        finally:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

    async def broadcast(
        self, event_type: str, data: dict[str, Any], session_id: str | None = None
    ) -> int:
        """Broadcast an SSE event; returns the number of clients it reached."""
        sse_message = f"event: {event_type}\ndata: {json.dumps(data, default=str)}\n\n"
        dead: list[_Subscriber] = []
        delivered = 0

        for subscriber in self._subscribers:
            if session_id and subscriber.session_id and subscriber.session_id != session_id:
                continue
            try:
                subscriber.queue.put_nowait(sse_message)
                delivered += 1
            except asyncio.QueueFull:
                dead.append(subscriber)
                logger.warning("SSE client queue full — disconnecting")

        for subscriber in dead:
            self._disconnect(subscriber)
        return delivered

    async def shutdown(self) -> None:
        """Disconnect all connected clients."""
        for subscriber in list(self._subscribers):
            self._disconnect(subscriber)

    def _disconnect(self, subscriber: _Subscriber) -> None:
        # Drop one pending event if needed so the sentinel always fits.
        if subscriber.queue.full():
            subscriber.queue.get_nowait()
        subscriber.queue.put_nowait(None)
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    @property
    def client_count(self) -> int:
        return len(self._subscribers)
