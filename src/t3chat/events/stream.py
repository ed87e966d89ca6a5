"""Replayable event stream for one orchestrated response.

A ResponseStream records every event it is given. Any number of readers
can subscribe at any time; each reader first receives the events
recorded so far and then follows live events until the stream closes.
Duplicate requests share one ResponseStream, so a late duplicate sees
the same sequence of events as the first caller.
"""

import asyncio
from typing import AsyncIterator

from .models import Event
from .types import EventType


class ResponseStream:
    """Append-only, multi-reader event log."""

    def __init__(self, request_id: str):
        self.request_id = request_id
        self._events: list[Event] = []
        self._closed = False
        self._condition = asyncio.Condition()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def events(self) -> list[Event]:
        """Snapshot of the events recorded so far."""
        return list(self._events)

    @property
    def text(self) -> str:
        """Answer text streamed so far."""
        return "".join(
            event.data.get("content", "")
            for event in self._events
            if event.event_type == EventType.RESPONSE_CHUNK
        )

    async def emit(self, event: Event) -> None:
        """Record an event and wake every reader. Ignored after close."""
        async with self._condition:
            if self._closed:
                return
            if event.request_id is None:
                event.request_id = self.request_id
            self._events.append(event)
            self._condition.notify_all()

    async def close(self) -> None:
        """Mark the stream finished. Idempotent."""
        async with self._condition:
            self._closed = True
            self._condition.notify_all()

    async def subscribe(
        self, keepalive: float | None = None
    ) -> AsyncIterator[Event | None]:
        """
        Iterate over recorded and future events.

        Args:
            keepalive: Seconds to wait for a new event before yielding
                None so the caller can send a keepalive frame

        Yields:
            Events in order, or None on a keepalive timeout
        """
        index = 0
        while True:
            timed_out = False
            async with self._condition:
                if index >= len(self._events) and not self._closed:
                    try:
                        await asyncio.wait_for(
                            self._condition.wait_for(
                                lambda: index < len(self._events) or self._closed
                            ),
                            timeout=keepalive,
                        )
                    except asyncio.TimeoutError:
                        timed_out = True
                batch = self._events[index:]
                index += len(batch)
                finished = self._closed and index >= len(self._events)

            for event in batch:
                yield event
            if finished:
                return
            if timed_out and not batch:
                yield None
