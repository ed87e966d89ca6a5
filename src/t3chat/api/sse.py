"""SSE stream helpers."""

from typing import AsyncIterator

from t3chat.events.stream import ResponseStream


KEEPALIVE = ": keepalive\n\n"


async def stream_events(
    stream: ResponseStream,
    keepalive: float | None = 15.0,
) -> AsyncIterator[str]:
    """
    Generate SSE frames from a response stream.

    The first caller and every duplicate of it follow the same stream:
    recorded events are replayed, then live ones are forwarded as they
    are emitted. Leaving early never cancels the run behind the stream.

    Args:
        stream: Stream to follow from its first event
        keepalive: Seconds of silence before a keepalive comment

    Yields:
        SSE formatted event strings
    """
    async for event in stream.subscribe(keepalive=keepalive):
        if event is None:
            yield KEEPALIVE
        else:
            yield event.to_sse()
