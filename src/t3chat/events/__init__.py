"""Event system for SSE streaming."""

from t3chat.events.models import (
    ErrorEvent,
    Event,
    ReasoningChunkEvent,
    ResponseChunkEvent,
    ResponseDoneEvent,
    SynthesisEvent,
    ToolCompleteEvent,
    ToolErrorEvent,
    ToolStartEvent,
)
from t3chat.events.stream import ResponseStream
from t3chat.events.types import EventType

__all__ = [
    "EventType",
    "Event",
    # Model output
    "ResponseChunkEvent",
    "ReasoningChunkEvent",
    # Tool events
    "ToolStartEvent",
    "ToolCompleteEvent",
    "ToolErrorEvent",
    # Synthesis
    "SynthesisEvent",
    # Terminal
    "ResponseDoneEvent",
    "ErrorEvent",
    "ResponseStream",
]
