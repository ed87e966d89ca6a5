"""Event type enumerations."""

from enum import Enum


class EventType(str, Enum):
    """All event types for SSE streaming."""

    # Model output
    RESPONSE_CHUNK = "response.chunk"
    REASONING_CHUNK = "reasoning.chunk"

    # Tool events
    TOOL_START = "tool.start"
    TOOL_COMPLETE = "tool.complete"
    TOOL_ERROR = "tool.error"

    # Synthesis stage progress
    SYNTHESIS = "synthesis"

    # Terminal events
    RESPONSE_DONE = "response.done"
    ERROR = "error"
