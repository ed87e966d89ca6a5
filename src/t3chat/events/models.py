"""Event data models."""

import json
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from .types import EventType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Event(BaseModel):
    """Base event model."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: EventType
    timestamp: datetime = Field(default_factory=_utcnow)
    request_id: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        return json.dumps(
            {
                "id": self.id,
                "type": self.event_type.value,
                "timestamp": self.timestamp.isoformat(),
                "request_id": self.request_id,
                "data": self.data,
            },
            default=str,
        )

    def to_sse(self) -> str:
        """Format event for SSE stream."""
        return f"event: {self.event_type.value}\ndata: {self.to_json()}\n\n"


class ResponseChunkEvent(Event):
    """A piece of the assistant's answer text."""

    @classmethod
    def create(cls, content: str, request_id: str | None = None) -> "ResponseChunkEvent":
        return cls(
            event_type=EventType.RESPONSE_CHUNK,
            request_id=request_id,
            data={"content": content},
        )


class ReasoningChunkEvent(Event):
    """A piece of the model's reasoning, kept apart from the answer."""

    @classmethod
    def create(cls, content: str, request_id: str | None = None) -> "ReasoningChunkEvent":
        return cls(
            event_type=EventType.REASONING_CHUNK,
            request_id=request_id,
            data={"content": content},
        )


class ToolStartEvent(Event):
    """Tool invocation started."""

    @classmethod
    def create(
        cls,
        tool: str,
        call_id: str,
        arguments: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> "ToolStartEvent":
        return cls(
            event_type=EventType.TOOL_START,
            request_id=request_id,
            data={"tool": tool, "call_id": call_id, "arguments": arguments or {}},
        )


class ToolCompleteEvent(Event):
    """Tool invocation finished with a result payload."""

    @classmethod
    def create(
        cls,
        tool: str,
        call_id: str,
        result: dict[str, Any],
        request_id: str | None = None,
    ) -> "ToolCompleteEvent":
        return cls(
            event_type=EventType.TOOL_COMPLETE,
            request_id=request_id,
            data={"tool": tool, "call_id": call_id, "result": result},
        )


class ToolErrorEvent(Event):
    """Tool invocation failed; the model sees the error as the tool's output."""

    @classmethod
    def create(
        cls,
        tool: str,
        call_id: str,
        error: str,
        error_type: str = "tool_error",
        request_id: str | None = None,
    ) -> "ToolErrorEvent":
        return cls(
            event_type=EventType.TOOL_ERROR,
            request_id=request_id,
            data={
                "tool": tool,
                "call_id": call_id,
                "error": error,
                "error_type": error_type,
            },
        )


class SynthesisEvent(Event):
    """Progress of the synthesis stage: starting, completed or error."""

    @classmethod
    def create(
        cls,
        status: str,
        message: str,
        key_points: list[str] | None = None,
        summary: str | None = None,
        request_id: str | None = None,
    ) -> "SynthesisEvent":
        data: dict[str, Any] = {"status": status, "message": message}
        if key_points is not None:
            data["keyPoints"] = key_points
        if summary is not None:
            data["summary"] = summary
        return cls(event_type=EventType.SYNTHESIS, request_id=request_id, data=data)


class ResponseDoneEvent(Event):
    """Stream finished. Always the last event."""

    @classmethod
    def create(
        cls,
        request_id: str | None = None,
        finish_reason: str = "stop",
        rounds: int = 0,
    ) -> "ResponseDoneEvent":
        return cls(
            event_type=EventType.RESPONSE_DONE,
            request_id=request_id,
            data={"finish_reason": finish_reason, "rounds": rounds},
        )


class ErrorEvent(Event):
    """In-band error after streaming has started."""

    @classmethod
    def create(
        cls,
        error: str,
        error_type: str = "unknown",
        recoverable: bool = False,
        request_id: str | None = None,
    ) -> "ErrorEvent":
        return cls(
            event_type=EventType.ERROR,
            request_id=request_id,
            data={
                "error": error,
                "error_type": error_type,
                "recoverable": recoverable,
            },
        )
