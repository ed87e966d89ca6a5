"""Base interface for LLM providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Literal


@dataclass
class ToolCall:
    """A tool invocation requested by a model."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolSpec:
    """Tool declaration handed to a model."""

    name: str
    description: str
    input_schema: dict[str, Any]


@dataclass
class ChatMessage:
    """
    Provider-neutral conversation turn.

    Assistant turns may carry tool calls; ``tool`` turns carry the
    result for exactly one call, matched by ``tool_call_id``.
    """

    role: Literal["user", "assistant", "tool"]
    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_call_id: str | None = None
    name: str | None = None


class StreamPartType(str, Enum):
    """Kinds of incremental output from a streaming model call."""

    TEXT = "text"
    REASONING = "reasoning"
    TOOL_CALL = "tool_call"
    FINISH = "finish"


@dataclass
class StreamPart:
    """One incremental piece of a streamed model response."""

    type: StreamPartType
    text: str = ""
    tool_call: ToolCall | None = None
    finish_reason: str | None = None

    @classmethod
    def text_delta(cls, text: str) -> "StreamPart":
        return cls(type=StreamPartType.TEXT, text=text)

    @classmethod
    def reasoning_delta(cls, text: str) -> "StreamPart":
        return cls(type=StreamPartType.REASONING, text=text)

    @classmethod
    def call(cls, tool_call: ToolCall) -> "StreamPart":
        return cls(type=StreamPartType.TOOL_CALL, tool_call=tool_call)

    @classmethod
    def finish(cls, reason: str | None) -> "StreamPart":
        return cls(type=StreamPartType.FINISH, finish_reason=reason or "stop")


@dataclass
class LLMResponse:
    """Unified response from any LLM provider."""

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    stop_reason: str = ""
    provider: str = "unknown"


ToolChoice = Literal["auto", "required", "none"]


class BaseLLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    One provider instance serves every model of its vendor; the vendor
    model name is passed per call.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'anthropic', 'openai')."""
        ...

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system: str = "",
        model: str = "",
        max_tokens: int = 1024,
        temperature: float | None = 0.0,
    ) -> LLMResponse:
        """
        Call LLM and get complete response.

        Args:
            prompt: User prompt
            system: System prompt
            model: Vendor model name
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature, None to omit

        Returns:
            LLMResponse with content and metadata
        """
        ...

    @abstractmethod
    def stream(
        self,
        messages: list[ChatMessage],
        system: str = "",
        model: str = "",
        max_tokens: int = 4000,
        temperature: float | None = 0.7,
        tools: list[ToolSpec] | None = None,
        tool_choice: ToolChoice = "auto",
    ) -> AsyncIterator[StreamPart]:
        """
        Stream a conversation turn.

        Args:
            messages: Conversation so far, oldest first
            system: System prompt
            model: Vendor model name
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature, None to omit
            tools: Tools the model may call this turn
            tool_choice: Whether the model must call a tool

        Yields:
            Text and reasoning deltas, then any tool calls, then one
            FINISH part
        """
        ...

    async def close(self) -> None:
        """Release underlying HTTP resources."""
