"""Anthropic direct API provider.

Resilience patterns applied:
- Retry with exponential backoff for transient failures
- Circuit breaker to prevent cascade failures to overloaded API
- Timeout to bound operation duration

Streaming calls are only error-classified.
"""

from typing import Any, AsyncIterator

import anthropic
from anthropic import AsyncAnthropic

from t3chat.core.resilience import (
    llm_circuit_breaker,
    llm_retry,
    llm_timeout,
    translate_anthropic_error,
    wrap_anthropic_errors,
)
from t3chat.utils.logging import get_logger
from t3chat.utils.providers.base import (
    BaseLLMProvider,
    ChatMessage,
    LLMResponse,
    StreamPart,
    ToolCall,
    ToolChoice,
    ToolSpec,
)


logger = get_logger(__name__)


class AnthropicProvider(BaseLLMProvider):
    """
    Direct Anthropic API provider.

    Uses the official Anthropic Python SDK. Extended thinking deltas are
    surfaced on the reasoning channel.
    """

    def __init__(self, api_key: str, client: AsyncAnthropic | None = None):
        """
        Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            client: Preconfigured SDK client (tests)
        """
        self._client = client or AsyncAnthropic(api_key=api_key)

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @llm_retry
    @llm_circuit_breaker
    @llm_timeout
    @wrap_anthropic_errors
    async def complete(
        self,
        prompt: str,
        system: str = "",
        model: str = "",
        max_tokens: int = 1024,
        temperature: float | None = 0.0,
    ) -> LLMResponse:
        logger.debug(
            "Calling Anthropic API",
            model=model,
            prompt_length=len(prompt),
            system_length=len(system),
        )

        api_params: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            api_params["system"] = system
        if temperature is not None:
            api_params["temperature"] = temperature

        response = await self._client.messages.create(**api_params)

        content = "".join(
            block.text for block in response.content if block.type == "text"
        )

        logger.debug(
            "Anthropic response received",
            model=model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason,
        )

        return LLMResponse(
            content=content,
            model=model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason or "",
            provider=self.provider_name,
        )

    async def stream(
        self,
        messages: list[ChatMessage],
        system: str = "",
        model: str = "",
        max_tokens: int = 4000,
        temperature: float | None = 0.7,
        tools: list[ToolSpec] | None = None,
        tool_choice: ToolChoice = "auto",
    ) -> AsyncIterator[StreamPart]:
        logger.debug(
            "Starting Anthropic stream",
            model=model,
            messages=len(messages),
            tools=[t.name for t in tools or []],
        )

        api_params: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": to_anthropic_messages(messages),
        }
        if system:
            api_params["system"] = system
        if temperature is not None:
            api_params["temperature"] = temperature
        if tools and tool_choice != "none":
            api_params["tools"] = [
                {
                    "name": t.name,
                    "description": t.description,
                    "input_schema": t.input_schema,
                }
                for t in tools
            ]
            api_params["tool_choice"] = (
                {"type": "any"} if tool_choice == "required" else {"type": "auto"}
            )

        try:
            async with self._client.messages.stream(**api_params) as stream:
                async for event in stream:
                    if event.type != "content_block_delta":
                        continue
                    if event.delta.type == "text_delta":
                        yield StreamPart.text_delta(event.delta.text)
                    elif event.delta.type == "thinking_delta":
                        yield StreamPart.reasoning_delta(event.delta.thinking)

                final = await stream.get_final_message()
        except anthropic.APIError as e:
            translated = translate_anthropic_error(e)
            if translated is None:
                raise
            raise translated from e

        for block in final.content:
            if block.type == "tool_use":
                yield StreamPart.call(
                    ToolCall(id=block.id, name=block.name, arguments=dict(block.input or {}))
                )

        yield StreamPart.finish(final.stop_reason)

    async def close(self) -> None:
        await self._client.close()


def to_anthropic_messages(messages: list[ChatMessage]) -> list[dict[str, Any]]:
    """
    Convert neutral turns to the Anthropic messages format.

    Consecutive tool turns collapse into one user turn of
    ``tool_result`` blocks, as the API requires.
    """
    converted: list[dict[str, Any]] = []

    for message in messages:
        if message.role == "tool":
            block = {
                "type": "tool_result",
                "tool_use_id": message.tool_call_id,
                "content": message.content,
            }
            previous = converted[-1] if converted else None
            if (
                previous
                and previous["role"] == "user"
                and isinstance(previous["content"], list)
                and previous["content"]
                and previous["content"][0].get("type") == "tool_result"
            ):
                previous["content"].append(block)
            else:
                converted.append({"role": "user", "content": [block]})
            continue

        if message.role == "assistant" and message.tool_calls:
            blocks: list[dict[str, Any]] = []
            if message.content:
                blocks.append({"type": "text", "text": message.content})
            for call in message.tool_calls:
                blocks.append(
                    {
                        "type": "tool_use",
                        "id": call.id,
                        "name": call.name,
                        "input": call.arguments,
                    }
                )
            converted.append({"role": "assistant", "content": blocks})
            continue

        converted.append({"role": message.role, "content": message.content})

    return converted
