"""OpenAI-compatible provider.

Wraps the OpenAI SDK with a configurable base_url. Serves OpenAI
itself, Gemini through Google's OpenAI-compatible endpoint, and Groq.
"""

import json
from typing import Any, AsyncIterator

import openai
from openai import AsyncOpenAI

from t3chat.core.resilience import (
    llm_circuit_breaker,
    llm_retry,
    llm_timeout,
    translate_openai_error,
    wrap_openai_errors,
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

GOOGLE_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class OpenAICompatProvider(BaseLLMProvider):
    """Provider for OpenAI-compatible chat completion APIs."""

    def __init__(
        self,
        api_key: str,
        name: str = "openai",
        base_url: str | None = None,
        max_tokens_param: str = "max_tokens",
        client: AsyncOpenAI | None = None,
    ):
        """
        Initialize provider.

        Args:
            api_key: Vendor API key
            name: Vendor name reported in logs and responses
            base_url: API root, None for the default OpenAI endpoint
            max_tokens_param: Request field carrying the token limit
            client: Preconfigured SDK client (tests)
        """
        self._name = name
        self._max_tokens_param = max_tokens_param
        kwargs: dict[str, Any] = {"api_key": api_key}
        if base_url:
            kwargs["base_url"] = base_url
        self._client = client or AsyncOpenAI(**kwargs)

    @property
    def provider_name(self) -> str:
        return self._name

    @llm_retry
    @llm_circuit_breaker
    @llm_timeout
    @wrap_openai_errors
    async def complete(
        self,
        prompt: str,
        system: str = "",
        model: str = "",
        max_tokens: int = 1024,
        temperature: float | None = 0.0,
    ) -> LLMResponse:
        logger.debug(
            "Calling chat completions",
            provider=self._name,
            model=model,
            prompt_length=len(prompt),
        )

        messages: list[dict[str, Any]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        api_params: dict[str, Any] = {
            "model": model,
            "messages": messages,
            self._max_tokens_param: max_tokens,
        }
        if temperature is not None:
            api_params["temperature"] = temperature

        response = await self._client.chat.completions.create(**api_params)
        choice = response.choices[0]
        usage = response.usage

        return LLMResponse(
            content=choice.message.content or "",
            model=model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            stop_reason=choice.finish_reason or "",
            provider=self._name,
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
            "Starting chat completions stream",
            provider=self._name,
            model=model,
            messages=len(messages),
            tools=[t.name for t in tools or []],
        )

        api_params: dict[str, Any] = {
            "model": model,
            "messages": to_openai_messages(messages, system),
            self._max_tokens_param: max_tokens,
            "stream": True,
        }
        if temperature is not None:
            api_params["temperature"] = temperature
        if tools and tool_choice != "none":
            api_params["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": t.name,
                        "description": t.description,
                        "parameters": t.input_schema,
                    },
                }
                for t in tools
            ]
            api_params["tool_choice"] = tool_choice

        # index -> {"id", "name", "arguments"} accumulated across deltas
        pending: dict[int, dict[str, str]] = {}
        finish_reason: str | None = None

        try:
            response = await self._client.chat.completions.create(**api_params)
            async for chunk in response:
                if not chunk.choices:
                    continue
                choice = chunk.choices[0]
                delta = choice.delta

                if delta is not None and delta.content:
                    yield StreamPart.text_delta(delta.content)

                for call_delta in (delta.tool_calls if delta is not None else None) or []:
                    slot = pending.setdefault(
                        call_delta.index, {"id": "", "name": "", "arguments": ""}
                    )
                    if call_delta.id:
                        slot["id"] = call_delta.id
                    if call_delta.function is not None:
                        if call_delta.function.name:
                            slot["name"] += call_delta.function.name
                        if call_delta.function.arguments:
                            slot["arguments"] += call_delta.function.arguments

                if choice.finish_reason:
                    finish_reason = choice.finish_reason
        except openai.APIError as e:
            translated = translate_openai_error(e)
            if translated is None:
                raise
            raise translated from e

        for index in sorted(pending):
            slot = pending[index]
            yield StreamPart.call(
                ToolCall(
                    id=slot["id"] or f"call_{index}",
                    name=slot["name"],
                    arguments=_parse_arguments(slot["arguments"], slot["name"]),
                )
            )

        yield StreamPart.finish(finish_reason)

    async def close(self) -> None:
        await self._client.close()


def _parse_arguments(raw: str, tool_name: str) -> dict[str, Any]:
    """Decode streamed tool arguments; malformed JSON becomes an empty object."""
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Malformed tool arguments", tool=tool_name, raw=raw[:200])
        return {}
    return parsed if isinstance(parsed, dict) else {}


def to_openai_messages(
    messages: list[ChatMessage], system: str = ""
) -> list[dict[str, Any]]:
    """Convert neutral turns to the chat completions format."""
    converted: list[dict[str, Any]] = []
    if system:
        converted.append({"role": "system", "content": system})

    for message in messages:
        if message.role == "tool":
            converted.append(
                {
                    "role": "tool",
                    "tool_call_id": message.tool_call_id,
                    "content": message.content,
                }
            )
        elif message.role == "assistant" and message.tool_calls:
            converted.append(
                {
                    "role": "assistant",
                    "content": message.content or None,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.name,
                                "arguments": json.dumps(call.arguments),
                            },
                        }
                        for call in message.tool_calls
                    ],
                }
            )
        else:
            converted.append({"role": message.role, "content": message.content})

    return converted
