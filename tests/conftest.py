"""Pytest fixtures for testing."""

import json
from typing import Any, AsyncIterator, Callable

import httpx
import pytest
import pytest_asyncio

from t3chat.config.models import Vendor
from t3chat.config.settings import Settings
from t3chat.events.stream import ResponseStream
from t3chat.tools import register_tools
from t3chat.utils.llm import ProviderRegistry
from t3chat.utils.providers.base import (
    BaseLLMProvider,
    ChatMessage,
    LLMResponse,
    StreamPart,
    ToolCall,
    ToolSpec,
)


register_tools()


class FakeProvider(BaseLLMProvider):
    """
    Scripted LLM provider.

    Each ``stream`` call replays the next scripted turn. A turn is a list
    of StreamParts; an Exception in the list is raised at that point.
    ``complete`` answers through ``complete_handler(prompt, system)``.
    """

    def __init__(
        self,
        turns: list[list[Any]] | None = None,
        complete_handler: Callable[[str, str], str] | None = None,
    ):
        self.turns = list(turns or [])
        self.complete_handler = complete_handler
        self.stream_calls: list[dict[str, Any]] = []
        self.complete_calls: list[dict[str, Any]] = []
        self.closed = False

    @property
    def provider_name(self) -> str:
        return "fake"

    async def complete(
        self,
        prompt: str,
        system: str = "",
        model: str = "",
        max_tokens: int = 1024,
        temperature: float | None = 0.0,
    ) -> LLMResponse:
        self.complete_calls.append(
            {"prompt": prompt, "system": system, "model": model, "temperature": temperature}
        )
        content = self.complete_handler(prompt, system) if self.complete_handler else "Fake title"
        return LLMResponse(content=content, model=model, provider="fake")

    async def stream(
        self,
        messages: list[ChatMessage],
        system: str = "",
        model: str = "",
        max_tokens: int = 4000,
        temperature: float | None = 0.7,
        tools: list[ToolSpec] | None = None,
        tool_choice: str = "auto",
    ) -> AsyncIterator[StreamPart]:
        self.stream_calls.append(
            {
                "messages": list(messages),
                "system": system,
                "model": model,
                "temperature": temperature,
                "tools": [t.name for t in tools or []],
                "tool_choice": tool_choice,
            }
        )
        turn = self.turns.pop(0) if self.turns else [StreamPart.text_delta("ok")]
        for part in turn:
            if isinstance(part, Exception):
                raise part
            yield part
        yield StreamPart.finish("stop")

    async def close(self) -> None:
        self.closed = True


def text_turn(*chunks: str) -> list[StreamPart]:
    """A scripted turn that only streams text."""
    return [StreamPart.text_delta(chunk) for chunk in chunks]


def tool_turn(name: str, arguments: dict[str, Any], call_id: str = "call_1") -> list[StreamPart]:
    """A scripted turn that requests one tool call."""
    return [StreamPart.call(ToolCall(id=call_id, name=name, arguments=arguments))]


def synthesis_json(report: str = "France's capital is Paris.") -> str:
    return json.dumps(
        {
            "synthesized_report": report,
            "key_points": ["Paris is the capital", "It is the largest city"],
            "summary": "Paris.",
        }
    )


def parse_sse(body: str) -> list[dict[str, Any]]:
    """Decode an SSE body into event payloads, skipping comments."""
    events = []
    for frame in body.split("\n\n"):
        data = [line[len("data: "):] for line in frame.splitlines() if line.startswith("data: ")]
        if data:
            events.append(json.loads("".join(data)))
    return events


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        _env_file=None,
        openai_api_key="test-openai",
        anthropic_api_key="test-anthropic",
        google_api_key="test-google",
        groq_api_key="test-groq",
        tavily_api_key="test-tavily",
        exa_api_key="test-exa",
        youtube_api_key="test-youtube",
        log_level="DEBUG",
    )


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def provider_registry(settings: Settings, fake_provider: FakeProvider) -> ProviderRegistry:
    """Registry whose every vendor is served by the same fake provider."""
    return ProviderRegistry(settings, providers={vendor: fake_provider for vendor in Vendor})


@pytest.fixture
def mock_http() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Factory for an httpx client backed by a handler function."""

    def make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return make


@pytest_asyncio.fixture
async def response_stream() -> ResponseStream:
    return ResponseStream("test-req-456")
