"""Model resolution: opaque model ids to ready-to-call handles.

ProviderRegistry turns a ``t3-*`` model id into a ModelHandle bound to
the vendor provider and vendor model name. Providers are created lazily,
once per vendor, and shared by every handle of that vendor.
"""

from dataclasses import dataclass
from typing import AsyncIterator

from t3chat.config.models import ModelConfig, Vendor, get_model
from t3chat.config.settings import Settings
from t3chat.utils.logging import get_logger
from t3chat.utils.providers import (
    BaseLLMProvider,
    ChatMessage,
    LLMResponse,
    StreamPart,
    StreamPartType,
    ToolSpec,
    create_provider,
)
from t3chat.utils.providers.base import ToolChoice
from t3chat.utils.reasoning import ReasoningExtractor, extract_reasoning


logger = get_logger(__name__)

__all__ = ["ModelHandle", "ProviderRegistry", "LLMResponse"]


@dataclass
class ModelHandle:
    """A resolved model: its registry entry plus the provider serving it."""

    model_id: str
    config: ModelConfig
    provider: BaseLLMProvider

    def _temperature(self, temperature: float | None) -> float | None:
        return temperature if self.config.supports_temperature else None

    async def complete(
        self,
        prompt: str,
        system: str = "",
        max_tokens: int = 1024,
        temperature: float | None = 0.0,
    ) -> LLMResponse:
        """
        Call the model and get a complete response.

        Reasoning spans are stripped from the returned content when the
        model is flagged for extraction.
        """
        response = await self.provider.complete(
            prompt=prompt,
            system=system,
            model=self.config.provider_model,
            max_tokens=max_tokens,
            temperature=self._temperature(temperature),
        )
        if self.config.extract_reasoning:
            response.content, _ = extract_reasoning(response.content)
        return response

    async def stream(
        self,
        messages: list[ChatMessage],
        system: str = "",
        max_tokens: int = 4000,
        temperature: float | None = 0.7,
        tools: list[ToolSpec] | None = None,
        tool_choice: ToolChoice = "auto",
    ) -> AsyncIterator[StreamPart]:
        """Stream one model turn, routing inline reasoning to its own channel."""
        if tools and not self.config.supports_tools:
            logger.warning("Model does not support tools, dropping them", model=self.model_id)
            tools = None

        extractor = ReasoningExtractor() if self.config.extract_reasoning else None

        async for part in self.provider.stream(
            messages=messages,
            system=system,
            model=self.config.provider_model,
            max_tokens=max_tokens,
            temperature=self._temperature(temperature),
            tools=tools,
            tool_choice=tool_choice if tools else "auto",
        ):
            if extractor is None:
                yield part
                continue

            if part.type == StreamPartType.TEXT:
                for extracted in extractor.feed(part.text):
                    yield extracted
            else:
                for extracted in extractor.flush():
                    yield extracted
                yield part


class ProviderRegistry:
    """
    Resolves model ids to handles.

    Usage:
        registry = ProviderRegistry(settings)
        handle = registry.resolve("t3-4o")
        async for part in handle.stream(messages, system=prompt):
            ...
    """

    def __init__(
        self,
        settings: Settings,
        providers: dict[Vendor, BaseLLMProvider] | None = None,
    ):
        """
        Initialize registry.

        Args:
            settings: Application settings holding vendor API keys
            providers: Pre-built providers by vendor, used instead of
                creating them from settings
        """
        self._settings = settings
        self._providers: dict[Vendor, BaseLLMProvider] = dict(providers or {})

    def resolve(self, model_id: str) -> ModelHandle:
        """
        Resolve a model id.

        Args:
            model_id: Opaque ``t3-*`` model id

        Returns:
            ModelHandle ready to call

        Raises:
            ConfigurationError: Unknown model id or vendor key missing
        """
        config = get_model(model_id)
        provider = self._providers.get(config.vendor)
        if provider is None:
            provider = create_provider(config.vendor, self._settings)
            self._providers[config.vendor] = provider
            logger.info("Provider initialized", vendor=config.vendor.value)
        return ModelHandle(model_id=model_id, config=config, provider=provider)

    async def close(self) -> None:
        """Close every provider created so far."""
        for provider in self._providers.values():
            await provider.close()
        self._providers.clear()
