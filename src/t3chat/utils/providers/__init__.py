"""LLM provider implementations.

Supports multiple vendors behind a unified interface:
- Anthropic: Direct API access to Claude models
- OpenAI: GPT and o-series models
- Google: Gemini through the OpenAI-compatible endpoint
- Groq: hosted open models through the OpenAI-compatible endpoint

Usage:
    from t3chat.utils.providers import create_provider

    provider = create_provider(Vendor.ANTHROPIC, settings)
"""

from t3chat.config.models import Vendor
from t3chat.config.settings import Settings
from t3chat.core.exceptions import ConfigurationError
from t3chat.utils.providers.anthropic import AnthropicProvider
from t3chat.utils.providers.base import (
    BaseLLMProvider,
    ChatMessage,
    LLMResponse,
    StreamPart,
    StreamPartType,
    ToolCall,
    ToolSpec,
)
from t3chat.utils.providers.openai_compat import (
    GOOGLE_BASE_URL,
    GROQ_BASE_URL,
    OpenAICompatProvider,
)

# Vendor -> (settings attribute, environment variable)
API_KEY_SETTINGS: dict[Vendor, tuple[str, str]] = {
    Vendor.OPENAI: ("openai_api_key", "OPENAI_API_KEY"),
    Vendor.ANTHROPIC: ("anthropic_api_key", "ANTHROPIC_API_KEY"),
    Vendor.GOOGLE: ("google_api_key", "GOOGLE_API_KEY"),
    Vendor.GROQ: ("groq_api_key", "GROQ_API_KEY"),
}


def create_provider(vendor: Vendor, settings: Settings) -> BaseLLMProvider:
    """
    Factory function to create the provider serving a vendor.

    Args:
        vendor: Model vendor
        settings: Application settings holding API keys

    Returns:
        Configured LLM provider instance

    Raises:
        ConfigurationError: If the vendor's API key is not configured
    """
    attribute, env_var = API_KEY_SETTINGS[vendor]
    api_key = getattr(settings, attribute)
    if not api_key:
        raise ConfigurationError(
            f"{vendor.value} API key not configured. Set {env_var} environment variable.",
            setting=attribute,
        )

    if vendor == Vendor.ANTHROPIC:
        return AnthropicProvider(api_key=api_key)
    if vendor == Vendor.OPENAI:
        return OpenAICompatProvider(
            api_key=api_key,
            name="openai",
            max_tokens_param="max_completion_tokens",
        )
    if vendor == Vendor.GOOGLE:
        return OpenAICompatProvider(api_key=api_key, name="google", base_url=GOOGLE_BASE_URL)
    return OpenAICompatProvider(api_key=api_key, name="groq", base_url=GROQ_BASE_URL)


__all__ = [
    "API_KEY_SETTINGS",
    "AnthropicProvider",
    "BaseLLMProvider",
    "ChatMessage",
    "LLMResponse",
    "OpenAICompatProvider",
    "StreamPart",
    "StreamPartType",
    "ToolCall",
    "ToolSpec",
    "create_provider",
]
