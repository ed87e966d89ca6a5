"""Model configuration and registry.

Maps the opaque ``t3-*`` model identifiers exposed to clients onto a
vendor and the vendor's own model name. Identifiers are stable; the
vendor models behind them can change without clients noticing.
"""

from dataclasses import dataclass
from enum import Enum

from t3chat.core.exceptions import ConfigurationError


class Vendor(str, Enum):
    """Model vendors reachable through a provider client."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    GROQ = "groq"


@dataclass(frozen=True)
class ModelConfig:
    """Configuration for a single model id."""

    id: str
    vendor: Vendor
    provider_model: str

    # Move <think>...</think> spans out of the text channel
    extract_reasoning: bool = False

    # Reasoning models (o1, o3) reject a temperature parameter
    supports_temperature: bool = True
    supports_tools: bool = True


def _model(
    model_id: str,
    vendor: Vendor,
    provider_model: str,
    **kwargs,
) -> tuple[str, ModelConfig]:
    return model_id, ModelConfig(
        id=model_id, vendor=vendor, provider_model=provider_model, **kwargs
    )


class ModelRegistry:
    """Registry of available models."""

    MODELS: dict[str, ModelConfig] = dict(
        [
            # Default and core models
            _model("t3-default", Vendor.GOOGLE, "gemini-2.5-flash"),
            # OpenAI
            _model("t3-4o", Vendor.OPENAI, "gpt-4o"),
            _model("t3-4o-mini", Vendor.OPENAI, "gpt-4o-mini"),
            _model("t3-o1", Vendor.OPENAI, "o1", supports_temperature=False),
            _model(
                "t3-o1-mini",
                Vendor.OPENAI,
                "o1-mini",
                supports_temperature=False,
                supports_tools=False,
            ),
            _model("t3-o3-mini", Vendor.OPENAI, "o3-mini", supports_temperature=False),
            _model("t3-gpt-4-turbo", Vendor.OPENAI, "gpt-4-turbo"),
            # Anthropic
            _model("t3-claude-3-5-sonnet", Vendor.ANTHROPIC, "claude-3-5-sonnet-20241022"),
            _model("t3-claude-3-5-haiku", Vendor.ANTHROPIC, "claude-3-5-haiku-20241022"),
            _model("t3-claude-3-opus", Vendor.ANTHROPIC, "claude-3-opus-20240229"),
            _model("t3-anthropic", Vendor.ANTHROPIC, "claude-3-5-sonnet-20241022"),
            _model("t3-anthropic-best", Vendor.ANTHROPIC, "claude-3-opus-20240229"),
            # Google
            _model("t3-gemini-2-5-flash", Vendor.GOOGLE, "gemini-2.5-flash"),
            _model("t3-gemini-2-0-flash", Vendor.GOOGLE, "gemini-2.0-flash"),
            _model("t3-gemini-1-5-flash", Vendor.GOOGLE, "gemini-1.5-flash"),
            _model("t3-gemini-1-5-pro", Vendor.GOOGLE, "gemini-1.5-pro"),
            _model("t3-google", Vendor.GOOGLE, "gemini-2.5-flash"),
            _model("t3-google-pro", Vendor.GOOGLE, "gemini-1.5-pro"),
            # Groq
            _model("t3-llama-3-3-70b", Vendor.GROQ, "llama-3.3-70b-versatile"),
            _model(
                "t3-deepseek-r1",
                Vendor.GROQ,
                "deepseek-r1-distill-llama-70b",
                extract_reasoning=True,
            ),
            # Reasoning specialists
            _model("t3-reasoning-best", Vendor.ANTHROPIC, "claude-3-5-sonnet-20241022"),
            _model("t3-reasoning-fast", Vendor.OPENAI, "o3-mini", supports_temperature=False),
            _model("t3-reasoning-deep", Vendor.OPENAI, "o1", supports_temperature=False),
            # Vision specialists
            _model("t3-vision-best", Vendor.ANTHROPIC, "claude-3-opus-20240229"),
            _model("t3-vision-fast", Vendor.GOOGLE, "gemini-2.0-flash"),
            # Coding specialists
            _model("t3-code-best", Vendor.ANTHROPIC, "claude-3-5-sonnet-20241022"),
            _model("t3-code-fast", Vendor.OPENAI, "gpt-4o-mini"),
            _model("t3-code-reasoning", Vendor.ANTHROPIC, "claude-3-5-sonnet-20241022"),
            # Fast models
            _model("t3-fast", Vendor.OPENAI, "gpt-4o-mini"),
            _model("t3-fast-haiku", Vendor.ANTHROPIC, "claude-3-5-haiku-20241022"),
            _model("t3-fast-flash", Vendor.GOOGLE, "gemini-2.5-flash"),
            # Multimodal
            _model("t3-multimodal-best", Vendor.ANTHROPIC, "claude-3-opus-20240229"),
            _model("t3-multimodal-google", Vendor.GOOGLE, "gemini-1.5-pro"),
            _model("t3-multimodal-openai", Vendor.OPENAI, "gpt-4o"),
        ]
    )

    @classmethod
    def get(cls, model_id: str) -> ModelConfig | None:
        """Get model config by id."""
        return cls.MODELS.get(model_id)

    @classmethod
    def list_models(cls) -> list[str]:
        """List all model ids."""
        return list(cls.MODELS.keys())

    @classmethod
    def list_by_vendor(cls, vendor: Vendor) -> list[ModelConfig]:
        """List models served by a vendor."""
        return [m for m in cls.MODELS.values() if m.vendor == vendor]


def get_model(model_id: str) -> ModelConfig:
    """
    Get model configuration, raising if not found.

    Args:
        model_id: Opaque ``t3-*`` model id

    Returns:
        ModelConfig

    Raises:
        ConfigurationError: If the model id is not registered
    """
    config = ModelRegistry.get(model_id)
    if config is None:
        raise ConfigurationError(
            f"Unknown model: {model_id}. "
            f"Available: {', '.join(ModelRegistry.list_models())}"
        )
    return config
