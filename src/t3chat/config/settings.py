"""Application settings via environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings via environment variables."""

    # Model vendors
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    google_api_key: str = ""
    groq_api_key: str = ""
    default_model: str = "t3-gemini-2-5-flash"
    title_model: str = "t3-4o-mini"

    # Search providers
    tavily_api_key: str = ""
    tavily_base_url: str = "https://api.tavily.com"
    exa_api_key: str = ""
    exa_base_url: str = "https://api.exa.ai"
    youtube_api_key: str = ""
    youtube_api_base_url: str = "https://www.googleapis.com/youtube/v3"

    # Persistence (Convex HTTP API); in-memory when unset
    convex_url: str | None = None
    convex_deploy_key: str | None = None

    # Rate limiting
    rate_limit_requests: int = 10
    rate_limit_window_seconds: float = 60.0
    rate_limit_sweep_seconds: float = 300.0

    # Deduplication bucket; 0 disables merging
    dedupe_window_seconds: float = 1.0

    # Synthesis
    synthesis_max_items: int = 12
    synthesis_item_chars: int = 800

    # Timeouts
    search_timeout_seconds: float = 30.0
    image_validation_timeout_seconds: float = 5.0
    title_timeout_seconds: float = 10.0
    stream_keepalive_seconds: float = 15.0

    # Logging
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
