"""Centralized resilience patterns using hyx.

Non-streaming model calls (titles, synthesis) go through the full stack:
- Retry with exponential backoff for transient failures
- Circuit breaker to prevent cascade failures
- Timeout to bound operation duration

Streaming calls only get error classification. Once tokens have been
forwarded to a client a retry would duplicate them.

Usage:
    from t3chat.core.resilience import (
        llm_retry,
        llm_circuit_breaker,
        llm_timeout,
        wrap_openai_errors,
    )

    @llm_retry
    @llm_circuit_breaker
    @llm_timeout
    @wrap_openai_errors
    async def call_llm_api(...):
        ...
"""

import asyncio
from functools import wraps
from typing import Any, Callable, TypeVar

import anthropic
import openai
from hyx.circuitbreaker.api import consecutive_breaker
from hyx.circuitbreaker.exceptions import BreakerFailing
from hyx.retry.api import retry
from hyx.retry.backoffs import expo
from hyx.timeout.exceptions import MaxDurationExceeded

# Aliases for clarity
BreakerOpen = BreakerFailing
MaxTimeoutExceeded = MaxDurationExceeded

__all__ = [
    "BreakerOpen",
    "MaxTimeoutExceeded",
    "TransientError",
    "RateLimitError",
    "llm_retry",
    "llm_circuit_breaker",
    "llm_timeout",
    "wrap_anthropic_errors",
    "wrap_openai_errors",
    "classify_http_error",
    "ResilienceConfig",
]


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class TransientError(Exception):
    """Error that is likely to succeed on retry (network issues, timeouts)."""


class RateLimitError(Exception):
    """Error indicating rate limiting (HTTP 429, throttling)."""


# =============================================================================
# CONFIGURATION
# =============================================================================


class ResilienceConfig:
    """Centralized configuration for resilience patterns."""

    LLM_RETRY_ATTEMPTS: int = 3
    LLM_RETRY_BACKOFF_BASE: float = 1.0  # seconds
    LLM_RETRY_BACKOFF_MAX: float = 20.0  # seconds

    LLM_CIRCUIT_FAILURE_THRESHOLD: int = 5
    LLM_CIRCUIT_RECOVERY_TIME: float = 30.0  # seconds
    LLM_CIRCUIT_RECOVERY_THRESHOLD: int = 1

    LLM_TIMEOUT: float = 60.0  # seconds


# =============================================================================
# LLM RESILIENCE PATTERNS
# =============================================================================


llm_retry = retry(
    on=(TransientError, RateLimitError, ConnectionError, TimeoutError),
    attempts=ResilienceConfig.LLM_RETRY_ATTEMPTS,
    backoff=expo(
        min_delay_secs=ResilienceConfig.LLM_RETRY_BACKOFF_BASE,
        max_delay_secs=ResilienceConfig.LLM_RETRY_BACKOFF_MAX,
    ),
)

llm_circuit_breaker = consecutive_breaker(
    exceptions=(TransientError, RateLimitError, ConnectionError),
    failure_threshold=ResilienceConfig.LLM_CIRCUIT_FAILURE_THRESHOLD,
    recovery_time_secs=ResilienceConfig.LLM_CIRCUIT_RECOVERY_TIME,
    recovery_threshold=ResilienceConfig.LLM_CIRCUIT_RECOVERY_THRESHOLD,
)

F = TypeVar("F", bound=Callable[..., Any])


def llm_timeout(func: F) -> F:
    """
    Apply timeout to LLM operations.

    Uses asyncio.wait_for at call time so no timeout manager is created
    before an event loop exists.
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await asyncio.wait_for(
                func(*args, **kwargs),
                timeout=ResilienceConfig.LLM_TIMEOUT,
            )
        except asyncio.TimeoutError:
            raise MaxTimeoutExceeded(
                f"Operation timed out after {ResilienceConfig.LLM_TIMEOUT}s"
            )

    return wrapper  # type: ignore


# =============================================================================
# ERROR CLASSIFICATION
# =============================================================================


def classify_http_error(status_code: int) -> Exception:
    """
    Classify HTTP status codes into appropriate exceptions.

    Args:
        status_code: HTTP status code

    Returns:
        RateLimitError for 429, TransientError for 5xx and 529,
        a plain Exception otherwise
    """
    if status_code == 429:
        return RateLimitError(f"Rate limited (HTTP {status_code})")
    elif status_code >= 500:
        return TransientError(f"Server error (HTTP {status_code})")
    elif status_code >= 400:
        return Exception(f"Client error (HTTP {status_code})")
    return Exception(f"Unknown error (HTTP {status_code})")


def translate_anthropic_error(error: Exception) -> Exception | None:
    """Map an Anthropic SDK error to a resilience-aware exception."""
    if isinstance(error, anthropic.RateLimitError):
        return RateLimitError(f"Anthropic rate limit: {error}")
    if isinstance(error, anthropic.APIConnectionError):
        return TransientError(f"Anthropic connection error: {error}")
    if isinstance(error, anthropic.InternalServerError):
        return TransientError(f"Anthropic server error: {error}")
    if isinstance(error, anthropic.APIStatusError) and error.status_code == 529:
        return TransientError(f"Anthropic overloaded: {error}")
    return None


def translate_openai_error(error: Exception) -> Exception | None:
    """Map an OpenAI SDK error (also used for Gemini and Groq) to a resilience-aware exception."""
    if isinstance(error, openai.RateLimitError):
        return RateLimitError(f"Rate limit: {error}")
    if isinstance(error, openai.APIConnectionError):
        return TransientError(f"Connection error: {error}")
    if isinstance(error, openai.InternalServerError):
        return TransientError(f"Server error: {error}")
    if isinstance(error, openai.APIStatusError) and error.status_code >= 500:
        return classify_http_error(error.status_code)
    return None


def wrap_anthropic_errors(func: F) -> F:
    """Decorator to convert Anthropic API exceptions to resilience-aware exceptions."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except anthropic.APIError as e:
            translated = translate_anthropic_error(e)
            if translated is None:
                raise
            raise translated from e

    return wrapper  # type: ignore


def wrap_openai_errors(func: F) -> F:
    """Decorator to convert OpenAI-compatible API exceptions to resilience-aware exceptions."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except openai.APIError as e:
            translated = translate_openai_error(e)
            if translated is None:
                raise
            raise translated from e

    return wrapper  # type: ignore
