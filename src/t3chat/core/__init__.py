"""Core domain modules."""

from t3chat.core.exceptions import (
    ConfigurationError,
    PersistenceError,
    RateLimitExceeded,
    T3ChatError,
    ToolArgumentError,
    ToolError,
    ToolExecutionError,
    UnknownToolError,
)

__all__ = [
    "ConfigurationError",
    "PersistenceError",
    "RateLimitExceeded",
    "T3ChatError",
    "ToolArgumentError",
    "ToolError",
    "ToolExecutionError",
    "UnknownToolError",
]
