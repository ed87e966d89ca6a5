"""Domain exceptions for the search router."""


class T3ChatError(Exception):
    """Base exception for all search router errors."""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable


class ConfigurationError(T3ChatError):
    """A model, vendor or tool cannot be used with the current settings."""

    def __init__(self, message: str, setting: str | None = None):
        super().__init__(message, recoverable=False)
        self.setting = setting


class ToolError(T3ChatError):
    """Error during tool execution. Folded back into the conversation."""

    def __init__(
        self,
        message: str,
        tool_name: str | None = None,
        recoverable: bool = True,
    ):
        super().__init__(message, recoverable)
        self.tool_name = tool_name


class ToolArgumentError(ToolError):
    """Tool arguments failed validation."""


class ToolExecutionError(ToolError):
    """An external call made by a tool failed."""


class UnknownToolError(ToolError):
    """The model asked for a tool that is not offered on this route."""


class RateLimitExceeded(T3ChatError):
    """Client exceeded its request quota for the current window."""

    def __init__(self, client_key: str, retry_after: int):
        super().__init__(f"Rate limit exceeded for {client_key}")
        self.client_key = client_key
        self.retry_after = retry_after


class PersistenceError(T3ChatError):
    """The persistence collaborator rejected or failed a write."""
