"""Tools the model can call mid-generation.

Search tools call external APIs (Tavily, Exa, YouTube); built-in tools
run in-process. All of them register with ToolRegistry on import.
"""

from t3chat.tools.base import Tool, ToolArgs, ToolContext
from t3chat.tools.registry import ToolRegistry

__all__ = [
    "Tool",
    "ToolArgs",
    "ToolContext",
    "ToolRegistry",
    "register_tools",
]


def register_tools() -> None:
    """
    Register every tool.

    Call this during application startup to make tools available.
    """
    # Import triggers registration via decorators
    from t3chat.tools import builtin  # noqa: F401
    from t3chat.tools import search  # noqa: F401
