"""Registry for tools with factory pattern."""

from t3chat.config.settings import Settings
from t3chat.core.exceptions import ConfigurationError
from t3chat.tools.base import Tool
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)


class ToolRegistry:
    """
    Registry for tools.

    Design Pattern: Registry + Factory

    Usage:
        @ToolRegistry.register
        class MyTool(Tool):
            name = "my_tool"
            ...

        tool = ToolRegistry.create("my_tool")
    """

    _tools: dict[str, type[Tool]] = {}
    _instances: dict[str, Tool] = {}

    @classmethod
    def register(cls, tool_class: type[Tool]) -> type[Tool]:
        """Register a tool class. Usable as a decorator."""
        name = tool_class.name
        if name in cls._tools:
            logger.warning("Overwriting existing tool", tool=name)
        cls._tools[name] = tool_class
        cls._instances.pop(name, None)
        logger.debug("Registered tool", tool=name)
        return tool_class

    @classmethod
    def get(cls, name: str) -> type[Tool] | None:
        """Get a tool class by name."""
        return cls._tools.get(name)

    @classmethod
    def create(cls, name: str) -> Tool:
        """
        Create or get cached instance of a tool.

        Raises:
            KeyError: If tool not registered
        """
        if name not in cls._instances:
            tool_class = cls._tools.get(name)
            if not tool_class:
                raise KeyError(f"Tool not registered: {name}")
            cls._instances[name] = tool_class()
        return cls._instances[name]

    @classmethod
    def list_tools(cls) -> list[str]:
        """Get list of registered tool names."""
        return list(cls._tools.keys())

    @classmethod
    def check_configured(cls, names: tuple[str, ...], settings: Settings) -> None:
        """
        Ensure every named tool can run with the given settings.

        Raises:
            ConfigurationError: A tool is unknown or lacks a required setting
        """
        for name in names:
            try:
                tool = cls.create(name)
            except KeyError as e:
                raise ConfigurationError(str(e)) from e
            missing = tool.missing_settings(settings)
            if missing:
                raise ConfigurationError(
                    f"{name} is not configured. Set {', '.join(m.upper() for m in missing)}.",
                    setting=missing[0],
                )
