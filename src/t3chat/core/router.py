"""Routing: group key to system prompt, tool set, model and limits.

The table is built once. Lookup is case-insensitive and total: unknown,
empty or missing keys get the default route.
"""

from dataclasses import dataclass, replace
from datetime import date

from t3chat.config import prompts
from t3chat.utils.providers.base import ToolChoice

DEFAULT_MODEL = "t3-gemini-2-5-flash"
DEFAULT_MAX_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.7


@dataclass(frozen=True)
class RouteConfig:
    """Static configuration of one route."""

    key: str
    system_prompt: str
    tools: tuple[str, ...] = ()
    default_model: str = DEFAULT_MODEL
    max_tool_rounds: int = 1
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    tool_choice: ToolChoice = "auto"


@dataclass(frozen=True)
class RouteDecision:
    """Everything the orchestrator needs to serve one request."""

    group: str
    system_prompt: str
    tools: tuple[str, ...]
    model: str
    max_tool_rounds: int
    max_tokens: int
    temperature: float
    tool_choice: ToolChoice


ROUTES: tuple[RouteConfig, ...] = (
    RouteConfig(
        key="web",
        system_prompt=prompts.WEB_SYSTEM_PROMPT,
        tools=("web_search", "retrieve", "datetime"),
        default_model="t3-4o",
        max_tool_rounds=2,
        tool_choice="required",
    ),
    RouteConfig(
        key="academic",
        system_prompt=prompts.ACADEMIC_SYSTEM_PROMPT,
        tools=("academic_search", "datetime"),
        default_model="t3-claude-3-5-sonnet",
        max_tool_rounds=2,
        temperature=0.3,
    ),
    RouteConfig(
        key="reddit",
        system_prompt=prompts.REDDIT_SYSTEM_PROMPT,
        tools=("reddit_search", "datetime"),
        default_model="t3-4o",
        max_tool_rounds=2,
    ),
    RouteConfig(
        key="x",
        system_prompt=prompts.X_SYSTEM_PROMPT,
        tools=("x_search",),
        default_model="t3-4o",
        max_tool_rounds=2,
    ),
    RouteConfig(
        key="youtube",
        system_prompt=prompts.YOUTUBE_SYSTEM_PROMPT,
        tools=("youtube_search", "datetime"),
        default_model="t3-4o",
        max_tool_rounds=2,
    ),
    RouteConfig(
        key="analytics",
        system_prompt=prompts.ANALYTICS_SYSTEM_PROMPT,
        tools=("stock_chart", "currency_converter", "datetime"),
        default_model="t3-claude-3-5-sonnet",
        max_tool_rounds=3,
        temperature=0.3,
    ),
    RouteConfig(
        key="chat",
        system_prompt=prompts.CHAT_SYSTEM_PROMPT,
        tools=("datetime",),
        max_tool_rounds=2,
    ),
    RouteConfig(key="search", system_prompt=prompts.SEARCH_SYSTEM_PROMPT),
    RouteConfig(key="coding", system_prompt=prompts.CODING_SYSTEM_PROMPT),
    RouteConfig(key="creative", system_prompt=prompts.CREATIVE_SYSTEM_PROMPT),
    RouteConfig(key="analysis", system_prompt=prompts.ANALYSIS_SYSTEM_PROMPT),
)

ALIASES: dict[str, str] = {
    "twitter": "x",
}

DEFAULT_ROUTE = RouteConfig(key="default", system_prompt=prompts.BASE_SYSTEM_PROMPT)


def format_date(today: date) -> str:
    """Date as rendered into system prompts, e.g. 'Mon, Oct 19, 2026'."""
    return today.strftime("%a, %b %d, %Y")


class RouteTable:
    """
    Immutable lookup from group key to route.

    Usage:
        table = RouteTable()
        decision = table.route("web", model=None)
    """

    def __init__(
        self,
        routes: tuple[RouteConfig, ...] = ROUTES,
        aliases: dict[str, str] | None = None,
        default: RouteConfig = DEFAULT_ROUTE,
        default_model: str | None = None,
    ):
        """
        Build the table.

        Args:
            routes: Route configurations
            aliases: Alternative keys mapped to route keys
            default: Route for unknown keys
            default_model: Overrides the default model of the default route
        """
        self._routes = {r.key: r for r in routes}
        self._aliases = dict(ALIASES if aliases is None else aliases)
        self._default = replace(default, default_model=default_model) if default_model else default

    @property
    def keys(self) -> list[str]:
        return list(self._routes)

    def lookup(self, group: str | None) -> RouteConfig:
        """Route configuration for a group key, never raising."""
        if not group:
            return self._default
        key = group.strip().lower()
        key = self._aliases.get(key, key)
        return self._routes.get(key, self._default)

    def route(
        self,
        group: str | None,
        model: str | None = None,
        today: date | None = None,
    ) -> RouteDecision:
        """
        Decide how to serve a request.

        Args:
            group: Requested group key, possibly unknown or None
            model: Requested model id; the route default when None
            today: Date rendered into the prompt (defaults to today)

        Returns:
            RouteDecision
        """
        config = self.lookup(group)
        return RouteDecision(
            group=config.key,
            system_prompt=config.system_prompt.format(date=format_date(today or date.today())),
            tools=config.tools,
            model=model or config.default_model,
            max_tool_rounds=config.max_tool_rounds,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            tool_choice=config.tool_choice if config.tools else "auto",
        )
