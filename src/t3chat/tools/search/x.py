"""X (Twitter) post search through Tavily."""

from datetime import date, timedelta

from pydantic import Field

from t3chat.tools.base import Tool, ToolArgs, ToolContext
from t3chat.tools.registry import ToolRegistry
from t3chat.tools.results import XPost, XSearchResult
from t3chat.tools.search.tavily import tavily_search
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_LOOKBACK_DAYS = 7
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class XSearchArgs(ToolArgs):
    query: str = Field(min_length=1, description="The search query")
    start_date: str | None = Field(
        default=None, pattern=DATE_PATTERN, description="Start date in YYYY-MM-DD format"
    )
    end_date: str | None = Field(
        default=None, pattern=DATE_PATTERN, description="End date in YYYY-MM-DD format"
    )
    x_handles: list[str] = Field(
        default_factory=list, description="Optional specific X handles to search"
    )
    max_results: int = Field(
        default=15, ge=1, le=50, description="Maximum number of results to return"
    )


def _handle_query(query: str, handles: list[str]) -> str:
    if not handles:
        return query
    mentions = " OR ".join(f"@{h.lstrip('@')}" for h in handles)
    return f"{query} ({mentions})"


@ToolRegistry.register
class XSearchTool(Tool):
    name = "x_search"
    description = "Search X (Twitter) for posts and content."
    args_model = XSearchArgs
    required_settings = ("tavily_api_key",)

    async def execute(self, args: XSearchArgs, context: ToolContext) -> XSearchResult:
        end_date = args.end_date or date.today().isoformat()
        start_date = args.start_date or (
            date.fromisoformat(end_date) - timedelta(days=DEFAULT_LOOKBACK_DAYS)
        ).isoformat()

        logger.info(
            "X search",
            query=args.query,
            start_date=start_date,
            end_date=end_date,
            handles=args.x_handles,
            request_id=context.request_id,
        )

        data = await tavily_search(
            context.http,
            context.settings,
            _handle_query(args.query, args.x_handles),
            max_results=args.max_results,
            search_depth="basic",
            topic="general",
            start_date=start_date,
            end_date=end_date,
            include_domains=["x.com", "twitter.com"],
        )

        seen: set[str] = set()
        posts: list[XPost] = []
        for raw in data.get("results") or []:
            if not raw.get("url") or raw["url"] in seen:
                continue
            seen.add(raw["url"])
            posts.append(
                XPost(
                    url=raw["url"],
                    title=raw.get("title") or "",
                    content=raw.get("content") or "",
                    published_date=raw.get("published_date"),
                )
            )

        return XSearchResult(
            query=args.query,
            content=f'Found {len(posts)} X posts related to "{args.query}"',
            citations=posts,
            date_range=f"{start_date} to {end_date}",
            handles=args.x_handles,
        )
