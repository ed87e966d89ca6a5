"""Reddit discussion search through Tavily."""

import re
from typing import Literal

from pydantic import Field

from t3chat.tools.base import Tool, ToolArgs, ToolContext
from t3chat.tools.registry import ToolRegistry
from t3chat.tools.results import RedditPost, RedditSearchResult
from t3chat.tools.search.tavily import tavily_search
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)

_SUBREDDIT_RE = re.compile(r"reddit\.com/r/([^/]+)")


class RedditSearchArgs(ToolArgs):
    query: str = Field(min_length=1, description="The exact search query from the user.")
    max_results: int = Field(
        default=20, ge=1, le=50, description="Maximum number of results to return."
    )
    time_range: Literal["day", "week", "month", "year"] = Field(
        default="week", description="Time range for Reddit search."
    )


def to_reddit_post(raw: dict) -> RedditPost:
    url = raw["url"]
    is_post = "/comments/" in url
    match = _SUBREDDIT_RE.search(url) if is_post else None
    content = raw.get("content") or ""
    return RedditPost(
        url=url,
        title=raw.get("title") or "",
        content=content,
        score=raw.get("score"),
        published_date=raw.get("published_date"),
        subreddit=match.group(1) if match else "unknown",
        is_reddit_post=is_post,
        comments=[content] if content else [],
    )


@ToolRegistry.register
class RedditSearchTool(Tool):
    name = "reddit_search"
    description = "Search Reddit discussions, community opinions and user experiences."
    args_model = RedditSearchArgs
    required_settings = ("tavily_api_key",)

    async def execute(
        self, args: RedditSearchArgs, context: ToolContext
    ) -> RedditSearchResult:
        logger.info(
            "Reddit search",
            query=args.query,
            time_range=args.time_range,
            request_id=context.request_id,
        )

        data = await tavily_search(
            context.http,
            context.settings,
            args.query,
            max_results=args.max_results,
            time_range=args.time_range,
            search_depth="basic",
            topic="general",
            include_domains=["reddit.com"],
        )

        # Every post shares the reddit.com domain; collapse exact URLs only
        seen: set[str] = set()
        posts: list[RedditPost] = []
        for raw in data.get("results") or []:
            if not raw.get("url") or raw["url"] in seen:
                continue
            seen.add(raw["url"])
            posts.append(to_reddit_post(raw))

        return RedditSearchResult(
            query=args.query,
            results=posts,
            time_range=args.time_range,
        )
