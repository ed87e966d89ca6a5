"""Multi-query web search with image validation and synthesis."""

import asyncio
from typing import Literal, TypeVar

from pydantic import Field

from t3chat.tools.base import Tool, ToolArgs, ToolContext
from t3chat.tools.normalize import dedupe_by_domain_and_url, validate_images
from t3chat.tools.registry import ToolRegistry
from t3chat.tools.results import QueryResults, SearchItem, WebSearchResult
from t3chat.tools.search.tavily import tavily_search
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")

Topic = Literal["general", "news", "finance"]
Depth = Literal["basic", "advanced"]

DEFAULT_MAX_RESULTS = 10
NEWS_DAYS = 7


class WebSearchArgs(ToolArgs):
    queries: list[str] = Field(
        min_length=1,
        description="Search queries to look up on the web. Usually 3 to 5 queries.",
    )
    max_results: list[int] = Field(
        default_factory=list,
        description="Maximum number of results per query, by position. Default is 10.",
    )
    topics: list[Topic] = Field(
        default_factory=list,
        description="Topic per query, by position. Default is general.",
    )
    search_depth: list[Depth] = Field(
        default_factory=list,
        description="Search depth per query, by position. Use advanced for more detailed results.",
    )
    include_domains: list[str] = Field(
        default_factory=list,
        description="Domains to include in all search results.",
    )
    exclude_domains: list[str] = Field(
        default_factory=list,
        description="Domains to exclude from all search results.",
    )


def _pick(values: list[T], index: int, default: T) -> T:
    """Per-index option, falling back to the first value, then the default."""
    if index < len(values):
        return values[index]
    if values:
        return values[0]
    return default


@ToolRegistry.register
class WebSearchTool(Tool):
    name = "web_search"
    description = (
        "Search the web for information with multiple queries, max results and search depth."
    )
    args_model = WebSearchArgs
    required_settings = ("tavily_api_key",)

    async def execute(self, args: WebSearchArgs, context: ToolContext) -> WebSearchResult:
        logger.info("Web search", queries=args.queries, request_id=context.request_id)

        searches = list(
            await asyncio.gather(
                *(
                    self._search_one(query, index, args, context)
                    for index, query in enumerate(args.queries)
                )
            )
        )
        has_content = any(search.results for search in searches)

        result = WebSearchResult(searches=searches, has_content=has_content)
        if has_content and context.synthesizer is not None:
            synthesized = await context.synthesizer.synthesize(
                searches,
                args.queries,
                context.model_id,
                stream=context.stream,
            )
            if synthesized is not None:
                result.synthesized_report = synthesized.synthesized_report
                result.key_points = synthesized.key_points
                result.summary = synthesized.summary

        return result

    async def _search_one(
        self,
        query: str,
        index: int,
        args: WebSearchArgs,
        context: ToolContext,
    ) -> QueryResults:
        topic = _pick(args.topics, index, "general")
        data = await tavily_search(
            context.http,
            context.settings,
            query,
            topic=topic,
            days=NEWS_DAYS if topic == "news" else None,
            max_results=_pick(args.max_results, index, DEFAULT_MAX_RESULTS) or DEFAULT_MAX_RESULTS,
            search_depth=_pick(args.search_depth, index, "basic"),
            include_answer=True,
            include_images=True,
            include_image_descriptions=True,
            include_domains=args.include_domains or None,
            exclude_domains=args.exclude_domains or None,
        )

        results = [
            SearchItem(
                url=item["url"],
                title=item.get("title") or "",
                content=item.get("content") or "",
                published_date=item.get("published_date") if topic == "news" else None,
            )
            for item in dedupe_by_domain_and_url(data.get("results") or [])
            if item.get("url")
        ]

        raw_images = [
            image if isinstance(image, dict) else {"url": image}
            for image in data.get("images") or []
        ]
        images = await validate_images(
            context.http,
            raw_images,
            timeout=context.settings.image_validation_timeout_seconds,
        )

        return QueryResults.model_validate(
            {"query": query, "results": results, "images": images}
        )
