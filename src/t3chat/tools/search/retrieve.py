"""Full page content for one URL through Exa's contents endpoint."""

import time
from typing import Literal

from pydantic import Field

from t3chat.core.exceptions import ToolExecutionError
from t3chat.tools.base import Tool, ToolArgs, ToolContext
from t3chat.tools.registry import ToolRegistry
from t3chat.tools.results import RetrievedPage, RetrieveResult
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)


class RetrieveArgs(ToolArgs):
    url: str = Field(min_length=1, description="The URL to retrieve the information from.")
    include_summary: bool = Field(
        default=True, description="Whether to include a summary of the content."
    )
    live_crawl: Literal["never", "auto", "always"] = Field(
        default="always", description="Whether to crawl the page immediately."
    )


def to_page(raw: dict) -> RetrievedPage:
    url = raw.get("url") or ""
    summary = raw.get("summary")
    return RetrievedPage(
        url=url,
        title=raw.get("title") or url.rstrip("/").rsplit("/", 1)[-1] or "Retrieved Content",
        content=raw.get("text") or summary or "",
        description=summary or f"Content retrieved from {url}",
        author=raw.get("author"),
        published_date=raw.get("publishedDate"),
        image=raw.get("image"),
        favicon=raw.get("favicon"),
    )


@ToolRegistry.register
class RetrieveTool(Tool):
    name = "retrieve"
    description = (
        "Retrieve the full content from a URL, including text, title, summary and images."
    )
    args_model = RetrieveArgs
    required_settings = ("exa_api_key",)

    async def execute(self, args: RetrieveArgs, context: ToolContext) -> RetrieveResult:
        settings = context.settings
        logger.info(
            "Retrieve",
            url=args.url,
            summary=args.include_summary,
            live_crawl=args.live_crawl,
            request_id=context.request_id,
        )

        body: dict = {"urls": [args.url], "text": True, "livecrawl": args.live_crawl}
        if args.include_summary:
            body["summary"] = {}

        start = time.monotonic()
        response = await context.http.post(
            f"{settings.exa_base_url.rstrip('/')}/contents",
            json=body,
            headers={"x-api-key": settings.exa_api_key},
            timeout=settings.search_timeout_seconds,
        )
        response.raise_for_status()

        results = [to_page(raw) for raw in response.json().get("results") or [] if raw.get("url")]
        if not results:
            raise ToolExecutionError(f"No content retrieved from {args.url}", tool_name=self.name)

        return RetrieveResult(
            base_url=args.url,
            results=results,
            response_time=round(time.monotonic() - start, 3),
        )
