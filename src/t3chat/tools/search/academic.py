"""Academic paper search through Exa."""

import re

from pydantic import Field

from t3chat.tools.base import Tool, ToolArgs, ToolContext
from t3chat.tools.registry import ToolRegistry
from t3chat.tools.results import AcademicSearchResult, Paper
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)

NUM_RESULTS = 20
SUMMARY_QUERY = "Abstract of the Paper"

_SUMMARY_PREFIX_RE = re.compile(r"^Summary:\s*", re.IGNORECASE)
_TITLE_SUFFIX_RE = re.compile(r"\s\[.*?\]$")


class AcademicSearchArgs(ToolArgs):
    query: str = Field(min_length=1, description="The search query")


def clean_paper(raw: dict) -> Paper | None:
    """Normalize one Exa result. Results without a summary are dropped."""
    summary = raw.get("summary")
    url = raw.get("url")
    if not summary or not url:
        return None
    return Paper(
        url=url,
        title=_TITLE_SUFFIX_RE.sub("", raw.get("title") or ""),
        summary=_SUMMARY_PREFIX_RE.sub("", summary),
        author=raw.get("author"),
        published_date=raw.get("publishedDate"),
        score=raw.get("score"),
    )


@ToolRegistry.register
class AcademicSearchTool(Tool):
    name = "academic_search"
    description = "Search academic papers and research."
    args_model = AcademicSearchArgs
    required_settings = ("exa_api_key",)

    async def execute(
        self, args: AcademicSearchArgs, context: ToolContext
    ) -> AcademicSearchResult:
        settings = context.settings
        logger.info("Academic search", query=args.query, request_id=context.request_id)

        response = await context.http.post(
            f"{settings.exa_base_url.rstrip('/')}/search",
            json={
                "query": args.query,
                "type": "auto",
                "numResults": NUM_RESULTS,
                "category": "research paper",
                "contents": {"summary": {"query": SUMMARY_QUERY}},
            },
            headers={"x-api-key": settings.exa_api_key},
            timeout=settings.search_timeout_seconds,
        )
        response.raise_for_status()

        papers: list[Paper] = []
        seen: set[str] = set()
        for raw in response.json().get("results") or []:
            paper = clean_paper(raw)
            if paper is None or paper.url in seen:
                continue
            seen.add(paper.url)
            papers.append(paper)

        return AcademicSearchResult(query=args.query, results=papers)
