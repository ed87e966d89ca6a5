"""YouTube video search through the YouTube Data API v3."""

import re
from typing import Any

import httpx
from pydantic import Field

from t3chat.tools.base import Tool, ToolArgs, ToolContext
from t3chat.tools.registry import ToolRegistry
from t3chat.tools.results import Video, VideoDetails, YouTubeSearchResult
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)

MAX_RESULTS = 10
SUMMARY_CHARS = 200

_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


class YouTubeSearchArgs(ToolArgs):
    query: str = Field(min_length=1, description="The search query for YouTube videos")


def format_duration(duration: str) -> str:
    """ISO-8601 duration (PT1H2M3S) to H:MM:SS or M:SS."""
    match = _DURATION_RE.fullmatch(duration)
    if not match:
        return duration
    hours, minutes, seconds = (int(g) if g else 0 for g in match.groups())
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def format_view_count(view_count: str | int) -> str:
    count = int(view_count)
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M views"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K views"
    return f"{count} views"


def _summary(description: str) -> str:
    if len(description) > SUMMARY_CHARS:
        return description[:SUMMARY_CHARS] + "..."
    return description


def _thumbnail(snippet: dict[str, Any]) -> str | None:
    thumbnails = snippet.get("thumbnails") or {}
    for size in ("high", "medium", "default"):
        if size in thumbnails:
            return thumbnails[size].get("url")
    return None


def to_video(item: dict[str, Any], details: dict[str, Any] | None) -> Video:
    video_id = item["id"]["videoId"]
    snippet = item.get("snippet") or {}
    statistics = (details or {}).get("statistics") or {}
    duration = ((details or {}).get("contentDetails") or {}).get("duration")

    return Video(
        video_id=video_id,
        url=f"https://www.youtube.com/watch?v={video_id}",
        details=VideoDetails(
            title=snippet.get("title") or "",
            author_name=snippet.get("channelTitle") or "",
            author_url=f"https://www.youtube.com/channel/{snippet.get('channelId', '')}",
            thumbnail_url=_thumbnail(snippet),
        ),
        views=format_view_count(statistics["viewCount"]) if "viewCount" in statistics else None,
        likes=f"{int(statistics['likeCount']):,} likes" if "likeCount" in statistics else None,
        summary=_summary(snippet.get("description") or ""),
        duration=format_duration(duration) if duration else None,
        published_at=snippet.get("publishedAt"),
    )


@ToolRegistry.register
class YouTubeSearchTool(Tool):
    name = "youtube_search"
    description = (
        "Search YouTube videos using the YouTube Data API and get detailed video information."
    )
    args_model = YouTubeSearchArgs
    required_settings = ("youtube_api_key",)

    async def execute(
        self, args: YouTubeSearchArgs, context: ToolContext
    ) -> YouTubeSearchResult:
        settings = context.settings
        base_url = settings.youtube_api_base_url.rstrip("/")
        logger.info("YouTube search", query=args.query, request_id=context.request_id)

        search = await context.http.get(
            f"{base_url}/search",
            params={
                "key": settings.youtube_api_key,
                "part": "snippet",
                "type": "video",
                "q": args.query,
                "maxResults": MAX_RESULTS,
                "order": "relevance",
            },
            headers={"Accept": "application/json"},
            timeout=settings.search_timeout_seconds,
        )
        search.raise_for_status()
        items = [
            item
            for item in search.json().get("items") or []
            if (item.get("id") or {}).get("videoId")
        ]
        if not items:
            return YouTubeSearchResult(query=args.query)

        # Statistics are optional; a failed details call still returns videos
        details_by_id: dict[str, dict[str, Any]] = {}
        try:
            details = await context.http.get(
                f"{base_url}/videos",
                params={
                    "key": settings.youtube_api_key,
                    "part": "snippet,statistics,contentDetails",
                    "id": ",".join(item["id"]["videoId"] for item in items),
                },
                headers={"Accept": "application/json"},
                timeout=settings.search_timeout_seconds,
            )
        except httpx.HTTPError as e:
            logger.warning("YouTube details request failed", error=str(e))
        else:
            if details.is_success:
                details_by_id = {d["id"]: d for d in details.json().get("items") or []}
            else:
                logger.warning("YouTube details request failed", status=details.status_code)

        return YouTubeSearchResult(
            query=args.query,
            results=[
                to_video(item, details_by_id.get(item["id"]["videoId"])) for item in items
            ],
        )
