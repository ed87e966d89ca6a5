"""Tests for the search and built-in tools."""

import json
from datetime import date, timedelta

import httpx
import pytest

from t3chat.core.exceptions import ToolArgumentError, ToolExecutionError
from t3chat.tools.base import ToolContext
from t3chat.tools.registry import ToolRegistry
from t3chat.tools.search.academic import clean_paper
from t3chat.tools.search.reddit import to_reddit_post
from t3chat.tools.search.youtube import format_duration, format_view_count


class RecordingHandler:
    """MockTransport handler that records requests and routes by path."""

    def __init__(self, routes: dict[str, tuple[int, dict | None]]):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "HEAD":
            return httpx.Response(200, headers={"content-type": "image/jpeg"})
        for path, response in self.routes.items():
            if request.url.path.endswith(path):
                status, body = response
                return httpx.Response(status, json=body)
        return httpx.Response(404)

    def bodies(self, path: str) -> list[dict]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.method == "POST" and r.url.path.endswith(path)
        ]


def _context(http, settings, **kwargs) -> ToolContext:
    return ToolContext(http=http, settings=settings, model_id="t3-4o", request_id="req-1", **kwargs)


TAVILY_BODY = {
    "results": [
        {"url": "https://en.wikipedia.org/wiki/Paris", "title": "Paris", "content": "Capital of France"},
        {"url": "https://en.wikipedia.org/wiki/France", "title": "France", "content": "Country"},
        {"url": "https://www.britannica.com/place/Paris", "title": "Paris | Britannica", "content": "City"},
    ],
    "images": [
        {"url": "https://img.example.com/eiffel.jpg", "description": "Eiffel tower"},
        "https://img.other.com/plain.jpg",
    ],
}


class FakeSynthesizer:
    def __init__(self, summary=None):
        self.summary = summary
        self.calls = []

    async def synthesize(self, searches, queries, model_id, stream=None):
        self.calls.append((queries, model_id))
        return self.summary


class TestWebSearchTool:
    """Tests for web_search."""

    @pytest.mark.asyncio
    async def test_single_query_with_failed_synthesis(self, settings, mock_http):
        """The payload survives a synthesis failure."""
        handler = RecordingHandler({"/search": (200, TAVILY_BODY)})
        synthesizer = FakeSynthesizer(summary=None)
        tool = ToolRegistry.create("web_search")

        async with mock_http(handler) as client:
            result = await tool.run(
                {"queries": ["capital of France"]},
                _context(client, settings, synthesizer=synthesizer),
            )

        payload = result.to_payload()
        assert payload["kind"] == "web_search"
        assert payload["hasContent"] is True
        assert payload["synthesizedReport"] is None
        assert [r["url"] for r in payload["searches"][0]["results"]] == [
            "https://en.wikipedia.org/wiki/Paris",
            "https://www.britannica.com/place/Paris",
        ]
        assert payload["searches"][0]["images"] == [
            {"url": "https://img.example.com/eiffel.jpg", "description": "Eiffel tower"}
        ]
        assert synthesizer.calls == [(["capital of France"], "t3-4o")]

        body = handler.bodies("/search")[0]
        assert body["query"] == "capital of France"
        assert body["include_images"] is True
        assert "days" not in body

    @pytest.mark.asyncio
    async def test_synthesis_fills_report(self, settings, mock_http):
        from t3chat.core.synthesizer import SynthesizedSummary

        handler = RecordingHandler({"/search": (200, TAVILY_BODY)})
        summary = SynthesizedSummary(
            synthesized_report="Paris is the capital.",
            key_points=["Paris"],
            summary="Paris",
        )
        tool = ToolRegistry.create("web_search")

        async with mock_http(handler) as client:
            result = await tool.run(
                {"queries": ["a", "b"], "topics": ["news", "general"]},
                _context(client, settings, synthesizer=FakeSynthesizer(summary)),
            )

        payload = result.to_payload()
        assert payload["synthesizedReport"] == "Paris is the capital."
        assert payload["keyPoints"] == ["Paris"]
        assert len(payload["searches"]) == 2
        bodies = handler.bodies("/search")
        assert {b["query"]: b.get("days") for b in bodies} == {"a": 7, "b": None}

    @pytest.mark.asyncio
    async def test_no_results_skips_synthesis(self, settings, mock_http):
        handler = RecordingHandler({"/search": (200, {"results": []})})
        synthesizer = FakeSynthesizer()
        tool = ToolRegistry.create("web_search")

        async with mock_http(handler) as client:
            result = await tool.run({"queries": ["x"]}, _context(client, settings, synthesizer=synthesizer))

        assert result.has_content is False
        assert synthesizer.calls == []

    @pytest.mark.asyncio
    async def test_provider_error_becomes_tool_error(self, settings, mock_http):
        handler = RecordingHandler({"/search": (500, None)})
        tool = ToolRegistry.create("web_search")

        async with mock_http(handler) as client:
            with pytest.raises(ToolExecutionError, match="HTTP 500"):
                await tool.run({"queries": ["x"]}, _context(client, settings))

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, settings, mock_http):
        tool = ToolRegistry.create("web_search")
        async with mock_http(RecordingHandler({})) as client:
            with pytest.raises(ToolArgumentError):
                await tool.run({"queries": []}, _context(client, settings))
            with pytest.raises(ToolArgumentError):
                await tool.run({"queries": "not a list"}, _context(client, settings))

    def test_tool_spec(self):
        spec = ToolRegistry.create("web_search").spec()
        assert spec.name == "web_search"
        assert "queries" in spec.input_schema["properties"]
        assert "title" not in spec.input_schema


class TestAcademicSearchTool:
    """Tests for academic_search."""

    def test_clean_paper(self):
        paper = clean_paper(
            {
                "url": "https://arxiv.org/abs/1",
                "title": "Attention [pdf]",
                "summary": "Summary: Transformers.",
                "publishedDate": "2017-06-12",
            }
        )
        assert paper.title == "Attention"
        assert paper.summary == "Transformers."
        assert clean_paper({"url": "https://x.org", "summary": ""}) is None

    @pytest.mark.asyncio
    async def test_search(self, settings, mock_http):
        body = {
            "results": [
                {"url": "https://arxiv.org/abs/1", "title": "A", "summary": "S1"},
                {"url": "https://arxiv.org/abs/1", "title": "A", "summary": "S1"},
                {"url": "https://arxiv.org/abs/2", "title": "B"},
            ]
        }
        handler = RecordingHandler({"/search": (200, body)})
        tool = ToolRegistry.create("academic_search")

        async with mock_http(handler) as client:
            result = await tool.run({"query": "transformers"}, _context(client, settings))

        assert [p.url for p in result.results] == ["https://arxiv.org/abs/1"]
        request = handler.requests[0]
        assert request.headers["x-api-key"] == "test-exa"
        assert json.loads(request.content)["category"] == "research paper"


class TestRetrieveTool:
    """Tests for retrieve."""

    @pytest.mark.asyncio
    async def test_retrieve(self, settings, mock_http):
        body = {
            "results": [
                {
                    "url": "https://example.com/articles/paris",
                    "text": "Paris is the capital of France.",
                    "summary": "About Paris.",
                    "author": "A. Writer",
                }
            ]
        }
        handler = RecordingHandler({"/contents": (200, body)})
        tool = ToolRegistry.create("retrieve")

        async with mock_http(handler) as client:
            result = await tool.run(
                {"url": "https://example.com/articles/paris"}, _context(client, settings)
            )

        page = result.results[0]
        assert result.base_url == "https://example.com/articles/paris"
        assert page.title == "paris"
        assert page.content == "Paris is the capital of France."
        assert page.description == "About Paris."
        assert result.to_payload()["kind"] == "retrieve"

        sent = handler.bodies("/contents")[0]
        assert sent == {
            "urls": ["https://example.com/articles/paris"],
            "text": True,
            "livecrawl": "always",
            "summary": {},
        }
        assert handler.requests[0].headers["x-api-key"] == "test-exa"

    @pytest.mark.asyncio
    async def test_without_summary(self, settings, mock_http):
        body = {"results": [{"url": "https://example.com/", "text": "Hello"}]}
        handler = RecordingHandler({"/contents": (200, body)})
        tool = ToolRegistry.create("retrieve")

        async with mock_http(handler) as client:
            result = await tool.run(
                {"url": "https://example.com/", "include_summary": False, "live_crawl": "never"},
                _context(client, settings),
            )

        assert "summary" not in handler.bodies("/contents")[0]
        assert result.results[0].description == "Content retrieved from https://example.com/"
        assert result.results[0].title == "example.com"

    @pytest.mark.asyncio
    async def test_nothing_retrieved(self, settings, mock_http):
        handler = RecordingHandler({"/contents": (200, {"results": []})})
        tool = ToolRegistry.create("retrieve")

        async with mock_http(handler) as client:
            with pytest.raises(ToolExecutionError, match="No content retrieved"):
                await tool.run({"url": "https://example.com/"}, _context(client, settings))


class TestRedditSearchTool:
    """Tests for reddit_search."""

    def test_to_reddit_post(self):
        post = to_reddit_post(
            {"url": "https://www.reddit.com/r/python/comments/abc/title/", "content": "Nice"}
        )
        assert post.subreddit == "python"
        assert post.is_reddit_post is True
        assert post.comments == ["Nice"]

        listing = to_reddit_post({"url": "https://www.reddit.com/r/python/"})
        assert listing.subreddit == "unknown"
        assert listing.is_reddit_post is False

    @pytest.mark.asyncio
    async def test_search_keeps_posts_from_same_domain(self, settings, mock_http):
        body = {
            "results": [
                {"url": "https://www.reddit.com/r/a/comments/1/x/", "title": "1"},
                {"url": "https://www.reddit.com/r/b/comments/2/y/", "title": "2"},
                {"url": "https://www.reddit.com/r/b/comments/2/y/", "title": "2"},
            ]
        }
        handler = RecordingHandler({"/search": (200, body)})
        tool = ToolRegistry.create("reddit_search")

        async with mock_http(handler) as client:
            result = await tool.run({"query": "python tips"}, _context(client, settings))

        assert len(result.results) == 2
        assert result.time_range == "week"
        assert handler.bodies("/search")[0]["include_domains"] == ["reddit.com"]


class TestXSearchTool:
    """Tests for x_search."""

    @pytest.mark.asyncio
    async def test_default_dates_and_handles(self, settings, mock_http):
        body = {"results": [{"url": "https://x.com/a/status/1", "content": "post"}]}
        handler = RecordingHandler({"/search": (200, body)})
        tool = ToolRegistry.create("x_search")

        async with mock_http(handler) as client:
            result = await tool.run(
                {"query": "launch", "x_handles": ["nasa", "@spacex"]},
                _context(client, settings),
            )

        sent = handler.bodies("/search")[0]
        today = date.today()
        assert sent["query"] == "launch (@nasa OR @spacex)"
        assert sent["end_date"] == today.isoformat()
        assert sent["start_date"] == (today - timedelta(days=7)).isoformat()
        assert result.content == 'Found 1 X posts related to "launch"'
        assert result.date_range == f"{sent['start_date']} to {sent['end_date']}"

    @pytest.mark.asyncio
    async def test_bad_date(self, settings, mock_http):
        tool = ToolRegistry.create("x_search")
        async with mock_http(RecordingHandler({})) as client:
            with pytest.raises(ToolArgumentError):
                await tool.run({"query": "q", "start_date": "19/10/2026"}, _context(client, settings))


class TestYouTubeSearchTool:
    """Tests for youtube_search."""

    def test_format_duration(self):
        assert format_duration("PT1H2M3S") == "1:02:03"
        assert format_duration("PT4M5S") == "4:05"
        assert format_duration("PT45S") == "0:45"

    def test_format_view_count(self):
        assert format_view_count("1500000") == "1.5M views"
        assert format_view_count(2500) == "2.5K views"
        assert format_view_count(12) == "12 views"

    @pytest.mark.asyncio
    async def test_search_with_details(self, settings, mock_http):
        search_body = {
            "items": [
                {
                    "id": {"videoId": "v1"},
                    "snippet": {
                        "title": "Intro",
                        "channelTitle": "Chan",
                        "channelId": "c1",
                        "description": "d" * 250,
                        "thumbnails": {"high": {"url": "https://i.ytimg.com/v1.jpg"}},
                    },
                },
                {"id": {"channelId": "skip"}},
            ]
        }
        details_body = {
            "items": [
                {
                    "id": "v1",
                    "statistics": {"viewCount": "1200", "likeCount": "3400"},
                    "contentDetails": {"duration": "PT10M2S"},
                }
            ]
        }
        handler = RecordingHandler(
            {
                "/search": (200, search_body),
                "/videos": (200, details_body),
            }
        )
        tool = ToolRegistry.create("youtube_search")

        async with mock_http(handler) as client:
            result = await tool.run({"query": "python"}, _context(client, settings))

        assert len(result.results) == 1
        video = result.results[0]
        assert video.url == "https://www.youtube.com/watch?v=v1"
        assert video.views == "1.2K views"
        assert video.likes == "3,400 likes"
        assert video.duration == "10:02"
        assert video.summary.endswith("...") and len(video.summary) == 203
        assert video.details.thumbnail_url == "https://i.ytimg.com/v1.jpg"

    @pytest.mark.asyncio
    async def test_failed_details_still_returns_videos(self, settings, mock_http):
        search_body = {"items": [{"id": {"videoId": "v1"}, "snippet": {"title": "T"}}]}
        handler = RecordingHandler(
            {
                "/search": (200, search_body),
                "/videos": (403, None),
            }
        )
        tool = ToolRegistry.create("youtube_search")

        async with mock_http(handler) as client:
            result = await tool.run({"query": "python"}, _context(client, settings))

        assert result.results[0].views is None

    @pytest.mark.asyncio
    async def test_details_timeout_still_returns_videos(self, settings, mock_http):
        search_body = {"items": [{"id": {"videoId": "v1"}, "snippet": {"title": "T"}}]}
        routes = RecordingHandler({"/search": (200, search_body)})

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/videos"):
                raise httpx.ReadTimeout("timed out", request=request)
            return routes(request)

        tool = ToolRegistry.create("youtube_search")

        async with mock_http(handler) as client:
            result = await tool.run({"query": "python"}, _context(client, settings))

        assert [video.video_id for video in result.results] == ["v1"]
        assert result.results[0].duration is None


class TestDateTimeTool:
    """Tests for the datetime tool."""

    @pytest.mark.asyncio
    async def test_timezone(self, settings, mock_http):
        tool = ToolRegistry.create("datetime")
        async with mock_http(RecordingHandler({})) as client:
            result = await tool.run({"timezone": "Europe/Paris"}, _context(client, settings))
        assert result.kind == "datetime"
        assert result.timezone == "Europe/Paris"

    @pytest.mark.asyncio
    async def test_unknown_timezone(self, settings, mock_http):
        tool = ToolRegistry.create("datetime")
        async with mock_http(RecordingHandler({})) as client:
            with pytest.raises(ToolArgumentError, match="Unknown timezone"):
                await tool.run({"timezone": "Mars/Olympus"}, _context(client, settings))


class TestToolRegistry:
    """Tests for ToolRegistry."""

    def test_all_tools_registered(self):
        assert set(ToolRegistry.list_tools()) >= {
            "web_search",
            "academic_search",
            "reddit_search",
            "x_search",
            "youtube_search",
            "stock_chart",
            "retrieve",
            "currency_converter",
            "datetime",
        }

    def test_check_configured(self, settings):
        from t3chat.core.exceptions import ConfigurationError

        ToolRegistry.check_configured(("web_search", "datetime"), settings)
        settings.tavily_api_key = ""
        with pytest.raises(ConfigurationError, match="TAVILY_API_KEY"):
            ToolRegistry.check_configured(("web_search",), settings)
