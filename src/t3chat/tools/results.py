"""Tool result payloads.

Every tool returns one of these models. The ``kind`` field discriminates
the variants, and payloads serialize with camelCase aliases so clients see
``synthesizedReport``, ``hasContent``, ``publishedDate`` and so on.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ResultModel(BaseModel):
    """Base for tool payload models."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the client and for the model's tool message."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# WEB
# =============================================================================


class SearchItem(ResultModel):
    """One web result."""

    url: str
    title: str = ""
    content: str = ""
    published_date: str | None = None


class ImageItem(ResultModel):
    """A validated image URL with its description."""

    url: str
    description: str = ""


class QueryResults(ResultModel):
    """Results for one sub-query of a web search."""

    query: str
    results: list[SearchItem] = Field(default_factory=list)
    images: list[ImageItem] = Field(default_factory=list)


class WebSearchResult(ResultModel):
    kind: Literal["web_search"] = "web_search"
    searches: list[QueryResults] = Field(default_factory=list)
    synthesized_report: str | None = None
    key_points: list[str] = Field(default_factory=list)
    summary: str | None = None
    has_content: bool = False


# =============================================================================
# ACADEMIC
# =============================================================================


class Paper(ResultModel):
    url: str
    title: str = ""
    summary: str
    author: str | None = None
    published_date: str | None = None
    score: float | None = None


class AcademicSearchResult(ResultModel):
    kind: Literal["academic_search"] = "academic_search"
    query: str
    results: list[Paper] = Field(default_factory=list)


# =============================================================================
# REDDIT
# =============================================================================


class RedditPost(ResultModel):
    url: str
    title: str = ""
    content: str = ""
    score: float | None = None
    published_date: str | None = None
    subreddit: str = "unknown"
    is_reddit_post: bool = False
    comments: list[str] = Field(default_factory=list)


class RedditSearchResult(ResultModel):
    kind: Literal["reddit_search"] = "reddit_search"
    query: str
    results: list[RedditPost] = Field(default_factory=list)
    time_range: str


# =============================================================================
# X
# =============================================================================


class XPost(ResultModel):
    url: str
    title: str = ""
    content: str = ""
    published_date: str | None = None


class XSearchResult(ResultModel):
    kind: Literal["x_search"] = "x_search"
    query: str
    content: str
    citations: list[XPost] = Field(default_factory=list)
    date_range: str
    handles: list[str] = Field(default_factory=list)


# =============================================================================
# YOUTUBE
# =============================================================================


class VideoDetails(ResultModel):
    title: str = ""
    author_name: str = ""
    author_url: str = ""
    thumbnail_url: str | None = None
    type: str = "video"
    provider_name: str = "YouTube"
    provider_url: str = "https://www.youtube.com"


class Video(ResultModel):
    video_id: str
    url: str
    details: VideoDetails
    views: str | None = None
    likes: str | None = None
    summary: str = ""
    duration: str | None = None
    published_at: str | None = None


class YouTubeSearchResult(ResultModel):
    kind: Literal["youtube_search"] = "youtube_search"
    query: str
    results: list[Video] = Field(default_factory=list)


# =============================================================================
# STOCK CHART
# =============================================================================


class ChartData(ResultModel):
    timestamps: list[str] = Field(default_factory=list)
    prices: list[float] = Field(default_factory=list)
    volume: list[float] = Field(default_factory=list)
    technical_indicators: dict[str, Any] = Field(default_factory=dict)


class StockChartResult(ResultModel):
    kind: Literal["stock_chart"] = "stock_chart"
    symbol: str
    timeframe: str
    indicators: list[str] = Field(default_factory=list)
    currency: str | None = None
    last_price: float | None = None
    change_percent: float | None = None
    message: str = ""
    chart_data: ChartData = Field(default_factory=ChartData)


# =============================================================================
# RETRIEVE
# =============================================================================


class RetrievedPage(ResultModel):
    url: str
    title: str = ""
    content: str = ""
    description: str = ""
    author: str | None = None
    published_date: str | None = None
    image: str | None = None
    favicon: str | None = None


class RetrieveResult(ResultModel):
    kind: Literal["retrieve"] = "retrieve"
    base_url: str
    results: list[RetrievedPage] = Field(default_factory=list)
    response_time: float = 0.0


# =============================================================================
# CURRENCY
# =============================================================================


class CurrencyConversionResult(ResultModel):
    kind: Literal["currency_converter"] = "currency_converter"
    from_currency: str
    to_currency: str
    amount: float
    rate: float
    reverse_rate: float | None = None
    converted_amount: float


# =============================================================================
# DATETIME
# =============================================================================


class DateTimeResult(ResultModel):
    kind: Literal["datetime"] = "datetime"
    timezone: str
    iso: str
    date: str
    time: str
    weekday: str


ToolResult = Annotated[
    Union[
        WebSearchResult,
        AcademicSearchResult,
        RedditSearchResult,
        XSearchResult,
        YouTubeSearchResult,
        StockChartResult,
        RetrieveResult,
        CurrencyConversionResult,
        DateTimeResult,
    ],
    Field(discriminator="kind"),
]
