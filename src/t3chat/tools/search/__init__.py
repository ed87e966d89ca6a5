"""Search tools backed by external APIs."""

from t3chat.tools.search.academic import AcademicSearchTool
from t3chat.tools.search.reddit import RedditSearchTool
from t3chat.tools.search.retrieve import RetrieveTool
from t3chat.tools.search.web import WebSearchTool
from t3chat.tools.search.x import XSearchTool
from t3chat.tools.search.youtube import YouTubeSearchTool

__all__ = [
    "AcademicSearchTool",
    "RedditSearchTool",
    "RetrieveTool",
    "WebSearchTool",
    "XSearchTool",
    "YouTubeSearchTool",
]
