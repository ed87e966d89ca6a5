"""FastAPI routes for the search API."""

import uuid
from enum import Enum

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import StreamingResponse

from t3chat import __version__
from t3chat.api.dependencies import ApplicationDep
from t3chat.api.models import ChatRequest, HealthResponse
from t3chat.api.rate_limit import get_client_key
from t3chat.api.sse import stream_events
from t3chat.app import Application
from t3chat.core.dedup import request_fingerprint
from t3chat.core.orchestrator import RequestContext
from t3chat.events.stream import ResponseStream
from t3chat.tools.registry import ToolRegistry
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)
router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


class SearchTopic(str, Enum):
    """Topic path segments. The topic overrides the body's group."""

    ACADEMIC = "academic"
    REDDIT = "reddit"
    X = "x"
    YOUTUBE = "youtube"
    ANALYTICS = "analytics"
    WEB = "web"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns application status and version.
    """
    return HealthResponse(status="ok", version=__version__)


@router.post("/search")
async def search(
    request: Request,
    chat_request: ChatRequest,
    application: ApplicationDep,
) -> StreamingResponse:
    """
    Main search endpoint with SSE streaming.

    The route is picked from the body's ``group``. Events include:
    - response.chunk / reasoning.chunk: Model output
    - tool.start / tool.complete / tool.error: Tool execution status
    - synthesis: Web-search synthesis progress
    - response.done: Always last
    - error: Failure after streaming started
    """
    return await _serve(request, chat_request, chat_request.group, application)


@router.post("/search/{topic}")
async def search_topic(
    request: Request,
    topic: SearchTopic,
    chat_request: ChatRequest,
    application: ApplicationDep,
) -> StreamingResponse:
    """Topic endpoint; same stream as /search with the group fixed by the path."""
    return await _serve(request, chat_request, topic.value, application)


@router.options("/search")
async def search_options() -> Response:
    """CORS preflight."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.options("/search/{topic}")
async def search_topic_options(topic: SearchTopic) -> Response:
    """CORS preflight."""
    return Response(status_code=200, headers=CORS_HEADERS)


async def _serve(
    request: Request,
    chat_request: ChatRequest,
    group: str | None,
    application: Application,
) -> StreamingResponse:
    """
    Admit, route and stream one request.

    Everything that can fail before the first byte (rate limit, unknown
    model, missing keys) raises here and is turned into a JSON error by
    the exception handlers. Later failures arrive in-band.
    """
    if application.is_shutting_down:
        raise HTTPException(status_code=503, detail="Service is shutting down")

    settings = application.settings
    guard = application.guard

    guard.rate_limiter.check(get_client_key(request))

    decision = application.routes.route(group, chat_request.model)
    model = application.registry.resolve(decision.model)
    ToolRegistry.check_configured(decision.tools, settings)

    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    fingerprint = request_fingerprint(
        chat_request.messages,
        decision.model,
        chat_request.id,
        guard.dedupe_window_seconds,
        route=decision.group,
    )

    stream = ResponseStream(request_id)
    context = RequestContext(
        request_id=request_id,
        messages=chat_request.messages,
        decision=decision,
        model=model,
        chat_id=chat_request.id,
        user_id=request.headers.get("X-User-Id"),
    )
    shared, created = guard.active.share(
        fingerprint,
        lambda: application.orchestrator.run(context, stream),
        channel=stream,
    )

    logger.info(
        "Search request",
        request_id=request_id,
        group=decision.group,
        model=decision.model,
        messages=len(chat_request.messages),
        shared=not created,
    )

    # Duplicates follow the first caller's stream while it is still running
    body = stream_events(shared.channel, settings.stream_keepalive_seconds)

    return StreamingResponse(
        body,
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
            "X-Request-ID": request_id,
        },
    )
