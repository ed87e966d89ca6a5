"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from t3chat import __version__
from t3chat.api.routes import router
from t3chat.app import Application
from t3chat.config.settings import get_settings
from t3chat.core.exceptions import ConfigurationError, RateLimitExceeded, T3ChatError
from t3chat.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."


def _error(status_code: int, error: str, details: str | None = None, **headers: str) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers or None)


def register_exception_handlers(app: FastAPI) -> None:
    """Map errors raised before streaming starts to JSON bodies."""

    @app.exception_handler(RateLimitExceeded)
    async def rate_limited(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={"error": RATE_LIMIT_MESSAGE},
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(ConfigurationError)
    async def misconfigured(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error("Configuration error", path=request.url.path, error=exc.message)
        return _error(500, "Internal server error", exc.message)

    @app.exception_handler(T3ChatError)
    async def service_error(request: Request, exc: T3ChatError) -> JSONResponse:
        logger.error("Request failed", path=request.url.path, error=exc.message)
        return _error(500, "Internal server error", exc.message)

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(x) for x in e['loc'])}: {e['msg']}" for e in exc.errors()
        )
        return _error(400, "Invalid request body", details)

    @app.exception_handler(Exception)
    async def unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=True)
        return _error(500, "Internal server error", str(exc))


def create_app(application: Application | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        application: Pre-built Application (tests); a default one is
            created from settings otherwise

    Returns:
        Configured FastAPI application
    """
    settings = application.settings if application else get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """
        Application lifespan manager.

        Handles startup and shutdown events.
        """
        instance = app.state.application
        await instance.startup()
        yield
        await instance.shutdown()

    app = FastAPI(
        title="T3 Chat Search API",
        description="Multi-provider streaming search router with tool-augmented synthesis",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.application = application or Application(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app)
    app.include_router(router)

    return app


def main() -> None:
    """Entry point for running the application."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "t3chat.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
