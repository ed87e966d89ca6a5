"""Application class with startup/shutdown lifecycle."""

import asyncio

import httpx

from t3chat.config.settings import Settings, get_settings
from t3chat.core.completion import CompletionHook
from t3chat.core.guard import RequestGuard
from t3chat.core.orchestrator import StreamOrchestrator
from t3chat.core.router import RouteTable
from t3chat.core.synthesizer import Synthesizer
from t3chat.persistence import ConvexPersistence, InMemoryPersistence, PersistenceClient
from t3chat.tools import register_tools
from t3chat.utils.llm import ProviderRegistry
from t3chat.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)


class Application:
    """
    Owns every long-lived collaborator of the service.

    Handles:
    - Shared HTTP client for search providers and persistence
    - Provider registry, guard, synthesizer and orchestrator wiring
    - Draining in-flight responses and completion hooks on shutdown

    Collaborators passed to the constructor are used as is, which is how
    tests swap in fake providers and mocked transports.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        registry: ProviderRegistry | None = None,
        persistence: PersistenceClient | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or get_settings()
        self._owns_http = http is None
        self.http = http
        self.registry = registry
        self.persistence = persistence
        self.guard: RequestGuard | None = None
        self.synthesizer: Synthesizer | None = None
        self.completion_hook: CompletionHook | None = None
        self.orchestrator: StreamOrchestrator | None = None
        self.routes: RouteTable | None = None
        self._is_shutting_down = False
        self._started = False

    async def startup(self) -> None:
        """Initialize resources on startup."""
        if self._started:
            return
        settings = self.settings
        configure_logging(settings.log_level)
        logger.info("Starting application...")

        register_tools()

        if self.http is None:
            self.http = httpx.AsyncClient(timeout=httpx.Timeout(settings.search_timeout_seconds))
        if self.registry is None:
            self.registry = ProviderRegistry(settings)
        if self.persistence is None:
            if settings.convex_url:
                self.persistence = ConvexPersistence(
                    self.http,
                    settings.convex_url,
                    deploy_key=settings.convex_deploy_key or "",
                )
                logger.info("Persistence initialized", backend="convex")
            else:
                self.persistence = InMemoryPersistence()
                logger.info("Persistence initialized", backend="memory")

        self.guard = RequestGuard.from_settings(settings)
        await self.guard.start()

        self.synthesizer = Synthesizer(self.registry, settings)
        self.completion_hook = CompletionHook(self.registry, self.persistence, settings)
        self.orchestrator = StreamOrchestrator(
            self.http,
            settings,
            synthesizer=self.synthesizer,
            completion_hook=self.completion_hook,
        )
        self.routes = RouteTable(default_model=settings.default_model)

        self._started = True
        logger.info("Application started", routes=self.routes.keys)

    async def shutdown(self, timeout: float = 30.0) -> None:
        """
        Graceful shutdown with timeout.

        1. Stop accepting new requests
        2. Wait for in-flight responses and completion hooks (with timeout)
        3. Stop the rate limiter sweep
        4. Close providers, persistence and the HTTP client

        Args:
            timeout: Maximum time to wait for pending work
        """
        if not self._started:
            return
        logger.info("Shutdown initiated...")
        self._is_shutting_down = True

        try:
            await asyncio.wait_for(self._drain(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Timeout waiting for pending work, forcing shutdown")

        await self.guard.stop()
        await self.registry.close()
        await self.persistence.close()
        if self._owns_http:
            await self.http.aclose()

        self._started = False
        logger.info("Shutdown complete")

    async def _drain(self) -> None:
        pending = self.guard.active.pending()
        if pending:
            logger.info("Waiting for in-flight responses", pending=len(pending))
            await asyncio.gather(*pending, return_exceptions=True)
        await self.completion_hook.drain()

    @property
    def is_shutting_down(self) -> bool:
        """Check if application is shutting down."""
        return self._is_shutting_down
