"""Shared admission state for the search endpoints."""

from t3chat.api.rate_limit import RateLimitConfig, RateLimiter
from t3chat.config.settings import Settings
from t3chat.core.dedup import ActiveRequestMap
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)


class RequestGuard:
    """
    Deduplicator and rate limiter, constructed once per process.

    Owns the rate limiter's sweep task. Handlers receive the guard
    through dependency injection rather than module globals.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter | None = None,
        active: ActiveRequestMap | None = None,
        dedupe_window_seconds: float = 1.0,
    ):
        self.rate_limiter = rate_limiter or RateLimiter()
        self.active = active or ActiveRequestMap()
        self.dedupe_window_seconds = dedupe_window_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "RequestGuard":
        return cls(
            rate_limiter=RateLimiter(
                RateLimitConfig(
                    requests=settings.rate_limit_requests,
                    window_seconds=settings.rate_limit_window_seconds,
                    cleanup_interval=settings.rate_limit_sweep_seconds,
                )
            ),
            dedupe_window_seconds=settings.dedupe_window_seconds,
        )

    async def start(self) -> None:
        await self.rate_limiter.start_cleanup_task()

    async def stop(self) -> None:
        await self.rate_limiter.stop_cleanup_task()
        if len(self.active):
            logger.info("Stopping with requests in flight", in_flight=len(self.active))
