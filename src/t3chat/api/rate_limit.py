"""Per-client request quota with fixed windows.

Each client gets at most ``requests`` admissions per ``window_seconds``
window. Counters are keyed by (client key, window index) and expire at
the window's end; a background task sweeps expired counters.

Admission is synchronous, so a check-and-increment can never interleave
with another one on the event loop.
"""

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request

from t3chat.core.exceptions import RateLimitExceeded
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)


@dataclass
class RateLimitConfig:
    """Rate limit configuration."""

    requests: int = 10
    window_seconds: float = 60.0

    # Cleanup interval (seconds)
    cleanup_interval: float = 300.0


@dataclass
class RateLimitCounter:
    """Admissions counted for one client in one window."""

    count: int
    reset_at: float


def get_client_key(request: Request) -> str:
    """
    Get unique key for client.

    Prefers the opaque user id, then an API key, then the forwarded
    client address, then the socket peer.
    """
    user_id = request.headers.get("X-User-Id")
    if user_id:
        return f"user:{user_id}"

    api_key = request.headers.get("X-API-Key")
    if api_key:
        return f"key:{api_key}"

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"

    client = request.client
    if client:
        return f"ip:{client.host}"

    return "ip:unknown"


class RateLimiter:
    """
    In-memory fixed-window rate limiter.

    Usage:
        limiter = RateLimiter(RateLimitConfig(requests=10, window_seconds=60))

        if not limiter.admit("user:42"):
            ...
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize rate limiter.

        Args:
            config: Rate limit configuration
            clock: Time source in seconds (tests)
        """
        self._config = config or RateLimitConfig()
        self._clock = clock
        self._counters: dict[tuple[str, int], RateLimitCounter] = {}
        self._cleanup_task: asyncio.Task | None = None

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    def __len__(self) -> int:
        return len(self._counters)

    def admit(self, client_key: str) -> bool:
        """
        Count a request against the client's current window.

        Returns:
            True if admitted, False if the window's ceiling is reached
        """
        now = self._clock()
        window = int(now // self._config.window_seconds)
        key = (client_key, window)

        counter = self._counters.get(key)
        if counter is None:
            counter = RateLimitCounter(
                count=0,
                reset_at=(window + 1) * self._config.window_seconds,
            )
            self._counters[key] = counter

        if counter.count >= self._config.requests:
            return False

        counter.count += 1
        return True

    def retry_after(self, client_key: str) -> int:
        """Whole seconds until the client's current window resets."""
        now = self._clock()
        window = int(now // self._config.window_seconds)
        counter = self._counters.get((client_key, window))
        reset_at = counter.reset_at if counter else now
        return max(1, math.ceil(reset_at - now))

    def check(self, client_key: str) -> None:
        """
        Admit a request or raise.

        Raises:
            RateLimitExceeded: Ceiling reached for the current window
        """
        if self.admit(client_key):
            return
        retry_after = self.retry_after(client_key)
        logger.warning(
            "Rate limit exceeded",
            client=client_key,
            limit=self._config.requests,
            retry_after=retry_after,
        )
        raise RateLimitExceeded(client_key, retry_after)

    def cleanup_all(self) -> int:
        """
        Remove counters whose window has ended.

        Returns:
            Number of counters removed
        """
        now = self._clock()
        expired = [key for key, counter in self._counters.items() if counter.reset_at <= now]
        for key in expired:
            del self._counters[key]

        if expired:
            logger.debug("Cleaned up expired rate limit counters", removed=len(expired))
        return len(expired)

    async def start_cleanup_task(self) -> None:
        """Start background cleanup task."""
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.debug("Started rate limiter cleanup task")

    async def stop_cleanup_task(self) -> None:
        """Stop background cleanup task."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
            logger.debug("Stopped rate limiter cleanup task")

    async def _cleanup_loop(self) -> None:
        """Background task to periodically clean up expired counters."""
        while True:
            await asyncio.sleep(self._config.cleanup_interval)
            try:
                self.cleanup_all()
            except Exception as e:
                logger.error("Rate limiter cleanup error", error=str(e))
