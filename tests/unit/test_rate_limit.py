"""Tests for the fixed-window rate limiter."""

import pytest
from starlette.requests import Request

from t3chat.api.rate_limit import RateLimitConfig, RateLimiter, get_client_key
from t3chat.core.exceptions import RateLimitExceeded


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _request(headers: dict[str, str] | None = None, client: tuple[str, int] | None = None) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/search",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestRateLimiter:
    """Tests for RateLimiter."""

    def test_ceiling_then_next_window(self):
        """Requests beyond the ceiling are rejected until the window resets."""
        clock = FakeClock(1200.0)
        limiter = RateLimiter(RateLimitConfig(requests=10, window_seconds=60), clock=clock)

        assert all(limiter.admit("user:1") for _ in range(10))
        assert limiter.admit("user:1") is False

        clock.now = 1260.0
        assert limiter.admit("user:1") is True

    def test_clients_are_independent(self):
        limiter = RateLimiter(RateLimitConfig(requests=1, window_seconds=60), clock=FakeClock())

        assert limiter.admit("ip:1.1.1.1")
        assert limiter.admit("ip:2.2.2.2")
        assert not limiter.admit("ip:1.1.1.1")

    def test_check_raises_with_retry_after(self):
        clock = FakeClock(1230.0)
        limiter = RateLimiter(RateLimitConfig(requests=1, window_seconds=60), clock=clock)
        limiter.check("user:1")

        with pytest.raises(RateLimitExceeded) as exc_info:
            limiter.check("user:1")

        assert exc_info.value.client_key == "user:1"
        assert exc_info.value.retry_after == 30

    def test_cleanup_removes_expired_counters(self):
        clock = FakeClock(1200.0)
        limiter = RateLimiter(RateLimitConfig(requests=5, window_seconds=60), clock=clock)
        limiter.admit("a")
        limiter.admit("b")
        assert len(limiter) == 2

        assert limiter.cleanup_all() == 0
        clock.now = 1260.0
        assert limiter.cleanup_all() == 2
        assert len(limiter) == 0

    @pytest.mark.asyncio
    async def test_cleanup_task_lifecycle(self):
        limiter = RateLimiter()
        await limiter.start_cleanup_task()
        await limiter.stop_cleanup_task()
        await limiter.stop_cleanup_task()


class TestClientKey:
    """Tests for client identification."""

    def test_user_id_wins(self):
        request = _request({"X-User-Id": "u1", "X-API-Key": "k1"}, client=("9.9.9.9", 1))
        assert get_client_key(request) == "user:u1"

    def test_api_key(self):
        assert get_client_key(_request({"X-API-Key": "k1"})) == "key:k1"

    def test_forwarded_for_first_entry(self):
        request = _request({"X-Forwarded-For": "1.2.3.4, 10.0.0.1"}, client=("9.9.9.9", 1))
        assert get_client_key(request) == "ip:1.2.3.4"

    def test_socket_peer(self):
        assert get_client_key(_request(client=("9.9.9.9", 1))) == "ip:9.9.9.9"

    def test_unknown(self):
        assert get_client_key(_request()) == "ip:unknown"
