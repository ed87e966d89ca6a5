"""Tests for in-flight request deduplication."""

import asyncio

import pytest

from t3chat.api.models import Message
from t3chat.core.dedup import ActiveRequestMap, request_fingerprint


def _messages(*contents: str) -> list[Message]:
    return [Message(role="user", content=c) for c in contents]


class TestRequestFingerprint:
    """Tests for request fingerprints."""

    def test_same_bucket_same_fingerprint(self):
        """Requests in the same second share a fingerprint."""
        a = request_fingerprint(_messages("hi"), "t3-4o", "c1", 1.0, now=100.2)
        b = request_fingerprint(_messages("hi"), "t3-4o", "c1", 1.0, now=100.9)
        assert a == b

    def test_whitespace_is_normalized(self):
        a = request_fingerprint(_messages("what  is\nthis"), "t3-4o", None, 1.0, now=5.0)
        b = request_fingerprint(_messages(" what is this "), "t3-4o", None, 1.0, now=5.0)
        assert a == b

    def test_differences_change_fingerprint(self):
        """Model, chat id, bucket, route and content all matter."""
        base = request_fingerprint(_messages("hi"), "t3-4o", "c1", 1.0, now=10.0)
        assert base != request_fingerprint(_messages("hi"), "t3-4o-mini", "c1", 1.0, now=10.0)
        assert base != request_fingerprint(_messages("hi"), "t3-4o", "c2", 1.0, now=10.0)
        assert base != request_fingerprint(_messages("hi"), "t3-4o", "c1", 1.0, now=11.0)
        assert base != request_fingerprint(_messages("hey"), "t3-4o", "c1", 1.0, now=10.0)
        assert base != request_fingerprint(
            _messages("hi"), "t3-4o", "c1", 1.0, now=10.0, route="web"
        )

    def test_zero_window_disables_merging(self):
        a = request_fingerprint(_messages("hi"), "t3-4o", "c1", 0, now=10.0)
        b = request_fingerprint(_messages("hi"), "t3-4o", "c1", 0, now=10.0)
        assert a != b


class TestActiveRequestMap:
    """Tests for the shared in-flight map."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_run_work_once(self):
        """Every concurrent caller gets the same result object."""
        active = ActiveRequestMap()
        calls = 0
        release = asyncio.Event()

        async def work():
            nonlocal calls
            calls += 1
            await release.wait()
            return {"answer": 42}

        callers = [asyncio.create_task(active.dedupe("fp", work)) for _ in range(3)]
        await asyncio.sleep(0)
        assert "fp" in active
        release.set()
        results = await asyncio.gather(*callers)

        assert calls == 1
        assert results[0] is results[1] is results[2]

    @pytest.mark.asyncio
    async def test_failure_reaches_every_caller(self):
        active = ActiveRequestMap()

        async def work():
            await asyncio.sleep(0)
            raise RuntimeError("boom")

        results = await asyncio.gather(
            active.dedupe("fp", work),
            active.dedupe("fp", work),
            return_exceptions=True,
        )

        assert all(isinstance(r, RuntimeError) for r in results)
        assert results[0] is results[1]

    @pytest.mark.asyncio
    async def test_entry_removed_after_settling(self):
        """Results are not cached beyond the in-flight period."""
        active = ActiveRequestMap()
        calls = 0

        async def work():
            nonlocal calls
            calls += 1
            return calls

        assert await active.dedupe("fp", work) == 1
        await asyncio.sleep(0)
        assert len(active) == 0
        assert await active.dedupe("fp", work) == 2

    @pytest.mark.asyncio
    async def test_share_reports_creator(self):
        active = ActiveRequestMap()

        async def work():
            await asyncio.sleep(0)
            return "done"

        first, created = active.share("fp", work, channel="stream-1")
        second, joined = active.share("fp", work, channel="stream-2")

        assert created is True
        assert joined is False
        assert first is second
        assert second.channel == "stream-1"
        assert active.pending() == [first.task]
        assert await first.task == "done"

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_work(self):
        active = ActiveRequestMap()
        release = asyncio.Event()

        async def work():
            await release.wait()
            return "done"

        waiter = asyncio.create_task(active.dedupe("fp", work))
        await asyncio.sleep(0)
        entry, _ = active.share("fp", work)
        waiter.cancel()
        await asyncio.sleep(0)

        release.set()
        assert await entry.task == "done"
