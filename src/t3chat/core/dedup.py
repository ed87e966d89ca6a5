"""In-flight request deduplication.

Identical requests that arrive while the first one is still running share
its work: one pending task per fingerprint, awaited by every caller. The
entry disappears as soon as the task settles, whether it succeeded or
failed, so results are never cached beyond the in-flight period.
"""

import asyncio
import hashlib
import json
import time
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Protocol, Sequence, TypeVar

from t3chat.utils.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


class _MessageLike(Protocol):
    role: str
    content: str


def request_fingerprint(
    messages: Sequence[_MessageLike],
    model: str,
    chat_id: str | None,
    window_seconds: float,
    now: float | None = None,
    route: str | None = None,
) -> str:
    """
    Fingerprint a request for deduplication.

    Combines normalized message content, model id, message count, chat id,
    route and the coarse time bucket. A non-positive window yields a
    unique fingerprint, which disables merging.

    Args:
        messages: Conversation messages (role, content)
        model: Resolved model id
        chat_id: Chat identifier, if any
        window_seconds: Bucket width in seconds
        now: Clock override (tests)
        route: Route key; the same messages sent to different routes
            never merge

    Returns:
        Hex SHA-256 digest
    """
    if window_seconds <= 0:
        return uuid.uuid4().hex

    moment = time.time() if now is None else now
    payload = {
        "messages": [[m.role, " ".join(m.content.split())] for m in messages],
        "model": model,
        "count": len(messages),
        "chat": chat_id,
        "route": route,
        "bucket": int(moment // window_seconds),
    }
    encoded = json.dumps(payload, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


@dataclass
class InFlight(Generic[T]):
    """One in-flight unit of work and what its callers share."""

    task: "asyncio.Task[T]"
    channel: Any = None


class ActiveRequestMap:
    """
    Fingerprint to in-flight work.

    Registration happens synchronously, between awaits, so two callers on
    the event loop can never both start work for the same fingerprint.
    Each entry can carry a channel (the response stream) registered by
    the caller that started the work, so joiners can follow its output
    before the work completes.

    Usage:
        active = ActiveRequestMap()
        result = await active.dedupe(fingerprint, lambda: do_work())
    """

    def __init__(self) -> None:
        self._active: dict[str, InFlight[Any]] = {}

    def __len__(self) -> int:
        return len(self._active)

    def __contains__(self, fingerprint: str) -> bool:
        return fingerprint in self._active

    def pending(self) -> list["asyncio.Task[Any]"]:
        """Tasks still in flight."""
        return [entry.task for entry in self._active.values()]

    def share(
        self,
        fingerprint: str,
        factory: Callable[[], Awaitable[T]],
        channel: Any = None,
    ) -> tuple[InFlight[T], bool]:
        """
        Get the in-flight entry for a fingerprint, starting it if absent.

        Args:
            fingerprint: Request fingerprint
            factory: Produces the work; called only when no task exists
            channel: Stored with a new entry; ignored when joining

        Returns:
            (entry, created) where created is True for the caller that
            started the work. A joiner gets the creator's channel.
        """
        existing = self._active.get(fingerprint)
        if existing is not None:
            logger.info("Joining in-flight request", fingerprint=fingerprint[:12])
            return existing, False

        entry = InFlight(task=asyncio.ensure_future(factory()), channel=channel)
        self._active[fingerprint] = entry
        entry.task.add_done_callback(lambda t: self._settle(fingerprint, t))
        return entry, True

    async def dedupe(self, fingerprint: str, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run the work once per fingerprint and return its result.

        Every concurrent caller receives the same result object or the
        same exception. A caller being cancelled does not cancel the
        shared work.
        """
        entry, _ = self.share(fingerprint, factory)
        return await asyncio.shield(entry.task)

    def _settle(self, fingerprint: str, task: "asyncio.Task[Any]") -> None:
        entry = self._active.get(fingerprint)
        if entry is not None and entry.task is task:
            del self._active[fingerprint]
        if not task.cancelled() and task.exception() is not None:
            logger.debug(
                "Shared request failed",
                fingerprint=fingerprint[:12],
                error=str(task.exception()),
            )
