"""After-stream work: title the chat and record it.

Runs detached from the response so a slow title model or an unavailable
persistence backend never delays or breaks the stream. Failures are
logged and dropped.
"""

import asyncio
import re
from typing import Protocol, Sequence

from t3chat.config.prompts import TITLE_PROMPT, TITLE_SYSTEM_PROMPT
from t3chat.config.settings import Settings
from t3chat.persistence.base import PersistenceClient
from t3chat.utils.llm import ProviderRegistry
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_TITLE = "New Conversation"
MAX_TITLE_CHARS = 80
MAX_FALLBACK_CHARS = 50
PREVIEW_CHARS = 200


class _MessageLike(Protocol):
    role: str
    content: str


def fallback_chat_title(first_message: str) -> str:
    """
    Derive a title from the first user message without a model call.

    Keeps the first four words longer than two characters, with
    punctuation removed and the first letter capitalized.

    Args:
        first_message: The opening user message

    Returns:
        A title of at most 50 characters
    """
    if not first_message or not first_message.strip():
        return DEFAULT_TITLE

    cleaned = re.sub(r"\s+", " ", first_message.strip())
    cleaned = re.sub(r"[^\w\s]", "", cleaned, flags=re.ASCII)

    words = [word for word in cleaned.split(" ") if len(word) > 2][:4]
    if not words:
        short = " ".join(cleaned.split(" ")[:3])[:40].strip()
        return short or DEFAULT_TITLE

    title = " ".join(words)
    title = title[0].upper() + title[1:]
    if len(title) > MAX_FALLBACK_CHARS:
        title = title[: MAX_FALLBACK_CHARS - 3] + "..."
    return title


def _clean_title(raw: str) -> str:
    lines = raw.strip().splitlines()
    title = lines[0].strip().strip("\"'").strip() if lines else ""
    return title[:MAX_TITLE_CHARS]


class CompletionHook:
    """
    Titles and records a chat once its first answer has streamed.

    Usage:
        hook = CompletionHook(registry, persistence, settings)
        hook.schedule(messages, chat_id="c1", assistant_response=text)
        ...
        await hook.drain()
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        persistence: PersistenceClient,
        settings: Settings,
    ):
        self._registry = registry
        self._persistence = persistence
        self._title_model = settings.title_model
        self._title_timeout = settings.title_timeout_seconds
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    @staticmethod
    def applies(
        messages: Sequence[_MessageLike],
        chat_id: str | None,
        assistant_response: str,
    ) -> bool:
        """Only a chat's first exchange with a produced answer is recorded."""
        user_messages = [m for m in messages if m.role == "user"]
        return len(user_messages) == 1 and bool(chat_id) and bool(assistant_response)

    def schedule(
        self,
        messages: Sequence[_MessageLike],
        chat_id: str | None,
        assistant_response: str,
        user_id: str | None = None,
    ) -> asyncio.Task | None:
        """
        Start the hook in the background if it applies.

        Returns:
            The detached task, or None when nothing is recorded
        """
        if not self.applies(messages, chat_id, assistant_response):
            return None

        first_user_message = next(m.content for m in messages if m.role == "user")
        task = asyncio.create_task(
            self.run(chat_id, first_user_message, assistant_response, user_id)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def generate_title(self, first_user_message: str, assistant_response: str) -> str:
        """
        Ask the title model for a title, falling back to the heuristic.

        Never raises.
        """
        prompt = TITLE_PROMPT.format(
            user_message=first_user_message,
            assistant_preview=assistant_response[:PREVIEW_CHARS],
        )
        try:
            handle = self._registry.resolve(self._title_model)
            response = await asyncio.wait_for(
                handle.complete(prompt, system=TITLE_SYSTEM_PROMPT, max_tokens=64, temperature=0.3),
                timeout=self._title_timeout,
            )
            title = _clean_title(response.content)
        except Exception as e:
            logger.warning("Title generation failed", model=self._title_model, error=str(e))
            title = ""

        return title or fallback_chat_title(first_user_message)

    async def run(
        self,
        chat_id: str,
        first_user_message: str,
        assistant_response: str,
        user_id: str | None = None,
    ) -> None:
        """Title and record the chat. Errors are logged, never raised."""
        try:
            title = await self.generate_title(first_user_message, assistant_response)
            await self._persistence.create_chat_if_not_exists(
                chat_id=chat_id,
                title=title,
                first_user_message=first_user_message,
                assistant_response=assistant_response,
                user_id=user_id,
            )
            logger.info("Completion hook finished", chat_id=chat_id, title=title)
        except Exception as e:
            logger.error("Completion hook failed", chat_id=chat_id, error=str(e), exc_info=True)

    async def drain(self) -> None:
        """Wait for every scheduled hook to finish."""
        if self._pending:
            logger.info("Waiting for completion hooks", pending=len(self._pending))
            await asyncio.gather(*list(self._pending), return_exceptions=True)
